"""
templayer render command.

SUMMARY: Render a template with data from a file and/or key=value pairs
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from templayer.cli import (
    OutputFormatter,
    add_engine_flags,
    build_engine,
    load_data_file,
    parse_assignments,
)

SUMMARY = "Render a template with data from a file and/or key=value pairs"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name", help="Logical template name (e.g. pages/home.html)")
    parser.add_argument(
        "--data",
        type=str,
        help="YAML or JSON file holding the render data mapping",
    )
    parser.add_argument(
        "--set",
        dest="assignments",
        action="append",
        metavar="KEY=VALUE",
        help="Set one data key (repeatable; values are parsed as JSON when possible)",
    )
    parser.add_argument(
        "--output",
        "-o",
        type=str,
        help="Write output to this file instead of stdout",
    )
    add_engine_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        data = load_data_file(Path(args.data)) if args.data else {}
        data.update(parse_assignments(args.assignments))
        engine = build_engine(args)

        if args.output:
            # Render fully before touching the output file.
            content = engine.render(args.name, data)
            output = Path(args.output)
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(content, encoding="utf-8")
            formatter.success(
                {"template": args.name, "output": str(output)},
                f"Rendered {args.name} -> {output}",
            )
            return 0

        if formatter.json_mode:
            formatter.json_output({"template": args.name, "content": engine.render(args.name, data)})
        else:
            engine.render_to(sys.stdout, args.name, data)
        return 0
    except Exception as e:
        formatter.error(e, error_code="render_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
