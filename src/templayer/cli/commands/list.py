"""
templayer list command.

SUMMARY: List the logical names of every loaded template
"""

from __future__ import annotations

import argparse
import sys

from templayer.cli import OutputFormatter, add_engine_flags, build_engine

SUMMARY = "List the logical names of every loaded template"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--format",
        choices=["name", "detail"],
        default="name",
        help="Output format (default: name). 'detail' adds the parent of each template.",
    )
    add_engine_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        engine = build_engine(args)
        rows = [engine.lookup(name).to_dict() for name in engine.template_names]

        if formatter.json_mode:
            formatter.json_output({"templates": rows})
            return 0

        if not rows:
            formatter.text("No templates found.")
        elif args.format == "detail":
            for row in rows:
                parent = row.get("parent") or "-"
                formatter.text(f"{row['name']}\t{parent}")
        else:
            for row in rows:
                formatter.text(row["name"])
        return 0
    except Exception as e:
        formatter.error(e, error_code="list_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
