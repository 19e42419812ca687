"""
templayer inspect command.

SUMMARY: Show a template's inheritance chain and named entries
"""

from __future__ import annotations

import argparse
import sys

from templayer.cli import OutputFormatter, add_engine_flags, build_engine

SUMMARY = "Show a template's inheritance chain and named entries"


def register_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("name", help="Logical template name")
    add_engine_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        engine = build_engine(args)
        resolved = engine.lookup(args.name)
        chain = engine.chain(args.name)

        if formatter.json_mode:
            formatter.json_output({**resolved.to_dict(), "chain": chain})
        else:
            formatter.text(f"Chain: {' -> '.join(chain)}")
            formatter.text(resolved.describe())
        return 0
    except Exception as e:
        formatter.error(e, error_code="inspect_error")
        return 1


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
