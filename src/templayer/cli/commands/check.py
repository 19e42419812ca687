"""
templayer check command.

SUMMARY: Load every template and report the first error
"""

from __future__ import annotations

import argparse
import sys

from templayer.cli import OutputFormatter, add_engine_flags, build_engine

SUMMARY = "Load every template and report the first error"


def register_args(parser: argparse.ArgumentParser) -> None:
    add_engine_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))
    try:
        engine = build_engine(args)
    except Exception as e:
        formatter.error(e, error_code="check_error")
        return 1

    names = engine.template_names
    formatter.success(
        {"templates": len(names), "root": str(engine.options.root)},
        f"OK: {len(names)} templates loaded from {engine.options.root}",
    )
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    register_args(parser)
    cli_args = parser.parse_args()
    sys.exit(main(cli_args))
