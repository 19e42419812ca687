"""Common CLI argument registration helpers."""
from __future__ import annotations

import argparse


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_root_flag(parser: argparse.ArgumentParser) -> None:
    """Add --root flag overriding the template root directory."""
    parser.add_argument(
        "--root",
        type=str,
        help="Template root directory (default: config file value or current directory)",
    )


def add_config_flag(parser: argparse.ArgumentParser) -> None:
    """Add --config flag selecting a YAML configuration file."""
    parser.add_argument(
        "--config",
        type=str,
        help="Path to a templayer YAML config (default: ./templayer.yaml when present)",
    )


def add_engine_flags(parser: argparse.ArgumentParser) -> None:
    """Add the flags every engine-backed command accepts."""
    add_root_flag(parser)
    add_config_flag(parser)
    add_json_flag(parser)


__all__ = [
    "add_json_flag",
    "add_root_flag",
    "add_config_flag",
    "add_engine_flags",
]
