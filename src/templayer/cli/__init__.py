"""
templayer CLI package.

Commands are auto-discovered from ``commands/``; each module provides
``SUMMARY``, ``register_args(parser)`` and ``main(args) -> int``.

Framework utilities for building commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Engine construction and data loading
"""
from ._output import OutputFormatter
from ._args import add_config_flag, add_engine_flags, add_json_flag, add_root_flag
from ._utils import build_engine, build_options, load_data_file, parse_assignments

__all__ = [
    "OutputFormatter",
    "add_config_flag",
    "add_engine_flags",
    "add_json_flag",
    "add_root_flag",
    "build_engine",
    "build_options",
    "load_data_file",
    "parse_assignments",
]
