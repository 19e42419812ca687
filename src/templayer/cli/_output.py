"""CLI output formatting.

Every command supports a text mode and a ``--json`` mode.
"""
from __future__ import annotations

import json
import sys
from typing import Any, Dict, Optional

from templayer.exceptions import TemplayerError


class OutputFormatter:
    """Output formatter for CLI commands."""

    def __init__(self, json_mode: bool = False, indent: int = 2):
        self.json_mode = json_mode
        self.indent = indent

    def success(
        self,
        data: Dict[str, Any],
        message: str,
        *,
        status: str = "success",
    ) -> None:
        """Output a success result.

        Args:
            data: Result data dictionary (JSON mode)
            message: Human-readable message (text mode)
            status: Status string for JSON output
        """
        if self.json_mode:
            output = {"status": status, **data}
            print(json.dumps(output, indent=self.indent, default=str))
        else:
            print(message)

    def error(
        self,
        error: Exception,
        message: Optional[str] = None,
        *,
        error_code: str = "error",
    ) -> None:
        """Output an error result to stderr.

        ``TemplayerError`` instances contribute their class name and context
        to the JSON payload.
        """
        msg = message or str(error)
        if self.json_mode:
            if isinstance(error, TemplayerError):
                output = {"error": error_code, **error.to_json_error()}
                output["message"] = msg
            else:
                output = {"error": error_code, "message": msg}
            print(json.dumps(output, indent=self.indent, default=str), file=sys.stderr)
        else:
            print(f"Error: {msg}", file=sys.stderr)

    def json_output(self, data: Any) -> None:
        print(json.dumps(data, indent=self.indent, default=str))

    def text(self, message: str) -> None:
        print(message)


__all__ = ["OutputFormatter"]
