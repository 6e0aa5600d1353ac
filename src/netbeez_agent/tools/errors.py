"""Errors raised by tool functions before any request reaches NetBeez.

These never leave a tool: ``run_tool`` turns them into ``success=False``
responses whose ``data`` carries the error details.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class ToolError(Exception):
    """Base class for tool-level failures.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable code reported in the tool response.
        details: Structured context, returned as the response ``data``.
    """

    error_code = "TOOL_ERROR"

    def __init__(
        self,
        message: str = "Tool error",
        details: dict[str, Any] | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = details or {}
        if error_code is not None:
            self.error_code = error_code

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"error": self.message, "error_code": self.error_code}
        if self.details:
            result["details"] = self.details
        return result


class InvalidParameterError(ToolError):
    """A tool argument is out of range, not an allowed choice, or missing.

    When ``parameter`` is given, the details name it along with the
    rejected ``value`` and, if known, the ``valid`` choices.
    """

    error_code = "INVALID_PARAMETER"

    def __init__(
        self,
        message: str = "Invalid parameter",
        parameter: str | None = None,
        value: Any = None,
        valid: Iterable[Any] | None = None,
    ) -> None:
        details: dict[str, Any] = {}
        if parameter is not None:
            details["parameter"] = parameter
            details["value"] = value
        if valid is not None:
            details["valid"] = sorted(valid)
        super().__init__(message, details)
