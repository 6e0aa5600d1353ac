"""Shared utility functions for the NetBeez MCP agent tools package.

Provides the standard tool response shape, the small builders that turn
flat tool parameters into ``QueryOptions`` pieces, and ``run_tool``, which
wraps one client call with the error handling every tool shares.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..exceptions import NetBeezError, NetBeezNotFoundError
from ..models import JobOutcome, ResponseEnvelope
from ..query import Ordering, Pagination
from .errors import ToolError

if TYPE_CHECKING:
    from ..client import NetBeezClient

logger = logging.getLogger(__name__)


def make_response(
    *,
    success: bool,
    data: Any = None,
    message: str = "",
    action: str = "",
    error: str | None = None,
) -> dict[str, Any]:
    """Create a standardized tool response dict.

    All tools return responses in this format for consistency.

    Args:
        success: Whether the operation succeeded.
        data: The result data.
        message: Human-readable result description.
        action: The action that was performed.
        error: Error code if the operation failed.

    Returns:
        A dict with success, data, message, action, and error keys.
    """
    return {
        "success": success,
        "data": data,
        "message": message,
        "action": action,
        "error": error,
    }


def build_pagination(page: int | None, page_size: int | None) -> Pagination | None:
    """Return a ``Pagination`` when either bound is set, else None."""
    if page is None and page_size is None:
        return None
    return Pagination(page=page, page_size=page_size)


def build_ordering(attributes: str | None, direction: str | None = None) -> Ordering | None:
    """Return an ``Ordering`` for ``attributes``; direction defaults to desc."""
    if not attributes:
        return None
    return Ordering(attributes=attributes, direction=direction or "desc")


def summarize(result: Any, label: str) -> str:
    """Build the human-readable message for a successful call."""
    if isinstance(result, ResponseEnvelope):
        if isinstance(result.data, list):
            return f"Retrieved {len(result.data)} {label}"
        if result.data is None and result.model_extra:
            keys = ", ".join(sorted(result.model_extra))
            return f"Retrieved {label} ({keys})"
        return f"Retrieved {label}"
    return f"Completed {label}"


def serialize(result: Any) -> Any:
    """Convert client results into plain JSON-compatible data."""
    if isinstance(result, (ResponseEnvelope, JobOutcome)):
        return result.to_dict()
    return result


def run_tool(
    action: str,
    call: Callable[[NetBeezClient], Any],
    label: str,
) -> dict[str, Any]:
    """Run ``call`` against the server-wide client and shape the response.

    Expected failures never escape: missing configuration, invalid
    parameters and NetBeez API errors all come back as ``success=False``
    responses carrying the error code. Anything else is logged with its
    traceback and reported as ``UNEXPECTED_ERROR``.

    Args:
        action: Tool name reported in the response.
        call: Receives the ``NetBeezClient`` and returns an envelope,
            a ``JobOutcome`` or a ready response dict.
        label: Noun used in the success message (e.g. ``"agent(s)"``).

    Returns:
        A dict with success, data, message, action, and error keys.
    """
    from ..server import get_client, handle_tool_error

    try:
        client = get_client()
    except NetBeezError as exc:
        logger.error("Failed to get NetBeez client: %s", exc.message)
        return make_response(
            success=False,
            message=f"NetBeez client not available: {exc.message}",
            action=action,
            error=exc.error_code,
        )

    try:
        result = call(client)
    except ToolError as exc:
        return make_response(
            success=False,
            data=exc.details or None,
            message=exc.message,
            action=action,
            error=exc.error_code,
        )
    except ValueError as exc:
        return make_response(
            success=False,
            message=str(exc),
            action=action,
            error="VALIDATION_ERROR",
        )
    except NetBeezNotFoundError as exc:
        logger.warning("Resource not found during %s: %s", action, exc.message)
        return make_response(
            success=False,
            data=exc.to_dict(),
            message=exc.message,
            action=action,
            error=exc.error_code,
        )
    except NetBeezError as exc:
        logger.error("NetBeez error during %s: %s", action, exc.message)
        return make_response(
            success=False,
            data=exc.to_dict(),
            message=exc.message,
            action=action,
            error=exc.error_code,
        )
    except Exception as exc:
        details = handle_tool_error(exc)
        return make_response(
            success=False,
            data=details,
            message=f"Unexpected error during {action}: {details['error']}",
            action=action,
            error=details["error_code"],
        )

    if isinstance(result, dict) and "success" in result:
        return result

    return make_response(
        success=True,
        data=serialize(result),
        message=summarize(result, label),
        action=action,
    )
