"""MCP tool for NetBeez WiFi profiles (SSID, encryption, authentication)."""

from __future__ import annotations

from typing import Any

from ..query import QueryOptions
from .utils import build_pagination, run_tool


def list_wifi_profiles(
    filter_ssid: str | None = None,
    filter_description: str | None = None,
    filter_encryption_method: str | None = None,
    filter_authentication_method: str | None = None,
    filter_open_incident: bool | None = None,
    page: int | None = None,
    page_size: int | None = None,
) -> dict[str, Any]:
    """List WiFi profiles used by wireless agents.

    Args:
        filter_ssid: SSID name.
        filter_description: Description text.
        filter_encryption_method: Encryption method.
        filter_authentication_method: Authentication method.
        filter_open_incident: Only profiles with (True) or without (False)
            open incidents.
        page: Page offset.
        page_size: Results per page.

    Returns:
        A dict with success status, data, message, action, and error fields.
    """

    def call(client: Any) -> Any:
        return client.list_wifi_profiles(
            QueryOptions(
                filters={
                    "ssid": filter_ssid,
                    "description": filter_description,
                    "encryption_method": filter_encryption_method,
                    "authentication_method": filter_authentication_method,
                    "open_incident": filter_open_incident,
                },
                pagination=build_pagination(page, page_size),
            )
        )

    return run_tool("list_wifi_profiles", call, "WiFi profile(s)")
