"""Tests for the netbeez_agent package structure and metadata."""

from __future__ import annotations


def test_package_is_importable() -> None:
    """Verify the package can be imported."""
    import netbeez_agent

    assert netbeez_agent is not None


def test_version_is_set() -> None:
    """Verify __version__ is defined and follows semver."""
    from netbeez_agent import __version__

    assert __version__ == "0.1.0"
    parts = __version__.split(".")
    assert len(parts) == 3
    assert all(part.isdigit() for part in parts)


def test_public_exports() -> None:
    """Verify every name in __all__ resolves on the package."""
    import netbeez_agent

    for name in netbeez_agent.__all__:
        assert hasattr(netbeez_agent, name), name


def test_tools_package_exports() -> None:
    """Verify the tools package exposes every tool function."""
    from netbeez_agent import tools
    from netbeez_agent.server import TOOL_FUNCTIONS

    assert set(tools.__all__) == {fn.__name__ for fn in TOOL_FUNCTIONS}
