"""Shared pytest fixtures for unikit tests."""

from collections.abc import Callable
from pathlib import Path

import pytest


@pytest.fixture
def write_descriptor(tmp_path: Path) -> Callable[..., Path]:
    """Return a helper that writes a descriptor file into tmp_path."""

    def _write(text: str, name: str = "app.conf") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def dhcp_descriptor(write_descriptor: Callable[..., Path]) -> Path:
    """A small descriptor: DHCP networking, IP main, two dependencies."""
    return write_descriptor(
        """
main-ip: Start
ip-use-dhcp: true
depends: foo, bar
"""
    )
