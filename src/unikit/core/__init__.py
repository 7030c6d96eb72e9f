"""
Core descriptor handling: reading, namespace extraction and model building.
"""

from pathlib import Path

from .builder import SUBSYSTEM_PARSERS, build_app_config
from .descriptor import RawEntry, extract_key, extract_namespace, parse_lines, read_descriptor
from .models import (
    AppConfig,
    Dependencies,
    DhcpNetwork,
    FilesystemConfig,
    FilesystemMount,
    HttpListener,
    HttpMain,
    IpMain,
    StaticNetwork,
)


def load_app_config(path: str | Path) -> AppConfig:
    """Read a descriptor file and build its AppConfig."""
    path = Path(path)
    return build_app_config(read_descriptor(path), path)


__all__ = [
    "RawEntry",
    "parse_lines",
    "read_descriptor",
    "extract_namespace",
    "extract_key",
    "SUBSYSTEM_PARSERS",
    "build_app_config",
    "load_app_config",
    "AppConfig",
    "Dependencies",
    "DhcpNetwork",
    "StaticNetwork",
    "FilesystemConfig",
    "FilesystemMount",
    "HttpListener",
    "HttpMain",
    "IpMain",
]
