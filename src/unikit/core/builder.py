"""
Model builder: descriptor entries to a validated AppConfig.

Each namespace maps to one parser function. A parser receives only the
entries of its namespace (prefix already stripped) and returns a typed
model, or raises ValidationError. Keys outside every known namespace are
ignored so that newer descriptors still load.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

from .descriptor import RawEntry, extract_key, extract_namespace
from .errors import make_validation_error
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

logger = logging.getLogger(__name__)

BIND_ALL = "*"
DEPENDS_KEY = "depends"


def _first(entries: Sequence[RawEntry], name: str) -> RawEntry | None:
    for entry in entries:
        if entry.key == name:
            return entry
    return None


def parse_filesystem(entries: Sequence[RawEntry], base_dir: Path) -> FilesystemConfig:
    """Build filesystem mounts from ``fs-<name>: <dir>`` entries."""
    mounts = []
    for entry in entries:
        source = base_dir / entry.value
        if not source.is_dir():
            raise make_validation_error(f"The directory {source} does not exist.")
        mounts.append(FilesystemMount(name=entry.key, source_path=source))
    return FilesystemConfig(mounts=tuple(mounts))


def parse_network(entries: Sequence[RawEntry]) -> DhcpNetwork | StaticNetwork:
    """
    Build the network model from ``ip-*`` entries.

    ``ip-use-dhcp: true`` wins over any static settings. Missing static
    fields fall back to the defaults.
    """
    use_dhcp = _first(entries, "use-dhcp")
    if use_dhcp is not None and use_dhcp.value == "true":
        return DhcpNetwork()

    fields: dict[str, Any] = {}
    for name in ("address", "netmask", "gateway"):
        entry = _first(entries, name)
        if entry is not None:
            fields[name] = entry.value
    return StaticNetwork(**fields)


def parse_http(entries: Sequence[RawEntry], descriptor: Path | None = None) -> HttpListener | None:
    """Build the HTTP listener from ``http-port`` and ``http-address``."""
    port_entry = _first(entries, "port")
    address_entry = _first(entries, "address")
    if port_entry is None or address_entry is None:
        if port_entry is not None or address_entry is not None:
            logger.warning(
                "Ignoring HTTP listener: both http-port and http-address are required"
            )
        return None

    try:
        port = int(port_entry.value)
    except ValueError:
        raise make_validation_error(
            f"{port_entry.value!r} is not a valid port number.",
            file=descriptor,
            line=port_entry.line or None,
        ) from None

    bind_address = None if address_entry.value == BIND_ALL else address_entry.value
    return HttpListener(port=port, bind_address=bind_address)


def parse_entry_point(
    entries: Sequence[RawEntry], descriptor: Path | None = None
) -> IpMain | HttpMain:
    """Select the single main function from ``main-ip`` / ``main-http``."""
    ip_main = _first(entries, "ip")
    http_main = _first(entries, "http")

    if ip_main is not None and http_main is not None:
        raise make_validation_error(
            "Too many main functions.",
            file=descriptor,
            line=http_main.line or None,
        )
    if ip_main is not None:
        return IpMain(symbol=ip_main.value)
    if http_main is not None:
        return HttpMain(symbol=http_main.value)
    raise make_validation_error(
        "No main function is specified. "
        "You need to add 'main-ip: <NAME>' or 'main-http: <NAME>'.",
        file=descriptor,
    )


def parse_dependencies(entries: Sequence[RawEntry]) -> Dependencies:
    """Collect library names from every ``depends: a, b`` entry."""
    names: list[str] = []
    for entry in entries:
        for item in entry.value.split(","):
            item = item.strip()
            if item and item not in names:
                names.append(item)
    return Dependencies(names=tuple(names))


# Namespace -> parser. Each parser takes (entries, descriptor_path).
SUBSYSTEM_PARSERS: dict[str, Callable[[Sequence[RawEntry], Path], Any]] = {
    "fs": lambda entries, path: parse_filesystem(entries, path.parent),
    "ip": lambda entries, path: parse_network(entries),
    "http": parse_http,
    "main": parse_entry_point,
}

SUBSYSTEM_FIELDS = {
    "fs": "filesystem",
    "ip": "network",
    "http": "http",
    "main": "entry_point",
}


def build_app_config(entries: Sequence[RawEntry], descriptor_path: Path) -> AppConfig:
    """
    Build and validate the full application configuration.

    Args:
        entries: Parsed descriptor entries, in file order
        descriptor_path: Path of the descriptor; relative paths resolve
            against its directory

    Returns:
        A frozen AppConfig

    Raises:
        ValidationError: On missing or contradictory settings
    """
    descriptor_path = descriptor_path.resolve()
    fields: dict[str, Any] = {}
    for namespace, parser in SUBSYSTEM_PARSERS.items():
        subsystem_entries = extract_namespace(entries, namespace)
        fields[SUBSYSTEM_FIELDS[namespace]] = parser(subsystem_entries, descriptor_path)
    fields["dependencies"] = parse_dependencies(extract_key(entries, DEPENDS_KEY))

    config = AppConfig(
        name=descriptor_path.stem,
        descriptor_path=descriptor_path,
        **fields,
    )

    logger.debug("Built configuration for %s: %s", config.name, config)
    return config
