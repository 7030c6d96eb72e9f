"""
Application descriptor reader.

A descriptor is a UTF-8 text file with one ``key: value`` pair per line::

    fs-static: ./htdocs
    ip-use-dhcp: true
    http-port: 80
    http-address: *
    main-http: Dispatch.main
    depends: cohttp, uri

Keys follow a ``<namespace>-<name>`` convention. The reader itself knows
nothing about namespaces: it only turns lines into ordered entries, and
``extract_namespace`` gives each subsystem its own view of them.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from pathlib import Path

from .errors import DescriptorError

SEPARATOR = ":"
NAMESPACE_SEPARATOR = "-"
COMMENT_PREFIX = "#"


@dataclass(frozen=True)
class RawEntry:
    """One ``key: value`` line of a descriptor."""

    key: str
    value: str
    line: int = 0


def parse_lines(lines: Iterable[str]) -> list[RawEntry]:
    """
    Turn descriptor lines into ordered entries.

    Only the first ``:`` separates key from value, so values may contain
    colons (paths, addresses). Lines without a separator are dropped.
    """
    entries: list[RawEntry] = []
    for lineno, line in enumerate(lines, start=1):
        key, sep, value = line.partition(SEPARATOR)
        if not sep:
            continue
        key = key.strip()
        if not key or key.startswith(COMMENT_PREFIX):
            continue
        entries.append(RawEntry(key=key, value=value.strip(), line=lineno))
    return entries


def read_descriptor(path: Path) -> list[RawEntry]:
    """
    Read a descriptor file.

    Raises:
        DescriptorError: If the file is missing or cannot be decoded
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError:
        raise DescriptorError(f"Descriptor file {path} does not exist.") from None
    except (OSError, UnicodeDecodeError) as e:
        raise DescriptorError(f"Cannot read descriptor file {path}: {e}") from e
    return parse_lines(text.splitlines())


def extract_namespace(entries: Iterable[RawEntry], prefix: str) -> list[RawEntry]:
    """
    Select the entries of one namespace and strip the prefix from their keys.

    ``ip-use-dhcp`` in namespace ``ip`` becomes ``use-dhcp``. The prefix is
    compared case-insensitively; the remaining name is left untouched.
    """
    wanted = prefix.lower()
    selected: list[RawEntry] = []
    for entry in entries:
        namespace, sep, name = entry.key.partition(NAMESPACE_SEPARATOR)
        if sep and namespace.lower() == wanted:
            selected.append(replace(entry, key=name))
    return selected


def extract_key(entries: Iterable[RawEntry], key: str) -> list[RawEntry]:
    """Select the entries whose key is exactly *key*."""
    return [entry for entry in entries if entry.key == key]
