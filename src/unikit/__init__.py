"""
unikit - build unikernel applications from a declarative descriptor.

Two tools live here:

- ``unikit``: reads a ``key: value`` application descriptor, generates the
  entry-point module and build manifest, then builds the application.
- ``unikit-target``: drives the platform-specific compile/link/package
  pipeline for the unix, xen and browser runtimes.
"""

from __future__ import annotations

from ._version import get_version
from .core.errors import (
    CommandError,
    DescriptorError,
    TargetError,
    UnikitError,
    ValidationError,
)

__version__ = get_version()

__all__ = [
    "__version__",
    "UnikitError",
    "DescriptorError",
    "ValidationError",
    "TargetError",
    "CommandError",
]
