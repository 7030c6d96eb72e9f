"""
Build target selection for the target build driver.

A BuildTarget is created once from the command line and never changes
during a run.
"""

from __future__ import annotations

from enum import Enum
from pathlib import PurePosixPath
from typing import TypeVar

from pydantic import BaseModel, ConfigDict

from ..core.errors import TargetError


class Platform(str, Enum):
    """Runtime the application is built for."""

    UNIX = "unix"
    XEN = "xen"
    BROWSER = "browser"


class BuildMode(str, Enum):
    """Where the runtime comes from."""

    TREE = "tree"  # built in the source tree under _build/
    INSTALLED = "installed"  # installed under a fixed prefix


class NetworkMode(str, Enum):
    """How network interfaces are configured."""

    DHCP = "dhcp"
    STATIC = "static"


class Action(str, Enum):
    """What the driver does."""

    BUILD = "build"
    CLEAN = "clean"


E = TypeVar("E", bound=Enum)


def parse_choice(choice: type[E], flag: str, value: str) -> E:
    """
    Parse a flag value into *choice*, accepting the full name or its first letter.

    Raises:
        TargetError: If the value matches no member
    """
    lowered = value.strip().lower()
    for member in choice:
        if lowered in (member.value, member.value[0]):
            return member
    allowed = "|".join(member.value for member in choice)
    raise TargetError(f"Unknown --{flag} '{value}', needs to be {allowed}")


class BuildTarget(BaseModel):
    """
    Immutable build selection.

    Attributes:
        platform: unix, xen or browser
        mode: tree or installed
        network: dhcp or static
        action: build or clean
        module_path: Application module path, without extension
    """

    platform: Platform = Platform.UNIX
    mode: BuildMode = BuildMode.TREE
    network: NetworkMode = NetworkMode.DHCP
    action: Action = Action.BUILD
    module_path: str

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_flags(
        cls,
        module_path: str,
        platform: str = "unix",
        mode: str = "tree",
        network: str = "dhcp",
        action: str = "build",
    ) -> BuildTarget:
        return cls(
            platform=parse_choice(Platform, "os", platform),
            mode=parse_choice(BuildMode, "mode", mode),
            network=parse_choice(NetworkMode, "net", network),
            action=parse_choice(Action, "action", action),
            module_path=module_path,
        )

    @property
    def build_dir(self) -> str:
        """Directory part of the module path, where final outputs go."""
        return str(PurePosixPath(self.module_path).parent)
