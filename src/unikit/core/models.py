"""
Typed subsystem models built from a descriptor.

Each subsystem (filesystem, network, HTTP listener, entry point,
dependencies) has its own model. Mutually exclusive choices are tagged
unions discriminated on ``kind`` rather than combinations of flags.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ADDRESS = "10.0.0.2"
DEFAULT_NETMASK = "255.255.255.0"
DEFAULT_GATEWAY = "10.0.0.1"

MAIN_MODULE = "main.ml"
MANIFEST_FILE = "main.obuild"
BACKUP_SUFFIX = ".save"


# =============================================================================
# Filesystem
# =============================================================================


class FilesystemMount(BaseModel):
    """A directory embedded into the image as a read-only filesystem."""

    name: str
    source_path: Path

    model_config = ConfigDict(frozen=True)


class FilesystemConfig(BaseModel):
    """All filesystem mounts, in descriptor order."""

    mounts: tuple[FilesystemMount, ...] = ()

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Network
# =============================================================================


class DhcpNetwork(BaseModel):
    """Interface configured by DHCP."""

    kind: Literal["dhcp"] = "dhcp"

    model_config = ConfigDict(frozen=True)


class StaticNetwork(BaseModel):
    """Interface configured with a fixed IPv4 address."""

    kind: Literal["static"] = "static"
    address: str = DEFAULT_ADDRESS
    netmask: str = DEFAULT_NETMASK
    gateway: str = DEFAULT_GATEWAY

    model_config = ConfigDict(frozen=True)


Network = Annotated[DhcpNetwork | StaticNetwork, Field(discriminator="kind")]


# =============================================================================
# HTTP listener
# =============================================================================


class HttpListener(BaseModel):
    """
    HTTP listening parameters.

    Attributes:
        port: TCP port to listen on
        bind_address: Address to bind, or None to bind all interfaces
    """

    port: int
    bind_address: str | None = None

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Entry point
# =============================================================================


class IpMain(BaseModel):
    """Main function driven directly by the network stack."""

    kind: Literal["ip"] = "ip"
    symbol: str

    model_config = ConfigDict(frozen=True)


class HttpMain(BaseModel):
    """Main function used as the callback of an HTTP server."""

    kind: Literal["http"] = "http"
    symbol: str

    model_config = ConfigDict(frozen=True)


EntryPoint = Annotated[IpMain | HttpMain, Field(discriminator="kind")]


# =============================================================================
# Dependencies
# =============================================================================


class Dependencies(BaseModel):
    """External libraries the application links against."""

    names: tuple[str, ...] = ()

    model_config = ConfigDict(frozen=True)


# =============================================================================
# Application
# =============================================================================


class AppConfig(BaseModel):
    """
    Complete application configuration derived from one descriptor.

    Attributes:
        name: Application name (descriptor file name without extension)
        descriptor_path: Absolute path to the descriptor
        filesystem: Embedded filesystems
        network: DHCP or static IPv4 network configuration
        http: Optional HTTP listener
        entry_point: The single main function
        dependencies: Extra libraries for the build manifest
    """

    name: str
    descriptor_path: Path
    filesystem: FilesystemConfig = Field(default_factory=FilesystemConfig)
    network: Network = Field(default_factory=StaticNetwork)
    http: HttpListener | None = None
    entry_point: EntryPoint
    dependencies: Dependencies = Field(default_factory=Dependencies)

    model_config = ConfigDict(frozen=True)

    @property
    def output_dir(self) -> Path:
        """Directory that receives generated files (the descriptor's directory)."""
        return self.descriptor_path.parent

    @property
    def main_path(self) -> Path:
        return self.output_dir / MAIN_MODULE

    @property
    def manifest_path(self) -> Path:
        return self.output_dir / MANIFEST_FILE

    def filesystem_module_path(self, name: str) -> Path:
        """Generated module holding the embedded filesystem *name*."""
        return self.output_dir / f"filesystem_{name}.ml"
