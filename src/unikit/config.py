"""
Toolchain configuration.

External tool names and flags come from, lowest precedence first:
the model defaults, the ``[tools]`` table of ``unikit.toml`` in the
working directory, and command line options.

Example unikit.toml:

    [tools]
    ocamlbuild = "/opt/ocaml/bin/ocamlbuild"
    extra_flags = "-g"
    install_root = "/usr/local/share/mirage"
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from .core.errors import UnikitError

CONFIG_FILE = "unikit.toml"


class ToolchainConfig(BaseModel):
    """
    Names of the external commands and extra flags.

    Attributes:
        crunch: Filesystem embedding helper
        obuild: Build-configuration and build tool for generated apps
        mir_build: Image conversion tool for xen objects
        ocamlbuild: Compiler driver used by the target driver
        objcopy: Section renaming tool (xen)
        make: Runtime build tool
        ocamlopt: Native compiler passed to ocamlbuild, when set
        ocamldep: Dependency generator passed to ocamlbuild, when set
        cc: C compiler passed to the runtime build, when set
        extra_flags: Extra compiler flags (``-cflags``)
        install_root: Runtime location for installed builds
    """

    crunch: str = "mir-crunch"
    obuild: str = "obuild"
    mir_build: str = "mir-build"
    ocamlbuild: str = "ocamlbuild"
    objcopy: str = "objcopy"
    make: str = "make"
    ocamlopt: str | None = None
    ocamldep: str | None = None
    cc: str | None = None
    extra_flags: str = ""
    install_root: Path | None = None

    model_config = ConfigDict(frozen=True)

    def with_overrides(self, **overrides: Any) -> ToolchainConfig:
        """Return a copy with every non-None override applied."""
        updates = {key: value for key, value in overrides.items() if value is not None}
        if not updates:
            return self
        return self.model_validate({**self.model_dump(), **updates})


def load_toolchain_config(directory: Path | None = None) -> ToolchainConfig:
    """
    Load the ``[tools]`` table of unikit.toml.

    Args:
        directory: Directory holding unikit.toml (default: current directory)

    Returns:
        ToolchainConfig with parsed values or defaults
    """
    toml_path = (directory or Path.cwd()) / CONFIG_FILE
    if not toml_path.exists():
        return ToolchainConfig()

    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
        tools_data = data.get("tools", {})
        if not tools_data:
            return ToolchainConfig()
        return ToolchainConfig(**tools_data)
    except (tomllib.TOMLDecodeError, PydanticValidationError) as e:
        raise UnikitError(f"Invalid configuration in {toml_path}: {e}") from e
