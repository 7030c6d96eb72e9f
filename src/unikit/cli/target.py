"""
``unikit-target``: build an application module for one platform.

    unikit-target [--os unix|xen|browser] [--mode tree|installed]
                  [--net dhcp|static] [--action build|clean] <target>

``<target>`` is the module path without extension, e.g. ``app/main``;
outputs go to its directory.
"""

from __future__ import annotations

import sys

import typer

from unikit.cli.utils import configure_logging, exit_for, usage_error, version_callback
from unikit.config import load_toolchain_config
from unikit.core.errors import UnikitError
from unikit.driver import BuildTarget, TargetBuildDriver
from unikit.pipeline import CommandRunner

USAGE = "Usage: unikit-target [OPTIONS] <build dir>"

app = typer.Typer(
    help="Compile, link and package an application for unix, xen or the browser.",
    add_completion=False,
)


@app.command()
def build(
    target: str | None = typer.Argument(
        None,
        metavar="<build dir>",
        help="Application module path",
        show_default=False,
    ),
    platform: str = typer.Option(
        "unix", "--os", help="Set target operating system [xen|unix|browser]"
    ),
    mode: str = typer.Option(
        "tree", "--mode", help="Set where to build application [tree|installed]"
    ),
    net: str = typer.Option(
        "dhcp", "--net", help="How to configure network interfaces [dhcp|static]"
    ),
    action: str = typer.Option("build", "--action", help="Action to perform [build|clean]"),
    cc: str | None = typer.Option(None, "--cc", help="C compiler to use"),
    ocamlbuild: str | None = typer.Option(None, "--ocamlbuild", help="ocamlbuild binary"),
    objcopy: str | None = typer.Option(None, "--objcopy", help="objcopy binary"),
    make: str | None = typer.Option(None, "--make", help="make binary"),
    ocamlopt: str | None = typer.Option(None, "--ocamlopt", help="ocamlopt binary"),
    ocamldep: str | None = typer.Option(None, "--ocamldep", help="ocamldep binary"),
    ocamlopt_flags: str | None = typer.Option(
        None, "--ocamlopt-flags", help="Extra compiler flags"
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Print the commands without running them",
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Display version information.",
    ),
) -> None:
    """Run the build (or clean) pipeline for one target platform."""
    if target is None:
        raise usage_error(USAGE, "No target specified")

    configure_logging()

    try:
        build_target = BuildTarget.from_flags(
            target,
            platform=platform,
            mode=mode,
            network=net,
            action=action,
        )
        tools = load_toolchain_config().with_overrides(
            cc=cc,
            ocamlbuild=ocamlbuild,
            objcopy=objcopy,
            make=make,
            ocamlopt=ocamlopt,
            ocamldep=ocamldep,
            extra_flags=ocamlopt_flags,
        )
        TargetBuildDriver(build_target, tools).run(CommandRunner(dry_run=dry_run))
    except UnikitError as e:
        raise exit_for(e) from e


def main(argv: list[str] | None = None) -> None:
    app(args=argv if argv is not None else sys.argv[1:], prog_name="unikit-target")


if __name__ == "__main__":
    main()
