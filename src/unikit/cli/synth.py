"""
``unikit``: generate and build an application from its descriptor.

    unikit [--xen] [--generate-only] [--dry-run] <descriptor>

Reads the descriptor, writes ``main.ml`` and ``main.obuild`` next to it,
embeds the filesystems, builds with obuild and links ``mir-<name>`` in the
current directory. With ``--xen`` the build produces an object and it is
converted into a xen image.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer

from unikit.cli.utils import configure_logging, exit_for, usage_error, version_callback
from unikit.config import load_toolchain_config
from unikit.core import load_app_config
from unikit.core.errors import UnikitError
from unikit.pipeline import ArtifactBuilder, CommandRunner
from unikit.synth import SourceSynthesizer

USAGE = "Usage: unikit [OPTIONS] <conf-file>"

app = typer.Typer(
    help="Generate and build a unikernel application from a descriptor file.",
    add_completion=False,
)


@app.command()
def synth(
    descriptors: list[Path] | None = typer.Argument(  # noqa: B008
        None,
        metavar="<conf-file>",
        help="Application descriptor",
        show_default=False,
    ),
    xen: bool = typer.Option(False, "--xen", help="Generate xen image."),
    generate_only: bool = typer.Option(
        False,
        "--generate-only",
        help="Write main.ml and main.obuild, then stop",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        "-n",
        help="Print the build commands without running them",
    ),
    version: bool | None = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Display version information.",
    ),
) -> None:
    """Generate main.ml and main.obuild from a descriptor and build the application."""
    if not descriptors or len(descriptors) != 1:
        raise usage_error(USAGE)

    configure_logging()
    descriptor = descriptors[0]

    try:
        tools = load_toolchain_config()
        config = load_app_config(descriptor)

        typer.echo(f"Generating {config.main_path}.")
        result = SourceSynthesizer(config).generate()
        for warning in result.warnings:
            typer.echo(f"WARNING: {warning}", err=True)
        if generate_only:
            return

        report = ArtifactBuilder(config, tools, xen=xen).run(CommandRunner(dry_run=dry_run))
    except UnikitError as e:
        raise exit_for(e) from e

    for artifact in report.artifacts:
        typer.echo(f"Built {artifact}")


def main(argv: list[str] | None = None) -> None:
    app(args=argv if argv is not None else sys.argv[1:], prog_name="unikit")


if __name__ == "__main__":
    main()
