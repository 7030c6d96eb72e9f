"""
Shared CLI helpers: version display, logging setup and error reporting.
"""

import logging
import os
import platform

import typer

from unikit._version import get_version
from unikit.core.errors import CommandError, UnikitError

LOG_LEVEL_ENV = "UNIKIT_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def version_callback(value: bool) -> None:
    """Print the version and exit."""
    if value:
        typer.echo(get_version())
        raise typer.Exit()


def environment_summary() -> str:
    return f"{platform.python_implementation()} {platform.python_version()} on {platform.system()}"


def configure_logging() -> None:
    """Configure root logging from the UNIKIT_LOG_LEVEL environment variable."""
    log_level = os.getenv(LOG_LEVEL_ENV, "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format=LOG_FORMAT,
    )
    logging.getLogger(__name__).debug("unikit %s (%s)", get_version(), environment_summary())


def usage_error(usage: str, message: str | None = None) -> typer.Exit:
    """Print *message* and *usage* to stderr; return the Exit to raise."""
    if message:
        typer.echo(message, err=True)
    typer.echo(usage, err=True)
    return typer.Exit(code=1)


def exit_for(error: UnikitError) -> typer.Exit:
    """
    Report *error* on stderr and map it to an exit code.

    External command failures keep the command's own exit code; every
    other error exits with 1.
    """
    typer.echo(f"ERROR: {error}", err=True)
    if isinstance(error, CommandError):
        return typer.Exit(code=error.exit_code)
    return typer.Exit(code=1)
