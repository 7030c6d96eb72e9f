"""
External command steps and their executor.

A Step only describes a command: argv, working directory and optional
stdout redirection. Planning code builds lists of steps without touching
the system; CommandRunner is the one place that spawns processes.
"""

from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from ..core.errors import CommandError, UnikitError

logger = logging.getLogger(__name__)

# Shell conventions for "found but not executable" and "command not found"
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127


@dataclass(frozen=True)
class Step:
    """
    One external command.

    Attributes:
        argv: Program and arguments
        cwd: Working directory, or None for the current one
        stdout: File that receives the command's standard output
        shell: Run ``argv`` through the shell (needed for globs)
        description: Short human label
        message: Progress line printed just before the command, if any
    """

    argv: tuple[str, ...]
    cwd: Path | None = None
    stdout: Path | None = None
    shell: bool = False
    description: str = ""
    message: str = ""

    @property
    def program(self) -> str:
        return self.argv[0]

    @property
    def command_line(self) -> str:
        """The command as it would be typed in a shell."""
        if self.shell:
            line = " ".join(self.argv)
        else:
            line = shlex.join(self.argv)
        if self.stdout is not None:
            line = f"{line} > {shlex.quote(str(self.stdout))}"
        return line


@dataclass
class StepOutcome:
    """A step that ran, with its exit code."""

    step: Step
    exit_code: int


@dataclass
class CommandRunner:
    """
    Runs steps one after the other.

    Each command is echoed to stderr before it runs. A non-zero exit raises
    CommandError carrying the command line and exit code. With ``dry_run``
    commands are only echoed.
    """

    dry_run: bool = False
    console: Console = field(default_factory=lambda: Console(stderr=True, highlight=False))
    history: list[StepOutcome] = field(default_factory=list)

    def echo(self, step: Step) -> None:
        if step.message:
            self.console.print(escape(step.message))
        if step.shell:
            self.console.print(f"[cyan]{escape(step.command_line)}[/cyan]")
        else:
            program = shlex.quote(step.program)
            rest = step.command_line[len(program) :]
            self.console.print(f"[cyan]{escape(program)}[/cyan]{escape(rest)}")
        if step.cwd is not None:
            self.console.print(f"  [dim](in {escape(str(step.cwd))})[/dim]")

    def run(self, step: Step) -> StepOutcome:
        self.echo(step)
        if self.dry_run:
            outcome = StepOutcome(step=step, exit_code=0)
            self.history.append(outcome)
            return outcome

        logger.debug("Running: %s (cwd=%s)", step.command_line, step.cwd)
        exit_code = self._spawn(step)
        outcome = StepOutcome(step=step, exit_code=exit_code)
        self.history.append(outcome)

        if exit_code != 0:
            self.console.print(f"{escape(step.command_line)} (exit {exit_code})")
            raise CommandError(step.command_line, exit_code)
        return outcome

    def _spawn(self, step: Step) -> int:
        if step.cwd is not None and not step.cwd.is_dir():
            raise UnikitError(
                f"Cannot run {step.program!r}: working directory {step.cwd} does not exist."
            )
        args: str | list[str] = " ".join(step.argv) if step.shell else list(step.argv)
        if step.stdout is None:
            return self._call(step, args)

        try:
            out = open(step.stdout, "wb")
        except OSError as e:
            raise UnikitError(f"Cannot write output file {step.stdout}: {e.strerror}") from e
        with out:
            return self._call(step, args, stdout=out)

    def _call(self, step: Step, args: str | list[str], **kwargs: Any) -> int:
        try:
            completed = subprocess.run(args, cwd=step.cwd, shell=step.shell, **kwargs)
        except FileNotFoundError:
            if step.shell or shutil.which(step.program) is None:
                logger.error("Command not found: %s", step.program)
                return EXIT_NOT_FOUND
            # present, but its interpreter is missing
            logger.error("Cannot execute %s: interpreter not found", step.program)
            return EXIT_NOT_EXECUTABLE
        except OSError as e:
            logger.error("Cannot execute %s: %s", step.program, e.strerror)
            return EXIT_NOT_EXECUTABLE
        return completed.returncode


def run_steps(steps: Iterable[Step], runner: CommandRunner) -> list[StepOutcome]:
    """
    Run *steps* in order, stopping at the first failure.

    Nothing is rolled back: artifacts from earlier steps stay in place.

    Raises:
        CommandError: From the first step that exits non-zero
    """
    return [runner.run(step) for step in steps]
