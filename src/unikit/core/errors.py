"""
Error types for descriptor parsing, model validation and external builds.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class UnikitError(Exception):
    """Base exception for all unikit errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}: {self.message}"
        return self.message


class DescriptorError(UnikitError):
    """
    Raised when the application descriptor cannot be read.

    Examples:
    - Missing file
    - Permission denied
    - Invalid UTF-8
    """

    pass


class ValidationError(UnikitError):
    """
    Raised when a subsystem configuration is contradictory or incomplete.

    Examples:
    - No main function, or more than one
    - Non-numeric HTTP port
    - Filesystem source directory that does not exist
    """

    pass


class TargetError(UnikitError):
    """
    Raised when a build target selection cannot be honoured.

    Examples:
    - Unknown platform, mode, network or action value
    - Installed mode without an install root
    """

    pass


class CommandError(UnikitError):
    """
    Raised when an external command exits with a non-zero status.

    The exit code is propagated verbatim as the process exit code.
    """

    def __init__(self, command: str, exit_code: int):
        self.command = command
        self.exit_code = exit_code
        super().__init__(f"The command {command!r} exited with code {exit_code}.")


@dataclass
class ErrorContext:
    """
    Source location of an error inside a descriptor.

    Attributes:
        file: Path to the descriptor
        line: Line number (1-indexed), or None when the error is file-wide
    """

    file: Path
    line: int | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "app.conf:10"
        """
        if self.line is None:
            return str(self.file)
        return f"{self.file}:{self.line}"


def make_validation_error(
    message: str,
    file: Path | None = None,
    line: int | None = None,
) -> ValidationError:
    """
    Helper to create a ValidationError with optional context.

    Args:
        message: Error description
        file: Optional descriptor path
        line: Optional line number

    Returns:
        ValidationError with context if a file was provided
    """
    if file is not None:
        return ValidationError(message, ErrorContext(file=file, line=line))
    return ValidationError(message)
