"""Exception hierarchy shared by the scaffolder and the CLI commands.

``PreconditionError`` and ``CommandError`` abort the current command.
``FieldSpecError`` and ``InvalidNameError`` are raised while validating user
input, before anything is written to disk.
"""

from __future__ import annotations


class ForgeError(Exception):
    """Base class for every error the CLI reports and exits on."""


class PreconditionError(ForgeError):
    """A required file, directory or project shape is missing."""


class CommandError(ForgeError):
    """A subprocess could not be started or exited with a non-zero code."""

    def __init__(
        self,
        message: str,
        command: str = "",
        returncode: int | None = None,
        remediation: str = "",
    ) -> None:
        self.command = command
        self.returncode = returncode
        self.remediation = remediation
        super().__init__(message)


class FieldSpecError(ForgeError, ValueError):
    """A ``name:type`` field declaration could not be parsed."""


class InvalidNameError(ForgeError, ValueError):
    """A user-supplied name would not produce a valid identifier or path."""
