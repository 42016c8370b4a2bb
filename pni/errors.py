"""Exception hierarchy for pni.

Stage functions raise these on fatal conditions.  The orchestrator (and the
``add-three`` runner) is the single catch boundary that turns them into an
error state and a non-zero exit.
"""

from __future__ import annotations

from pathlib import Path


class PniError(Exception):
    """Base class for every error raised by pni."""


class PreconditionError(PniError):
    """A requirement for running a step is not met (missing name, no project root, ...)."""


class CommandError(PniError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(self, command: str, returncode: int, output: str = "") -> None:
        self.command = command
        self.returncode = returncode
        self.output = output
        message = f"Command failed with exit code {returncode}: {command}"
        if output:
            message = f"{message}\n{output}"
        super().__init__(message)


class TemplateNotFoundError(PniError):
    """Raised when a template is missing from every search root."""

    def __init__(self, name: str, attempted: list[Path]) -> None:
        self.name = name
        self.attempted = attempted
        paths = " or ".join(str(p) for p in attempted)
        super().__init__(f"Template not found: {name}. Expected at: {paths}")


class DestinationExistsError(PniError):
    """Raised when a verbatim copy would overwrite an existing directory."""


class WorkflowStateError(PniError):
    """Raised on a transition the orchestrator state table does not allow."""
