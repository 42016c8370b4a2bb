"""New project creation through the official framework generators."""

from __future__ import annotations

import shlex
from pathlib import Path

from pni.detection import ProjectKind
from pni.errors import PniError, PreconditionError
from pni.utils import CommandRunner

CREATE_COMMANDS: dict[ProjectKind, str] = {
    ProjectKind.NUXT: "npx nuxi@latest init {name}",
    ProjectKind.VUE: "npm create vue@latest {name}",
}


async def create_app(kind: ProjectKind, parent: Path, name: str, run: CommandRunner) -> Path:
    """Generate project *name* inside *parent* and return its directory.

    The generator inherits the terminal so it can ask its own questions.

    Raises:
        PreconditionError: *kind* is not Nuxt or Vue.
        PniError: The generator exited with a non-zero status.
    """
    if kind not in CREATE_COMMANDS:
        raise PreconditionError("Cannot create app: project type must be nuxt or vue")

    command = CREATE_COMMANDS[kind].format(name=shlex.quote(name))
    try:
        await run(command, parent)
    except PniError as exc:
        raise PniError(f"Failed to create {kind.label} app: {exc}") from exc
    return parent / name
