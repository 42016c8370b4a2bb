"""Three.js starter installer (the ``add-three`` subcommand).

Copies the static Three.js world into ``<cwd>/three`` and writes two Vue
composables that mount it, under ``<source>/composables/<cwd name>/``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel

from pni.detection import (
    ProjectKind,
    detect_project_type,
    find_project_root,
    find_source_folder,
    read_manifest_dependencies,
)
from pni.errors import PreconditionError

from .templates import TemplateRenderer

THREE_TEMPLATE_DIR = "three"
COMPOSABLE_TEMPLATES: tuple[tuple[str, str], ...] = (
    ("composables/usethree.j2", "usethree"),
    ("composables/useThreeAdvanced.j2", "useThreeAdvanced"),
)


class GraphicsResult(BaseModel):
    """What ``add-three`` wrote."""

    directory_name: str
    project_kind: ProjectKind
    source_folder: Path
    three_path: Path
    import_path: str
    file_extension: Literal["js", "ts"]
    composables: list[Path]


def world_import_path(project_root: Path, cwd: Path, three_dir: Path) -> str:
    """Module path the composables use to import ``World``.

    Under ``pages/`` (Vue) or ``app/pages/`` (Nuxt) the ``@`` alias resolves
    to the pages parent, so the path is ``@/pages/<dir>/three/World.js``.
    Anywhere else it is the ``three`` directory relative to the project root.
    """
    relative = cwd.relative_to(project_root).as_posix()
    if relative.startswith("pages/") or relative.startswith("app/pages/"):
        return f"@/pages/{cwd.name}/three/World.js"
    return f"@/{three_dir.relative_to(project_root).as_posix()}/World.js"


class GraphicsInstaller:
    """Adds the Three.js world and composables to an existing project."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def check_preconditions(self, cwd: Path) -> tuple[Path, ProjectKind, Path]:
        """Return ``(project_root, kind, source_folder)`` for *cwd*.

        Raises:
            PreconditionError: No project root, ``three`` missing from the
                manifest, unsupported project kind or no source folder.
        """
        project_root = find_project_root(cwd)

        deps = read_manifest_dependencies(project_root) or {}
        if not deps.get("three"):
            raise PreconditionError(
                "Three.js is not installed. Please install it first: npm install three"
            )

        kind = detect_project_type(project_root)
        if kind is ProjectKind.NONE:
            raise PreconditionError(
                "Project type not supported. Please run this command in a Nuxt or Vue project."
            )

        return project_root, kind, find_source_folder(cwd, kind)

    async def install(self, cwd: str | Path) -> GraphicsResult:
        """Install into *cwd*.

        Raises:
            PreconditionError: See :meth:`check_preconditions`.
            DestinationExistsError: ``<cwd>/three`` already exists.
            TemplateNotFoundError: The bundled templates are missing.
        """
        current = Path(cwd).resolve()
        project_root, kind, source_folder = self.check_preconditions(current)

        three_dir = await self.renderer.copy_tree(THREE_TEMPLATE_DIR, current / "three")

        typescript = kind is ProjectKind.NUXT
        extension: Literal["js", "ts"] = "ts" if typescript else "js"
        import_path = world_import_path(project_root, current, three_dir)
        composables_dir = source_folder / "composables" / current.name

        written: list[Path] = []
        for template_name, stem in COMPOSABLE_TEMPLATES:
            path = await self.renderer.render_to_file(
                template_name,
                composables_dir / f"{stem}.{extension}",
                {"import_path": import_path, "typescript": typescript},
            )
            written.append(path)

        return GraphicsResult(
            directory_name=current.name,
            project_kind=kind,
            source_folder=source_folder,
            three_path=three_dir,
            import_path=import_path,
            file_extension=extension,
            composables=written,
        )
