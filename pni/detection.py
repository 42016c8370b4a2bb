"""Project detection.

Classifies a directory as a Nuxt project, a Vue project or neither by probing
for well-known config files and the dependencies declared in ``package.json``.
The classification is a pure function of the directory contents.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path

from pni.errors import PreconditionError
from pni.utils import load_json

MANIFEST = "package.json"

NUXT_CONFIG_FILES: tuple[str, ...] = ("nuxt.config.ts", "nuxt.config.js", "nuxt.config.mjs")
VITE_CONFIG_FILES: tuple[str, ...] = ("vite.config.ts", "vite.config.js", "vite.config.mjs")
VUE_CONFIG_FILES: tuple[str, ...] = ("vue.config.js", "vue.config.ts")

NUXT_PACKAGES: tuple[str, ...] = ("nuxt", "@nuxt/kit")


class ProjectKind(str, Enum):
    NONE = "none"
    NUXT = "nuxt"
    VUE = "vue"

    @property
    def label(self) -> str:
        return {"none": "None", "nuxt": "Nuxt", "vue": "Vue"}[self.value]


def read_manifest_dependencies(root: str | Path) -> dict[str, str] | None:
    """Return ``dependencies`` merged with ``devDependencies`` from the manifest.

    A missing manifest, or one that is not a valid JSON object, yields
    ``None`` so callers treat it as absent.
    """
    manifest = Path(root) / MANIFEST
    if not manifest.is_file():
        return None
    try:
        data = load_json(manifest)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return None
    if not isinstance(data, dict):
        return None

    deps: dict[str, str] = {}
    for key in ("dependencies", "devDependencies"):
        section = data.get(key)
        if isinstance(section, dict):
            deps.update(section)
    return deps


def _any_exists(cwd: Path, names: tuple[str, ...]) -> bool:
    return any((cwd / name).exists() for name in names)


def detect_project_type(cwd: str | Path) -> ProjectKind:
    """Classify *cwd*; the first matching rule wins.

    1. a Nuxt config file exists
    2. the manifest declares ``nuxt`` or ``@nuxt/kit``
    3. a Vite or Vue CLI config file exists
    4. the manifest declares ``vue`` but not ``nuxt``
    """
    root = Path(cwd)
    deps = read_manifest_dependencies(root)

    if _any_exists(root, NUXT_CONFIG_FILES):
        return ProjectKind.NUXT
    if deps is not None and any(pkg in deps for pkg in NUXT_PACKAGES):
        return ProjectKind.NUXT
    if _any_exists(root, VITE_CONFIG_FILES) or _any_exists(root, VUE_CONFIG_FILES):
        return ProjectKind.VUE
    if deps is not None and "vue" in deps and "nuxt" not in deps:
        return ProjectKind.VUE
    return ProjectKind.NONE


# ---------------------------------------------------------------------------
# Upward searches
# ---------------------------------------------------------------------------


def _walk_up(start: str | Path):
    current = Path(start).resolve()
    while current != current.parent:
        yield current
        current = current.parent


def find_project_root(start: str | Path) -> Path:
    """Return the nearest ancestor of *start* (inclusive) holding a manifest."""
    for current in _walk_up(start):
        if (current / MANIFEST).is_file():
            return current
    raise PreconditionError(
        "Project root not found. Please run this command in a Nuxt/Vue project."
    )


def find_source_folder(start: str | Path, kind: ProjectKind) -> Path:
    """Return the ``app/`` (Nuxt) or ``src/`` (Vue) folder above *start*."""
    folder = "app" if kind is ProjectKind.NUXT else "src"
    for current in _walk_up(start):
        if (current / folder).is_dir():
            return current / folder

    if kind is ProjectKind.NUXT:
        raise PreconditionError(
            "app folder not found. Please run this command in a Nuxt project with an app directory."
        )
    raise PreconditionError("src folder not found. Please run this command in a Vue project.")
