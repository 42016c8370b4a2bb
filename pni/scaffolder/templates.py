"""Template loading and materialization.

Provides the TemplateRenderer class which finds templates under an ordered
list of search roots (user overrides first, then the templates bundled with
the package).  Two template flavours exist:

* ``*.template`` files are opaque blobs with ``{{KEY}}`` placeholders,
  replaced in a single non-recursive pass.
* ``*.j2`` files are Jinja2 templates, used where the generated code differs
  by project kind (TypeScript annotations in the Three.js composables).

Static directories (the Three.js starter world) are copied verbatim.
"""

from __future__ import annotations

import asyncio
import re
import shutil
from pathlib import Path
from typing import Any, Mapping

from jinja2 import Environment, FileSystemLoader, TemplateNotFound, select_autoescape

from pni.errors import DestinationExistsError, TemplateNotFoundError
from pni.utils import print_warning, write_text


_DEFAULT_TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"

PLACEHOLDER_RE = re.compile(r"\{\{([A-Z][A-Z0-9_]*)\}\}")


# ---------------------------------------------------------------------------
# Placeholder substitution
# ---------------------------------------------------------------------------


def substitute_placeholders(content: str, placeholders: Mapping[str, str]) -> str:
    """Replace every ``{{KEY}}`` token whose key is in *placeholders*.

    Values are inserted verbatim and never re-scanned, so a value containing
    ``{{OTHER}}`` stays as written.  Unknown tokens are left untouched.
    """
    return PLACEHOLDER_RE.sub(
        lambda match: placeholders.get(match.group(1), match.group(0)),
        content,
    )


def unresolved_placeholders(content: str) -> list[str]:
    """Return the distinct placeholder keys still present in *content*."""
    return list(dict.fromkeys(PLACEHOLDER_RE.findall(content)))


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Loads, renders and writes scaffolding templates.

    Every lookup tries the search roots in order and fails only when the
    template is missing from all of them.
    """

    def __init__(self, search_paths: list[str | Path] | None = None) -> None:
        if search_paths is None:
            search_paths = [_DEFAULT_TEMPLATE_DIR]
        self.search_paths = [Path(p) for p in search_paths]
        self.env = Environment(
            loader=FileSystemLoader([str(p) for p in self.search_paths]),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

    def _not_found(self, name: str) -> TemplateNotFoundError:
        return TemplateNotFoundError(name, [root / name for root in self.search_paths])

    # -- Placeholder templates ---------------------------------------------

    def load(self, name: str) -> str:
        """Return the raw text of template *name*.

        Raises:
            TemplateNotFoundError: No search root holds the template.
        """
        try:
            source, _filename, _uptodate = self.env.loader.get_source(self.env, name)
        except TemplateNotFound:
            raise self._not_found(name) from None
        return source

    def render(self, name: str, placeholders: Mapping[str, str] | None = None) -> str:
        """Load *name* and substitute its ``{{KEY}}`` placeholders."""
        content = substitute_placeholders(self.load(name), placeholders or {})
        leftover = unresolved_placeholders(content)
        if leftover:
            print_warning(f"Template {name} has unresolved placeholders: {', '.join(leftover)}")
        return content

    async def materialize(
        self,
        name: str,
        output_path: str | Path,
        placeholders: Mapping[str, str] | None = None,
    ) -> Path:
        """Render *name* and write the result to *output_path*.

        Parent directories are created automatically.
        """
        return await write_text(output_path, self.render(name, placeholders))

    # -- Jinja2 templates ----------------------------------------------------

    def render_jinja(self, name: str, context: dict[str, Any]) -> str:
        """Render a Jinja2 template with the provided context."""
        try:
            template = self.env.get_template(name)
        except TemplateNotFound:
            raise self._not_found(name) from None
        return template.render(**context)

    async def render_to_file(
        self,
        name: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render a Jinja2 template and write the result to *output_path*."""
        return await write_text(output_path, self.render_jinja(name, context))

    # -- Static directories ----------------------------------------------------

    def locate_dir(self, name: str) -> Path:
        """Return the first search root's copy of template directory *name*."""
        for root in self.search_paths:
            candidate = root / name
            if candidate.is_dir():
                return candidate
        raise self._not_found(name)

    async def copy_tree(self, name: str, output_dir: str | Path) -> Path:
        """Copy template directory *name* to *output_dir*.

        Raises:
            DestinationExistsError: *output_dir* already exists.  Nothing is
                merged into an existing directory.
        """
        source = self.locate_dir(name)
        target = Path(output_dir)
        if target.exists():
            raise DestinationExistsError(
                f"{target.name} directory already exists. Please remove it first."
            )
        await asyncio.to_thread(shutil.copytree, source, target)
        return target

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return every template name under *prefix*, across all roots."""
        names: set[str] = set()
        for root in self.search_paths:
            search_dir = root / prefix if prefix else root
            if not search_dir.is_dir():
                continue
            names.update(
                p.relative_to(root).as_posix() for p in search_dir.rglob("*") if p.is_file()
            )
        return sorted(names)
