"""Design-token (CSS variable) stylesheet generation.

The stylesheet is assembled from three token fragments (``@theme inline``,
``:root`` and ``.dark``) wrapped in a page-level template.  The same
fragments back the merge sections, so a patched stylesheet and a generated
one carry identical token blocks.
"""

from __future__ import annotations

import re
from pathlib import Path

from pni.detection import ProjectKind

from .merge import Anchor, ConfigDocument, MergeOutcome, Section
from .templates import TemplateRenderer

STYLESHEET_PATHS: dict[ProjectKind, tuple[str, ...]] = {
    ProjectKind.NUXT: ("app", "assets", "css", "tailwind.css"),
    ProjectKind.VUE: ("src", "assets", "style.css"),
}

FONT_URLS: dict[ProjectKind, str] = {
    ProjectKind.NUXT: "~/assets/fonts/Helvetica.ttf",
    ProjectKind.VUE: "@/assets/fonts/Helvetica.ttf",
}

VUE_STYLESHEET_HREF = "/src/assets/style.css"
_STYLESHEET_LINK = f'<link href="{VUE_STYLESHEET_HREF}" rel="stylesheet">'

_TAILWIND_IMPORT_RE = re.compile(r"@import\s+[\"']tailwindcss[\"'];?")
_ANIMATE_IMPORT_RE = re.compile(r"@import\s+[\"']tw-animate-css[\"'];?")


def stylesheet_path(project_root: Path, kind: ProjectKind) -> Path:
    return project_root.joinpath(*STYLESHEET_PATHS[kind])


def index_html_sections() -> list[Section]:
    """The Vue ``index.html`` stylesheet link, with head/html fallbacks."""
    return [
        Section(
            name="stylesheet-link",
            signature=VUE_STYLESHEET_HREF,
            fragment=f"\n  {_STYLESHEET_LINK}",
            anchors=(
                Anchor("</head>", before=True, fragment=f"  {_STYLESHEET_LINK}\n"),
                Anchor(re.compile(r"<head[^>]*>")),
                Anchor(
                    re.compile(r"<html[^>]*>"),
                    fragment=f"\n<head>\n  {_STYLESHEET_LINK}\n</head>",
                ),
            ),
        )
    ]


class DesignTokenGenerator:
    """Writes and merges the Tailwind CSS-variable stylesheet."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    # -- Fragments ---------------------------------------------------------

    def theme_block(self) -> str:
        return self.renderer.render("styles/theme.css.template")

    def root_tokens(self) -> str:
        return self.renderer.render("styles/root-tokens.css.template")

    def dark_tokens(self) -> str:
        return self.renderer.render("styles/dark-tokens.css.template")

    def render_stylesheet(self, kind: ProjectKind) -> str:
        return self.renderer.render(
            "styles/tokens.css.template",
            {
                "FONT_URL": FONT_URLS[kind],
                "THEME_BLOCK": self.theme_block(),
                "ROOT_TOKENS": self.root_tokens(),
                "DARK_TOKENS": self.dark_tokens(),
            },
        )

    def sections(self) -> list[Section]:
        """Token sections an existing stylesheet must contain, in order."""
        theme = self.theme_block()
        root = f":root {{\n{self.root_tokens()}}}\n"
        dark = f".dark {{\n{self.dark_tokens()}}}\n"
        return [
            Section(
                name="tailwind-import",
                signature=_TAILWIND_IMPORT_RE,
                fragment='@import "tailwindcss";\n',
                anchors=(Anchor(re.compile(r"\A")),),
            ),
            Section(
                name="animate-import",
                signature=_ANIMATE_IMPORT_RE,
                fragment='\n@import "tw-animate-css";',
                anchors=(Anchor(_TAILWIND_IMPORT_RE),),
            ),
            Section(
                name="theme-inline",
                signature="@theme inline",
                fragment=f"\n\n{theme}",
                anchors=(Anchor(_ANIMATE_IMPORT_RE), Anchor(_TAILWIND_IMPORT_RE)),
            ),
            Section(
                name="root-tokens",
                signature="--radius:",
                fragment=f"\n{root}",
                anchors=(Anchor(re.compile(r"@theme inline\s*\{[^}]*\}\n?")), Anchor(re.compile(r"\Z"))),
            ),
            Section(
                name="dark-tokens",
                signature=re.compile(r"\.dark\s*\{"),
                fragment=f"\n{dark}",
                anchors=(Anchor(re.compile(r"\Z")),),
            ),
        ]

    # -- Writers -------------------------------------------------------------

    async def write_base(self, project_root: Path, kind: ProjectKind) -> Path:
        """Write the bare ``@import "tailwindcss"`` stylesheet."""
        return await self.renderer.materialize(
            "styles/base.css.template", stylesheet_path(project_root, kind)
        )

    async def write_full(self, project_root: Path, kind: ProjectKind) -> Path:
        """Overwrite the stylesheet with the full token set."""
        return await self.renderer.materialize(
            "styles/tokens.css.template",
            stylesheet_path(project_root, kind),
            {
                "FONT_URL": FONT_URLS[kind],
                "THEME_BLOCK": self.theme_block(),
                "ROOT_TOKENS": self.root_tokens(),
                "DARK_TOKENS": self.dark_tokens(),
            },
        )

    async def merge(self, project_root: Path, kind: ProjectKind) -> MergeOutcome:
        """Create the stylesheet, or add whichever token blocks it lacks."""
        document = ConfigDocument(
            path=stylesheet_path(project_root, kind),
            sections=self.sections(),
            create=lambda: self.render_stylesheet(kind),
        )
        return await document.merge()

    async def link_stylesheet(self, project_root: Path) -> MergeOutcome | None:
        """Add the stylesheet link to a Vue ``index.html``; ``None`` if there is none."""
        index_path = project_root / "index.html"
        if not index_path.is_file():
            return None
        document = ConfigDocument(
            path=index_path,
            sections=index_html_sections(),
            create=lambda: index_path.read_text(encoding="utf-8"),
        )
        return await document.merge()
