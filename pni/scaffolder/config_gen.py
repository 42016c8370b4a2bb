"""Build-tool and framework config generation.

Produces ``vite.config.js`` for Vue projects and ``nuxt.config.ts`` for Nuxt
projects.  A missing file is rendered from its template.  An existing file is
patched section by section (see ``pni.scaffolder.merge``) so user settings
survive.
"""

from __future__ import annotations

import re
from pathlib import Path

from pni.detection import ProjectKind
from pni.features import FeatureSelection

from .merge import (
    Anchor,
    ConfigDocument,
    MergeOutcome,
    Section,
    list_end,
    list_item,
    when_key_absent,
)
from .templates import TemplateRenderer

COMPATIBILITY_DATE = "2025-07-15"

NUXT_MODULES: tuple[str, ...] = (
    "lenis/nuxt",
    "shadcn-nuxt",
    "@nuxtjs/seo",
    "@nuxt/image",
    "@nuxtjs/device",
)

NUXT_CSS_ENTRY = "~/assets/css/tailwind.css"

TAILWIND_IMPORT = "import tailwindcss from '@tailwindcss/vite'"
_TAILWIND_IMPORT_SIGNATURE = re.compile(r"from\s+['\"]@tailwindcss/vite['\"]")
_TAILWIND_PLUGIN_SIGNATURE = re.compile(r"\btailwindcss\(\)")

_NUXT_OPEN = re.escape("defineNuxtConfig({")
_COMPAT_LINE = r"\bcompatibilityDate:\s*(?P<quote>['\"])[^'\"\n]*(?P=quote)\s*,"
_CSS_LINE = r"\bcss:\s*\[[^\[\]]*\],"
_MODULES_LINE = r"\bmodules:\s*\[[^\[\]]*\],"

_VITE_CONFIG_TEMPLATE = "vite/vite.config.js.template"
_NUXT_CONFIG_TEMPLATE = "nuxt/nuxt.config.ts.template"


# ---------------------------------------------------------------------------
# Section catalogues
# ---------------------------------------------------------------------------


def vite_sections(features: FeatureSelection) -> list[Section]:
    """Sections an existing ``vite.config`` must contain."""
    if not features.css_vars:
        return []
    return [
        Section(
            name="tailwind-import",
            signature=_TAILWIND_IMPORT_SIGNATURE,
            fragment=f"\n{TAILWIND_IMPORT}",
            anchors=(
                Anchor(re.compile(r"import\s*\{\s*defineConfig\s*\}\s*from\s*['\"]vite['\"];?")),
                Anchor(re.compile(r"\A"), fragment=f"{TAILWIND_IMPORT}\n"),
            ),
        ),
        Section(
            name="tailwind-plugin",
            signature=_TAILWIND_PLUGIN_SIGNATURE,
            fragment="\n    tailwindcss(),",
            anchors=(Anchor(re.compile(r"\bplugins:\s*\[")),),
        ),
    ]


def _after_chain(key: str, *anchor_regexes: str, fragment: str) -> tuple[Anchor, ...]:
    """Anchors that add a new ``key`` after the first anchor found, in order."""
    return tuple(
        Anchor(when_key_absent(key, regex), fragment=fragment) for regex in anchor_regexes
    )


def nuxt_sections(features: FeatureSelection) -> list[Section]:
    """Sections an existing ``nuxt.config.ts`` must contain, in insertion order."""
    sections: list[Section] = [
        Section(
            name="compatibility-date",
            signature=re.compile(r"\bcompatibilityDate\s*:"),
            fragment=f"\n  compatibilityDate: '{COMPATIBILITY_DATE}',",
            anchors=(Anchor("defineNuxtConfig({"),),
        ),
    ]

    if features.css_vars:
        css_item = f"'{NUXT_CSS_ENTRY}'"
        sections += [
            Section(
                name="tailwind-import",
                signature=_TAILWIND_IMPORT_SIGNATURE,
                fragment=f"{TAILWIND_IMPORT}\n",
                anchors=(Anchor(re.compile(r"\A")),),
            ),
            Section(
                name="css-entry",
                signature=NUXT_CSS_ENTRY,
                fragment="",
                anchors=(Anchor(list_end("css"), fragment=list_item(css_item)),)
                + _after_chain(
                    "css", _COMPAT_LINE, _NUXT_OPEN, fragment=f"\n  css: [{css_item}],"
                ),
            ),
        ]

    for module in NUXT_MODULES:
        item = f"'{module}'"
        sections.append(
            Section(
                name=f"module:{module}",
                signature=re.compile(rf"['\"]{re.escape(module)}['\"]"),
                fragment="",
                anchors=(Anchor(list_end("modules"), fragment=list_item(item)),)
                + _after_chain(
                    "modules",
                    _CSS_LINE,
                    _COMPAT_LINE,
                    _NUXT_OPEN,
                    fragment=f"\n  modules: [{item}],",
                ),
            )
        )

    if features.css_vars:
        vite_block = "\n  vite: {\n    plugins: [tailwindcss()],\n  },"
        shadcn_block = (
            "\n  shadcn: {\n"
            "    prefix: '',\n"
            "    componentDir: '@/components/ui',\n"
            "  },"
        )
        sections += [
            Section(
                name="vite-tailwind-plugin",
                signature=_TAILWIND_PLUGIN_SIGNATURE,
                fragment="",
                anchors=(
                    Anchor(
                        re.compile(r"\bvite:\s*\{[^{}]*?\bplugins:\s*\[[^\[\]]*?(?=\s*\])"),
                        fragment=list_item("tailwindcss()"),
                    ),
                    Anchor(
                        when_key_absent("plugins", r"\bvite:\s*\{"),
                        fragment="\n    plugins: [tailwindcss()],",
                    ),
                )
                + _after_chain("vite", _MODULES_LINE, _COMPAT_LINE, _NUXT_OPEN, fragment=vite_block),
            ),
            Section(
                name="shadcn-block",
                signature=re.compile(r"\bshadcn\s*:"),
                fragment=shadcn_block,
                anchors=(
                    Anchor(re.compile(_MODULES_LINE)),
                    Anchor("defineNuxtConfig({"),
                ),
            ),
        ]

    return sections


# ---------------------------------------------------------------------------
# ConfigGenerator
# ---------------------------------------------------------------------------


class ConfigGenerator:
    """Creates or patches the build-tool and framework config files."""

    def __init__(self, renderer: TemplateRenderer, regenerate_framework_config: bool = False) -> None:
        self.renderer = renderer
        self.regenerate_framework_config = regenerate_framework_config

    async def generate(self, project_root: Path, features: FeatureSelection) -> list[MergeOutcome]:
        """Merge the config files relevant to ``features.project_kind``."""
        if features.project_kind is ProjectKind.NUXT:
            return [await self.nuxt_document(project_root, features).merge()]
        if features.project_kind is ProjectKind.VUE:
            return [await self.vite_document(project_root, features).merge()]
        return []

    # -- Vite --------------------------------------------------------------

    def render_vite_config(self, features: FeatureSelection) -> str:
        threejs_chunk = ""
        if features.threejs:
            threejs_chunk = (
                "            // Split heavy 3D libraries into their own chunk\n"
                "            if (id.includes('three')) return 'three-vendor'\n"
            )
        return self.renderer.render(
            _VITE_CONFIG_TEMPLATE,
            {
                "TAILWIND_IMPORT": f"{TAILWIND_IMPORT}\n" if features.css_vars else "",
                "TAILWIND_PLUGIN": "    tailwindcss(),\n" if features.css_vars else "",
                "THREEJS_CHUNK": threejs_chunk,
            },
        )

    def vite_document(self, project_root: Path, features: FeatureSelection) -> ConfigDocument:
        """``vite.config.js``, migrating a legacy ``vite.config.ts`` if present."""
        return ConfigDocument(
            path=project_root / "vite.config.js",
            sections=vite_sections(features),
            create=lambda: self.render_vite_config(features),
            legacy_paths=(project_root / "vite.config.ts",),
        )

    # -- Nuxt --------------------------------------------------------------

    def render_nuxt_config(self, features: FeatureSelection) -> str:
        css_vars = features.css_vars
        vite_config = ""
        shadcn_config = ""
        if css_vars:
            vite_config = (
                "  vite: {\n"
                "    plugins: [tailwindcss()],\n"
                "    esbuild: {\n"
                "      drop: process.env.NODE_ENV === 'production' ? ['console', 'debugger'] : [],\n"
                "    },\n"
                "    build: {\n"
                "      cssMinify: 'lightningcss',\n"
                "    },\n"
                "  },\n\n"
            )
            shadcn_config = (
                "  shadcn: {\n"
                "    prefix: '',\n"
                "    componentDir: '@/components/ui',\n"
                "  },\n\n"
            )
        return self.renderer.render(
            _NUXT_CONFIG_TEMPLATE,
            {
                "TAILWIND_IMPORT": f"{TAILWIND_IMPORT}\n\n" if css_vars else "",
                "COMPATIBILITY_DATE": COMPATIBILITY_DATE,
                "CSS_IMPORT": f"  css: ['{NUXT_CSS_ENTRY}'],\n\n" if css_vars else "",
                "VITE_CONFIG": vite_config,
                "MODULES": ", ".join(f"'{m}'" for m in NUXT_MODULES),
                "SHADCN_CONFIG": shadcn_config,
            },
        )

    def nuxt_document(self, project_root: Path, features: FeatureSelection) -> ConfigDocument:
        return ConfigDocument(
            path=project_root / "nuxt.config.ts",
            sections=nuxt_sections(features),
            create=lambda: self.render_nuxt_config(features),
            regenerate=self.regenerate_framework_config,
        )
