"""App structure generation.

Writes the page, layout and router boilerplate for Nuxt and Vue projects and
wires the router (plus any detected Vue plugins) into the Vue entry module.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from pni.detection import read_manifest_dependencies

from .merge import Anchor, ConfigDocument, MergeOutcome, Section
from .templates import TemplateRenderer


@dataclass(frozen=True)
class VuePlugin:
    """How a Vue plugin package is imported and registered in ``main``."""

    package: str
    import_line: str
    use: str
    # Project-relative module that must exist (``.js`` or ``.ts``) for the
    # plugin to be wired in.
    requires: str | None = None

    @property
    def first_import_line(self) -> str:
        return self.import_line.split("\n", 1)[0]


VUE_PLUGINS: tuple[VuePlugin, ...] = (
    VuePlugin("pinia", "import { createPinia } from 'pinia'", "app.use(createPinia())"),
    VuePlugin("vuex", "import store from './store'", "app.use(store)", requires="src/store/index.js"),
    VuePlugin("vue-i18n", "import i18n from './i18n'", "app.use(i18n)", requires="src/i18n/index.js"),
    VuePlugin(
        "vue-toastification",
        "import Toast from 'vue-toastification'\nimport 'vue-toastification/dist/index.css'",
        "app.use(Toast)",
    ),
)

ROUTER_IMPORT = "import router from './router'"
ROUTER_USE = "app.use(router)"

_CREATE_APP_IMPORT = re.compile(r"import\s*\{\s*createApp\s*\}\s*from\s*['\"]vue['\"];?")
_CONST_APP = re.compile(r"const\s+app\s*=\s*createApp\([^)]*\);?")
_ONE_LINER = re.compile(
    r"(?<![\w.])createApp\(([^)]*)\)((?:\.use\([^)]*\))*)\.mount\(([^)]*)\);?"
)
_CHAINED_USE = re.compile(r"\.use\(([^)]*)\)")


def detect_vue_plugins(project_root: Path) -> list[VuePlugin]:
    """Plugins declared in the manifest whose required modules exist."""
    deps = read_manifest_dependencies(project_root) or {}
    found: list[VuePlugin] = []
    for plugin in VUE_PLUGINS:
        if plugin.package not in deps:
            continue
        if plugin.requires:
            required = project_root / plugin.requires
            if not required.exists() and not required.with_suffix(".ts").exists():
                continue
        found.append(plugin)
    return found


def normalize_main_entry(text: str) -> str:
    """Split a ``createApp(App).use(x).mount('#app')`` chain into statements.

    Text that already declares ``const app`` is returned unchanged.
    """
    if _CONST_APP.search(text):
        return text
    match = _ONE_LINER.search(text)
    if match is None:
        return text

    root_component, chain, mount_target = match.groups()
    lines = [f"const app = createApp({root_component})", ""]
    lines += [f"app.use({arg})" for arg in _CHAINED_USE.findall(chain)]
    if len(lines) > 2:
        lines.append("")
    lines.append(f"app.mount({mount_target})")
    return text[: match.start()] + "\n".join(lines) + text[match.end():]


def main_entry_sections(plugins: list[VuePlugin]) -> list[Section]:
    """Router and plugin wiring for ``src/main``, in insertion order."""
    sections = [
        Section(
            name="router-import",
            signature=re.compile(r"import\s+router\s+from"),
            fragment=f"\n{ROUTER_IMPORT}",
            anchors=(Anchor(_CREATE_APP_IMPORT),),
        ),
    ]

    previous_import = ROUTER_IMPORT
    for plugin in plugins:
        sections.append(
            Section(
                name=f"plugin-import:{plugin.package}",
                signature=plugin.first_import_line,
                fragment=f"\n{plugin.import_line}",
                anchors=(Anchor(previous_import), Anchor(_CREATE_APP_IMPORT)),
            )
        )
        previous_import = plugin.import_line

    sections.append(
        Section(
            name="router-use",
            signature=ROUTER_USE,
            fragment=f"\n\n{ROUTER_USE}",
            anchors=(Anchor(_CONST_APP),),
        )
    )

    previous_use = ROUTER_USE
    for plugin in plugins:
        sections.append(
            Section(
                name=f"plugin-use:{plugin.package}",
                signature=plugin.use,
                fragment=f"\n{plugin.use}",
                anchors=(Anchor(previous_use), Anchor(_CONST_APP)),
            )
        )
        previous_use = plugin.use

    return sections


class StructureGenerator:
    """Writes the app skeleton for Nuxt and Vue projects."""

    _NUXT_FILES: dict[str, str] = {
        "nuxt/app.vue.template": "app/app.vue",
        "nuxt/pages/index.vue.template": "app/pages/index.vue",
    }

    _VUE_FILES: dict[str, str] = {
        "vue/App.vue.template": "src/App.vue",
        "vue/router/index.js.template": "src/router/index.js",
        "vue/pages/Home.vue.template": "src/pages/Home.vue",
        "vue/pages/Typography.vue.template": "src/pages/Typography.vue",
    }

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    async def _write_all(self, project_root: Path, files: dict[str, str]) -> list[Path]:
        written: list[Path] = []
        for template_name, relative in files.items():
            path = await self.renderer.materialize(template_name, project_root / relative)
            written.append(path)
        return written

    async def setup_nuxt(self, project_root: Path) -> list[Path]:
        """Write ``app/app.vue`` (layout, page and Lenis) and the index page."""
        return await self._write_all(project_root, self._NUXT_FILES)

    async def setup_vue(self, project_root: Path) -> tuple[list[Path], MergeOutcome]:
        """Write App, router and pages, then merge the router into ``main``."""
        written = await self._write_all(project_root, self._VUE_FILES)
        outcome = await self.main_entry_document(project_root).merge()
        return written, outcome

    def main_entry_document(self, project_root: Path) -> ConfigDocument:
        """The Vue entry module: existing ``main.js``, else ``main.ts``, else a new ``main.js``.

        An existing ``main.ts`` is patched in place because ``index.html``
        loads it by name.
        """
        src = project_root / "src"
        path = src / "main.js"
        if not path.exists() and (src / "main.ts").exists():
            path = src / "main.ts"

        plugins = detect_vue_plugins(project_root)

        def create() -> str:
            return self.renderer.render(
                "vue/main.js.template",
                {
                    "PLUGIN_IMPORTS": "".join(f"{p.import_line}\n" for p in plugins),
                    "PLUGIN_USES": "".join(f"{p.use}\n" for p in plugins),
                },
            )

        return ConfigDocument(
            path=path,
            sections=main_entry_sections(plugins),
            create=create,
            prepare=normalize_main_entry,
        )

    async def create_typography_page(self, project_root: Path) -> Path:
        """Nuxt typography preview page at ``app/pages/typography/index.vue``."""
        return await self.renderer.materialize(
            "nuxt/pages/typography/index.vue.template",
            project_root / "app" / "pages" / "typography" / "index.vue",
        )
