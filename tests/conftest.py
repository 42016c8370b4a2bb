"""Shared pytest fixtures for the pni test suite.

Provides reusable fixtures for:
- Project directories (empty, Nuxt, Vue) built under ``tmp_path``
- A template renderer over the bundled templates
- A mocked command runner standing in for package managers and generators
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock

import pytest

from pni.config import Config
from pni.scaffolder.templates import TemplateRenderer


# ---------------------------------------------------------------------------
# Project files
# ---------------------------------------------------------------------------

NUXT_CONFIG = textwrap.dedent("""\
    // https://nuxt.com/docs/api/configuration/nuxt-config
    export default defineNuxtConfig({
      compatibilityDate: '2025-07-15',
      devtools: { enabled: true },
    })
    """)

VITE_CONFIG = textwrap.dedent("""\
    import { fileURLToPath, URL } from 'node:url'

    import { defineConfig } from 'vite'
    import vue from '@vitejs/plugin-vue'

    // https://vite.dev/config/
    export default defineConfig({
      plugins: [
        vue(),
      ],
      resolve: {
        alias: {
          '@': fileURLToPath(new URL('./src', import.meta.url))
        },
      },
    })
    """)

MAIN_JS = textwrap.dedent("""\
    import { createApp } from 'vue'
    import App from './App.vue'

    createApp(App).mount('#app')
    """)

INDEX_HTML = textwrap.dedent("""\
    <!DOCTYPE html>
    <html lang="en">
      <head>
        <meta charset="UTF-8">
        <title>Vite App</title>
      </head>
      <body>
        <div id="app"></div>
        <script type="module" src="/src/main.js"></script>
      </body>
    </html>
    """)


def write_manifest(root: Path, dependencies: dict[str, str] | None = None,
                   dev_dependencies: dict[str, str] | None = None) -> Path:
    """Write a ``package.json`` with the given dependency maps."""
    data: dict[str, Any] = {"name": root.name, "private": True}
    if dependencies is not None:
        data["dependencies"] = dependencies
    if dev_dependencies is not None:
        data["devDependencies"] = dev_dependencies
    path = root / "package.json"
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def manifest() -> Callable[..., Path]:
    """The ``write_manifest`` helper, for tests that need custom manifests."""
    return write_manifest


@pytest.fixture
def make_files() -> Callable[[Path, dict[str, str]], Path]:
    """Factory writing ``{relative path: content}`` under a root directory."""

    def _make(root: Path, files: dict[str, str]) -> Path:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _make


@pytest.fixture
def nuxt_project(tmp_path: Path) -> Path:
    """A freshly generated Nuxt 4 project (``app/`` layout)."""
    root = tmp_path / "nuxt-app"
    (root / "app").mkdir(parents=True)
    (root / "nuxt.config.ts").write_text(NUXT_CONFIG, encoding="utf-8")
    (root / "app" / "app.vue").write_text("<template><NuxtWelcome /></template>\n", encoding="utf-8")
    write_manifest(root, {"nuxt": "^4.0.0", "vue": "^3.5.0"})
    return root


@pytest.fixture
def vue_project(tmp_path: Path) -> Path:
    """A freshly generated Vue 3 + Vite project."""
    root = tmp_path / "vue-app"
    (root / "src" / "assets").mkdir(parents=True)
    (root / "vite.config.js").write_text(VITE_CONFIG, encoding="utf-8")
    (root / "src" / "main.js").write_text(MAIN_JS, encoding="utf-8")
    (root / "index.html").write_text(INDEX_HTML, encoding="utf-8")
    write_manifest(root, {"vue": "^3.5.0"}, {"vite": "^7.0.0"})
    return root


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


@pytest.fixture
def renderer() -> TemplateRenderer:
    """Renderer over the templates bundled with the package."""
    return TemplateRenderer()


@pytest.fixture
def mock_runner() -> AsyncMock:
    """Command runner that records calls and always succeeds."""
    return AsyncMock(return_value=None)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Non-interactive config with npm pinned and no user templates."""
    return Config(
        target_dir=tmp_path,
        non_interactive=True,
        template_dir=tmp_path / "no-user-templates",
        package_manager="npm",
    )


@pytest.fixture(autouse=True)
def _clean_pni_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's PNI_* variables out of every test."""
    for name in (
        "PNI_TEMPLATE_DIR",
        "PNI_PACKAGE_MANAGER",
        "PNI_REGENERATE_FRAMEWORK_CONFIG",
        "PNI_VERBOSE",
    ):
        monkeypatch.delenv(name, raising=False)
