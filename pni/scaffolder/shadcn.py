"""shadcn-vue setup for Nuxt projects.

Registers the ``shadcn-nuxt`` module, adds the SSR width plugin the
components rely on, then lets ``shadcn-vue`` initialise itself and add a
first component.  ``shadcn-vue init`` rewrites the Tailwind stylesheet, so
callers regenerate the design tokens afterwards.
"""

from __future__ import annotations

from pathlib import Path

from pni.package_manager import PackageManager, dlx_prefix
from pni.utils import CommandRunner

from .templates import TemplateRenderer

SSR_WIDTH_TEMPLATE = "nuxt/plugins/ssr-width.ts.template"


def ssr_width_plugin_path(project_root: Path) -> Path:
    """``app/plugins/ssr-width.ts`` when the app directory exists, else ``plugins/``."""
    if (project_root / "app").is_dir():
        return project_root / "app" / "plugins" / "ssr-width.ts"
    return project_root / "plugins" / "ssr-width.ts"


async def setup_shadcn_nuxt(
    project_root: Path,
    pm: PackageManager,
    renderer: TemplateRenderer,
    run: CommandRunner,
) -> Path:
    """Run the shadcn setup commands in *project_root*.

    Returns the path of the written SSR width plugin.

    Raises:
        CommandError: One of the setup commands failed.
    """
    dlx = dlx_prefix(pm)

    await run(f"{dlx} nuxi@latest module add shadcn-nuxt", project_root)

    plugin_path = await renderer.materialize(
        SSR_WIDTH_TEMPLATE, ssr_width_plugin_path(project_root)
    )

    await run(f"{dlx} nuxi@latest prepare", project_root)
    await run(f"{dlx} shadcn-vue@latest init", project_root)
    await run(f"{dlx} shadcn-vue@latest add button", project_root)
    return plugin_path
