"""Dependency resolution.

Maps a project kind and feature flags to the packages that must be
installed.  Pure and deterministic: the same inputs always give the same
ordered lists, so the install commands are reproducible.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from pni.detection import ProjectKind


class DependencySet(BaseModel):
    """Runtime and development packages, in install order."""

    production: list[str] = Field(default_factory=list)
    dev: list[str] = Field(default_factory=list)


COMMON_DEPS = DependencySet(production=["gsap", "lenis"])

BASE_DEPS: dict[ProjectKind, DependencySet] = {
    ProjectKind.NUXT: DependencySet(
        production=[
            "@vueuse/core",
            "@nuxtjs/seo",
            "@nuxt/image",
            "@nuxtjs/device",
            "shadcn-nuxt",
        ],
    ),
    ProjectKind.VUE: DependencySet(),
}

THREEJS_DEPS: dict[ProjectKind, DependencySet] = {
    ProjectKind.NUXT: DependencySet(
        production=["three", "@vueuse/core", "postprocessing"],
        dev=["@types/three"],
    ),
    ProjectKind.VUE: DependencySet(production=["three", "@vueuse/core"]),
}

CSS_VARS_DEPS: dict[ProjectKind, DependencySet] = {
    ProjectKind.NUXT: DependencySet(dev=["typescript", "tailwindcss", "@tailwindcss/vite"]),
    ProjectKind.VUE: DependencySet(dev=["tailwindcss", "@tailwindcss/vite", "tw-animate-css"]),
}


def _ordered_union(*groups: list[str]) -> list[str]:
    seen: dict[str, None] = {}
    for group in groups:
        for name in group:
            if name:
                seen.setdefault(name, None)
    return list(seen)


def resolve_dependencies(kind: ProjectKind, threejs: bool, css_vars: bool) -> DependencySet:
    """Return the packages to install for *kind* with the given features.

    Base entries always come first; feature sets are appended in the order
    Three.js, then CSS variables, and duplicates keep their first position.

    Raises:
        ValueError: *kind* is ``ProjectKind.NONE``.
    """
    if kind not in BASE_DEPS:
        raise ValueError(f"Cannot resolve dependencies for project kind {kind.value!r}")

    parts = [COMMON_DEPS, BASE_DEPS[kind]]
    if threejs:
        parts.append(THREEJS_DEPS[kind])
    if css_vars:
        parts.append(CSS_VARS_DEPS[kind])

    return DependencySet(
        production=_ordered_union(*(p.production for p in parts)),
        dev=_ordered_union(*(p.dev for p in parts)),
    )
