"""pni configuration.

Typed run configuration built from environment variables and then layered
with command-line flags.  Pydantic v2 validates everything at construction
time.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

_BUNDLED_TEMPLATE_DIR = Path(__file__).parent / "templates"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in _TRUTHY


class Config(BaseModel):
    """Global pni configuration.

    Created once by the CLI entry point and passed to the orchestrator and
    the ``add-three`` runner.
    """

    target_dir: Path = Field(default_factory=Path.cwd)
    non_interactive: bool = Field(default=False)
    verbose: bool = Field(default=False)
    template_dir: Path = Field(
        default_factory=lambda: Path.home() / ".pni" / "templates",
        description="User template overrides, searched before the bundled templates",
    )
    package_manager: Literal["npm", "pnpm", "yarn"] | None = Field(
        default=None,
        description="Skip lock-file detection and always use this package manager",
    )
    regenerate_framework_config: bool = Field(
        default=False,
        description="Rewrite nuxt.config.ts from the template instead of patching it",
    )

    # ------------------------------------------------------------------
    # Derived paths
    # ------------------------------------------------------------------

    @property
    def bundled_template_dir(self) -> Path:
        """Templates shipped inside the package."""
        return _BUNDLED_TEMPLATE_DIR

    @property
    def template_search_paths(self) -> list[Path]:
        """Template roots in lookup order: user overrides, then bundled."""
        return [self.template_dir, self.bundled_template_dir]

    @property
    def resolved_target(self) -> Path:
        return self.target_dir.expanduser().resolve()

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            PNI_TEMPLATE_DIR, PNI_PACKAGE_MANAGER,
            PNI_REGENERATE_FRAMEWORK_CONFIG, PNI_VERBOSE.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("PNI_TEMPLATE_DIR"):
            kwargs["template_dir"] = Path(os.environ["PNI_TEMPLATE_DIR"])
        if os.environ.get("PNI_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["PNI_PACKAGE_MANAGER"].strip().lower()
        kwargs["regenerate_framework_config"] = _env_flag("PNI_REGENERATE_FRAMEWORK_CONFIG")
        kwargs["verbose"] = _env_flag("PNI_VERBOSE")
        return cls(**kwargs)
