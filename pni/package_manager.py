"""Package-manager detection and install command construction."""

from __future__ import annotations

import shutil
from enum import Enum
from pathlib import Path


class PackageManager(str, Enum):
    NPM = "npm"
    PNPM = "pnpm"
    YARN = "yarn"


# Lock file -> manager, checked in this order.
LOCK_FILES: tuple[tuple[str, PackageManager], ...] = (
    ("pnpm-lock.yaml", PackageManager.PNPM),
    ("yarn.lock", PackageManager.YARN),
    ("package-lock.json", PackageManager.NPM),
)


def detect_package_manager(cwd: str | Path, override: str | None = None) -> PackageManager:
    """Pick the package manager for *cwd*.

    An explicit *override* wins.  Otherwise the first lock file found decides;
    without one, pnpm then yarn are probed on ``PATH`` and npm is the fallback.
    """
    if override:
        return PackageManager(override)

    root = Path(cwd)
    for lock_file, manager in LOCK_FILES:
        if (root / lock_file).exists():
            return manager

    for manager in (PackageManager.PNPM, PackageManager.YARN):
        if shutil.which(manager.value):
            return manager
    return PackageManager.NPM


def install_command(pm: PackageManager, packages: list[str]) -> str:
    """Command that adds *packages* as runtime dependencies."""
    package_list = " ".join(packages)
    if pm is PackageManager.PNPM:
        return f"pnpm add {package_list}"
    if pm is PackageManager.YARN:
        return f"yarn add {package_list}"
    return f"npm install {package_list}"


def dev_install_command(pm: PackageManager, packages: list[str]) -> str:
    """Command that adds *packages* as development dependencies."""
    package_list = " ".join(packages)
    if pm is PackageManager.PNPM:
        return f"pnpm add -D {package_list}"
    if pm is PackageManager.YARN:
        return f"yarn add -D {package_list}"
    return f"npm install --save-dev {package_list}"


def dlx_prefix(pm: PackageManager) -> str:
    """Prefix for running a package binary without installing it."""
    return "pnpm dlx" if pm is PackageManager.PNPM else "npx"
