"""pni command-line entry point.

Usage::

    pni                                  # detect, ask, install and configure
    pni --nuxt --threejs --name demo --non-interactive
    pni add-three                        # add the Three.js world to this directory
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError

from pni import __version__
from pni.config import Config
from pni.features import FeatureFlags
from pni.orchestrator import Orchestrator
from pni.scaffolder.graphics import GraphicsInstaller
from pni.scaffolder.templates import TemplateRenderer
from pni.utils import console, print_error, print_success, print_summary_table


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pni",
        description="Set up Nuxt and Vue projects with Three.js and Tailwind CSS variables",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  pni\n"
            "  pni --nuxt --threejs\n"
            "  pni --vue --name my-app --non-interactive\n"
            "  pni add-three\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"pni {__version__}")

    kind = parser.add_mutually_exclusive_group()
    kind.add_argument("--nuxt", action="store_true", help="Set up a Nuxt project")
    kind.add_argument("--vue", action="store_true", help="Set up a Vue project")

    parser.add_argument(
        "--threejs",
        action="store_true",
        default=None,
        help="Include the Three.js setup",
    )
    parser.add_argument(
        "--css-vars",
        action="store_true",
        default=None,
        help="Include Tailwind CSS variables (always enabled)",
    )
    parser.add_argument(
        "--dir",
        default=None,
        help="Project directory, or parent directory for a new project (default: cwd)",
    )
    parser.add_argument("--name", default=None, help="Name of the project to create")
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Never prompt; use flags, detected values and defaults",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print per-section merge details",
    )

    subparsers = parser.add_subparsers(dest="command")
    add_three = subparsers.add_parser(
        "add-three",
        help="Add the Three.js world and composables to the current directory",
    )
    add_three.add_argument(
        "--dir",
        dest="three_dir",
        default=None,
        help="Directory to install into (default: cwd)",
    )
    return parser


def build_config(args: argparse.Namespace) -> Config:
    """Environment configuration with command-line flags layered on top."""
    config = Config.from_env()
    directory = getattr(args, "three_dir", None) or args.dir
    if directory:
        config.target_dir = Path(directory)
    config.non_interactive = args.non_interactive
    config.verbose = config.verbose or args.verbose
    return config


async def run_setup(config: Config, args: argparse.Namespace) -> int:
    flags = FeatureFlags(
        nuxt=args.nuxt,
        vue=args.vue,
        threejs=args.threejs,
        css_vars=args.css_vars,
        name=args.name,
    )
    result = await Orchestrator(config).run(flags)
    return 0 if result.success else 1


async def run_add_three(config: Config) -> int:
    installer = GraphicsInstaller(TemplateRenderer(config.template_search_paths))
    try:
        result = await installer.install(config.resolved_target)
    except Exception as exc:
        print_error(f"Error: {exc}")
        return 1

    root = result.source_folder.parent
    print_summary_table(
        {
            "Project type": result.project_kind.label,
            "Three.js folder": str(result.three_path),
            "Composables": ", ".join(p.relative_to(root).as_posix() for p in result.composables),
            "World import": result.import_path,
        },
        title="add-three",
    )
    print_success("Three.js added successfully!")
    console.print(
        f"  Use it in a component: [bold]import {{ useThree }} from "
        f"'@/composables/{result.directory_name}/usethree'[/bold]"
    )
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``pni``."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = build_config(args)
    except ValidationError as exc:
        print_error(f"Invalid configuration: {exc}")
        sys.exit(2)

    if args.command == "add-three":
        exit_code = asyncio.run(run_add_three(config))
    else:
        exit_code = asyncio.run(run_setup(config, args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
