"""pni workflow orchestrator.

Drives one scaffolding run as a small state machine::

    DETECTING -> SELECTING -> (CREATING) -> INSTALLING -> CONFIGURING -> COMPLETED

``ERROR`` is reachable from every non-terminal state.  CREATING is entered
only when no project was detected.  Each state is one awaited step, and
``Orchestrator.run`` is the single place where a step's exception is turned
into the ERROR state.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field
from rich.markup import escape
from rich.panel import Panel

from pni.config import Config
from pni.dependencies import DependencySet, resolve_dependencies
from pni.detection import ProjectKind, detect_project_type
from pni.errors import PreconditionError, WorkflowStateError
from pni.features import FeatureFlags, FeatureSelection, Prompter, resolve_features
from pni.package_manager import (
    PackageManager,
    detect_package_manager,
    dev_install_command,
    install_command,
)
from pni.scaffolder.app_creation import create_app
from pni.scaffolder.config_gen import ConfigGenerator
from pni.scaffolder.merge import MergeOutcome
from pni.scaffolder.shadcn import setup_shadcn_nuxt
from pni.scaffolder.structure_gen import StructureGenerator
from pni.scaffolder.templates import TemplateRenderer
from pni.scaffolder.tokens_gen import DesignTokenGenerator
from pni.utils import (
    CommandRunner,
    console,
    print_detail,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
    run_checked,
)

# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------


class WorkflowState(str, Enum):
    DETECTING = "detecting"
    SELECTING = "selecting"
    CREATING = "creating"
    INSTALLING = "installing"
    CONFIGURING = "configuring"
    COMPLETED = "completed"
    ERROR = "error"


TRANSITIONS: dict[WorkflowState, frozenset[WorkflowState]] = {
    WorkflowState.DETECTING: frozenset({WorkflowState.SELECTING, WorkflowState.ERROR}),
    WorkflowState.SELECTING: frozenset(
        {WorkflowState.CREATING, WorkflowState.INSTALLING, WorkflowState.ERROR}
    ),
    WorkflowState.CREATING: frozenset({WorkflowState.INSTALLING, WorkflowState.ERROR}),
    WorkflowState.INSTALLING: frozenset({WorkflowState.CONFIGURING, WorkflowState.ERROR}),
    WorkflowState.CONFIGURING: frozenset({WorkflowState.COMPLETED, WorkflowState.ERROR}),
    WorkflowState.COMPLETED: frozenset(),
    WorkflowState.ERROR: frozenset(),
}


class WorkflowResult(BaseModel):
    """Everything a run did, successful or not."""

    state: WorkflowState = WorkflowState.DETECTING
    history: list[WorkflowState] = Field(default_factory=lambda: [WorkflowState.DETECTING])
    error: str | None = None
    detected: ProjectKind | None = None
    features: FeatureSelection | None = None
    project_path: Path | None = None
    package_manager: PackageManager | None = None
    dependencies: DependencySet | None = None
    written: list[Path] = Field(default_factory=list)
    misses: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.state is WorkflowState.COMPLETED

    def advance(self, target: WorkflowState) -> None:
        """Move to *target*.

        Raises:
            WorkflowStateError: The transition table does not allow it.
        """
        if target not in TRANSITIONS[self.state]:
            raise WorkflowStateError(
                f"Illegal transition {self.state.value} -> {target.value}"
            )
        self.state = target
        self.history.append(target)

    def record(self, *paths: Path | None) -> None:
        for path in paths:
            if path is not None and path not in self.written:
                self.written.append(path)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class Orchestrator:
    """Runs detection, creation, installation and configuration in order.

    Args:
        config: Run configuration.
        run: Command runner for package managers and generators.
        prompter: Source of interactive answers; ``None`` uses the terminal.
        renderer: Template renderer; ``None`` builds one from
            ``config.template_search_paths``.
    """

    def __init__(
        self,
        config: Config,
        run: CommandRunner = run_checked,
        prompter: Prompter | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.run_command = run
        self.prompter = prompter
        self.renderer = renderer or TemplateRenderer(config.template_search_paths)
        self.config_generator = ConfigGenerator(
            self.renderer, regenerate_framework_config=config.regenerate_framework_config
        )
        self.structure = StructureGenerator(self.renderer)
        self.tokens = DesignTokenGenerator(self.renderer)
        self.result = WorkflowResult()

    async def run(self, flags: FeatureFlags) -> WorkflowResult:
        """Execute the workflow and return its result; never raises."""
        self.result = WorkflowResult()
        result = self.result

        try:
            print_step_header(WorkflowState.DETECTING.value)
            target = self.config.resolved_target
            result.detected = detect_project_type(target)
            console.print(f"  Detected project: [bold]{result.detected.label}[/bold]")

            result.advance(WorkflowState.SELECTING)
            print_step_header(WorkflowState.SELECTING.value)
            result.features = resolve_features(
                result.detected,
                flags,
                non_interactive=self.config.non_interactive,
                prompter=self.prompter,
            )
            features = result.features

            project_path = target
            if result.detected is ProjectKind.NONE:
                result.advance(WorkflowState.CREATING)
                print_step_header(WorkflowState.CREATING.value)
                if not features.project_name:
                    raise PreconditionError("A project name is required to create a new project.")
                project_path = await create_app(
                    features.project_kind, target, features.project_name, self.run_command
                )
            result.project_path = project_path

            result.advance(WorkflowState.INSTALLING)
            print_step_header(WorkflowState.INSTALLING.value)
            await self._install(project_path, features)

            result.advance(WorkflowState.CONFIGURING)
            print_step_header(WorkflowState.CONFIGURING.value)
            await self._configure(project_path, features)

            result.advance(WorkflowState.COMPLETED)
        except Exception as exc:
            result.error = str(exc)
            result.advance(WorkflowState.ERROR)
            print_error(result.error)

        self._print_summary()
        return result

    # ------------------------------------------------------------------
    # INSTALLING
    # ------------------------------------------------------------------

    async def _install(self, project_path: Path, features: FeatureSelection) -> None:
        pm = detect_package_manager(project_path, self.config.package_manager)
        deps = resolve_dependencies(features.project_kind, features.threejs, features.css_vars)
        self.result.package_manager = pm
        self.result.dependencies = deps
        console.print(f"  Package manager: [bold]{pm.value}[/bold]")

        if deps.production:
            await self.run_command(install_command(pm, deps.production), project_path)
        if deps.dev:
            await self.run_command(dev_install_command(pm, deps.dev), project_path)

    # ------------------------------------------------------------------
    # CONFIGURING
    # ------------------------------------------------------------------

    async def _configure(self, project_path: Path, features: FeatureSelection) -> None:
        outcomes = await self.config_generator.generate(project_path, features)
        for outcome in outcomes:
            self._record_outcome(outcome)

        if features.project_kind is ProjectKind.NUXT:
            await self._configure_nuxt(project_path, features)
        else:
            await self._configure_vue(project_path, features)

    async def _configure_nuxt(self, project_path: Path, features: FeatureSelection) -> None:
        self.result.record(*await self.structure.setup_nuxt(project_path))
        if not features.css_vars:
            return

        # shadcn-vue init rewrites the stylesheet, so the full tokens go last.
        self.result.record(await self.tokens.write_base(project_path, ProjectKind.NUXT))
        pm = self.result.package_manager or PackageManager.NPM
        self.result.record(
            await setup_shadcn_nuxt(project_path, pm, self.renderer, self.run_command)
        )
        self.result.record(await self.tokens.write_full(project_path, ProjectKind.NUXT))
        self.result.record(await self.structure.create_typography_page(project_path))

    async def _configure_vue(self, project_path: Path, features: FeatureSelection) -> None:
        written, main_outcome = await self.structure.setup_vue(project_path)
        self.result.record(*written)
        self._record_outcome(main_outcome)
        if not features.css_vars:
            return

        self._record_outcome(await self.tokens.merge(project_path, ProjectKind.VUE))
        link_outcome = await self.tokens.link_stylesheet(project_path)
        if link_outcome is None:
            print_warning("index.html not found; add the stylesheet link manually.")
        else:
            self._record_outcome(link_outcome)

    def _record_outcome(self, outcome: MergeOutcome) -> None:
        label = self._relative(outcome.path)
        if outcome.written:
            self.result.record(outcome.path)
        if outcome.missed:
            self.result.misses[label] = outcome.missed
            print_warning(
                f"Could not patch {label}: {', '.join(outcome.missed)}. Add these manually."
            )

        console.print(f"  {label}: [cyan]{outcome.action.value}[/cyan]")
        if self.config.verbose and outcome.patch is not None:
            for name, status in outcome.patch.statuses.items():
                print_detail(f"{name}: {status.value}")
        if outcome.removed is not None:
            print_detail(f"removed {self._relative(outcome.removed)}")

    def _relative(self, path: Path) -> str:
        base = self.result.project_path or self.config.resolved_target
        try:
            return path.relative_to(base).as_posix()
        except ValueError:
            return str(path)

    # ------------------------------------------------------------------
    # Summary
    # ------------------------------------------------------------------

    def _print_summary(self) -> None:
        result = self.result
        features = result.features

        if result.success and features is not None:
            rows = {
                "Project": str(result.project_path),
                "Type": features.project_kind.label,
                "Three.js": "yes" if features.threejs else "no",
                "CSS variables": "yes" if features.css_vars else "no",
                "Package manager": result.package_manager.value if result.package_manager else "-",
                "Files written": str(len(result.written)),
            }
            if result.misses:
                rows["Patch misses"] = ", ".join(
                    f"{path} ({len(names)})" for path, names in result.misses.items()
                )
            print_summary_table(rows, title="pni")
            print_success("Setup completed successfully!")
            return

        console.print()
        console.print(
            Panel(
                f"[bold red]Setup failed[/bold red]\n\n"
                f"Step  : {result.history[-2].value if len(result.history) > 1 else '-'}\n"
                f"Error : {escape(result.error or '')}",
                title="[bold]pni[/bold]",
                border_style="bold red",
            )
        )
