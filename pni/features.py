"""Feature selection.

Merges explicit command-line flags with interactively collected answers into
a single ``FeatureSelection``.  Flags always win over answers for the same
field.

The interactive questions form a small state machine.  Which questions are
asked depends on the detected project kind, so each kind has its own
transition table in ``PROMPT_FLOWS`` instead of a shifting step counter.
"""

from __future__ import annotations

from enum import Enum
from typing import Protocol

from pydantic import BaseModel, Field
from rich.prompt import Confirm, Prompt

from pni.detection import ProjectKind
from pni.errors import PreconditionError
from pni.utils import console, print_warning


class FeatureSelection(BaseModel):
    """Everything the workflow needs to know about what to build."""

    project_kind: ProjectKind
    threejs: bool = False
    css_vars: bool = True
    project_name: str | None = None


class FeatureFlags(BaseModel):
    """Command-line flags relevant to feature selection.

    ``None`` means the flag was not given, so the interactive answer (or the
    default) applies.
    """

    nuxt: bool = False
    vue: bool = False
    threejs: bool | None = None
    css_vars: bool | None = None
    name: str | None = Field(default=None)

    @property
    def project_kind(self) -> ProjectKind | None:
        if self.nuxt:
            return ProjectKind.NUXT
        if self.vue:
            return ProjectKind.VUE
        return None


# ---------------------------------------------------------------------------
# Prompt state machine
# ---------------------------------------------------------------------------


class PromptStep(str, Enum):
    START = "start"
    PROJECT_KIND = "project_kind"
    PROJECT_NAME = "project_name"
    THREEJS = "threejs"
    DONE = "done"


_NEW_PROJECT_FLOW: dict[PromptStep, PromptStep] = {
    PromptStep.START: PromptStep.PROJECT_KIND,
    PromptStep.PROJECT_KIND: PromptStep.PROJECT_NAME,
    PromptStep.PROJECT_NAME: PromptStep.THREEJS,
    PromptStep.THREEJS: PromptStep.DONE,
}

_EXISTING_PROJECT_FLOW: dict[PromptStep, PromptStep] = {
    PromptStep.START: PromptStep.THREEJS,
    PromptStep.THREEJS: PromptStep.DONE,
}

PROMPT_FLOWS: dict[ProjectKind, dict[PromptStep, PromptStep]] = {
    ProjectKind.NONE: _NEW_PROJECT_FLOW,
    ProjectKind.NUXT: _EXISTING_PROJECT_FLOW,
    ProjectKind.VUE: _EXISTING_PROJECT_FLOW,
}


class Prompter(Protocol):
    """Source of interactive answers."""

    def choose_project_kind(self, default: ProjectKind) -> ProjectKind: ...

    def ask_project_name(self) -> str: ...

    def confirm_threejs(self, default: bool) -> bool: ...


class RichPrompter:
    """Asks the questions on the terminal with ``rich.prompt``."""

    def choose_project_kind(self, default: ProjectKind) -> ProjectKind:
        console.print("[bold yellow]No project detected[/bold yellow]")
        answer = Prompt.ask(
            "Select project type",
            choices=[ProjectKind.NUXT.value, ProjectKind.VUE.value],
            default=default.value,
            console=console,
        )
        return ProjectKind(answer)

    def ask_project_name(self) -> str:
        return Prompt.ask("Enter project name", console=console)

    def confirm_threejs(self, default: bool) -> bool:
        return Confirm.ask("Include Three.js setup?", default=default, console=console)


class PromptFlow:
    """Walks the transition table for the detected kind and collects answers.

    Steps already answered by a flag are passed through without asking.
    """

    def __init__(self, detected: ProjectKind, flags: FeatureFlags, prompter: Prompter) -> None:
        self.detected = detected
        self.flags = flags
        self.prompter = prompter
        self.transitions = PROMPT_FLOWS[detected]
        self.visited: list[PromptStep] = []

    def _answered_by_flag(self, step: PromptStep) -> bool:
        if step is PromptStep.PROJECT_KIND:
            return self.flags.project_kind is not None
        if step is PromptStep.PROJECT_NAME:
            return bool(self.flags.name and self.flags.name.strip())
        if step is PromptStep.THREEJS:
            return self.flags.threejs is not None
        return False

    def run(self) -> dict[PromptStep, object]:
        answers: dict[PromptStep, object] = {}
        step = self.transitions[PromptStep.START]

        while step is not PromptStep.DONE:
            if not self._answered_by_flag(step):
                self.visited.append(step)
                answers[step] = self._ask(step)
            step = self.transitions[step]

        return answers

    def _ask(self, step: PromptStep) -> object:
        if step is PromptStep.PROJECT_KIND:
            return self.prompter.choose_project_kind(ProjectKind.NUXT)
        if step is PromptStep.PROJECT_NAME:
            while True:
                name = self.prompter.ask_project_name().strip()
                if name:
                    return name
                print_warning("Project name cannot be empty.")
        if step is PromptStep.THREEJS:
            return self.prompter.confirm_threejs(False)
        raise ValueError(f"Nothing to ask for step {step.value!r}")


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def resolve_features(
    detected: ProjectKind,
    flags: FeatureFlags,
    *,
    non_interactive: bool = False,
    prompter: Prompter | None = None,
) -> FeatureSelection:
    """Combine flags, answers and the detected kind into a ``FeatureSelection``.

    With *non_interactive* set no question is ever asked.

    Raises:
        PreconditionError: A new project has to be created but no name was
            given.
    """
    answers: dict[PromptStep, object] = {}
    if not non_interactive:
        answers = PromptFlow(detected, flags, prompter or RichPrompter()).run()

    kind = flags.project_kind or answers.get(PromptStep.PROJECT_KIND)
    if kind is None:
        kind = detected if detected is not ProjectKind.NONE else ProjectKind.NUXT

    threejs = flags.threejs
    if threejs is None:
        threejs = bool(answers.get(PromptStep.THREEJS, False))

    project_name: str | None = None
    if detected is ProjectKind.NONE:
        project_name = (flags.name or str(answers.get(PromptStep.PROJECT_NAME, ""))).strip()
        if not project_name:
            raise PreconditionError(
                "No project detected and no project name given. "
                "Pass --name <project-name> to create a new project."
            )

    # css_vars is always on; --css-vars is accepted for compatibility only.
    return FeatureSelection(
        project_kind=kind,
        threejs=threejs,
        css_vars=True,
        project_name=project_name,
    )
