"""Tests for the workflow state machine (pni.orchestrator).

Covers:
- The transition table and illegal transitions
- Existing Nuxt and Vue projects end to end with a mocked runner
- Install commands and their order
- Errors becoming the ERROR state with the message kept verbatim
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from pni.config import Config
from pni.detection import ProjectKind
from pni.errors import CommandError, WorkflowStateError
from pni.features import FeatureFlags
from pni.orchestrator import TRANSITIONS, Orchestrator, WorkflowResult, WorkflowState

pytestmark = pytest.mark.unit


def _config_for(config: Config, target: Path, **changes) -> Config:
    return config.model_copy(update={"target_dir": target, **changes})


def _commands(runner) -> list[str]:
    return [c.args[0] for c in runner.await_args_list]


# ---------------------------------------------------------------------------
# WorkflowResult
# ---------------------------------------------------------------------------


class TestWorkflowResult:
    def test_starts_detecting(self):
        result = WorkflowResult()
        assert result.state is WorkflowState.DETECTING
        assert result.history == [WorkflowState.DETECTING]
        assert not result.success

    def test_legal_path(self):
        result = WorkflowResult()
        for state in (
            WorkflowState.SELECTING,
            WorkflowState.CREATING,
            WorkflowState.INSTALLING,
            WorkflowState.CONFIGURING,
            WorkflowState.COMPLETED,
        ):
            result.advance(state)
        assert result.success
        assert len(result.history) == 6

    def test_illegal_transition_raises(self):
        result = WorkflowResult()
        with pytest.raises(WorkflowStateError, match="detecting -> installing"):
            result.advance(WorkflowState.INSTALLING)
        assert result.state is WorkflowState.DETECTING

    @pytest.mark.parametrize("state", [WorkflowState.COMPLETED, WorkflowState.ERROR])
    def test_terminal_states(self, state):
        assert TRANSITIONS[state] == frozenset()

    def test_error_reachable_from_every_non_terminal_state(self):
        for state, targets in TRANSITIONS.items():
            if targets:
                assert WorkflowState.ERROR in targets

    def test_record_deduplicates(self, tmp_path: Path):
        result = WorkflowResult()
        result.record(tmp_path / "a", None, tmp_path / "a", tmp_path / "b")
        assert result.written == [tmp_path / "a", tmp_path / "b"]


# ---------------------------------------------------------------------------
# Existing projects
# ---------------------------------------------------------------------------


class TestExistingNuxtProject:
    async def test_completes(self, config, nuxt_project: Path, mock_runner):
        orchestrator = Orchestrator(_config_for(config, nuxt_project), run=mock_runner)

        result = await orchestrator.run(FeatureFlags())

        assert result.state is WorkflowState.COMPLETED, result.error
        assert result.history == [
            WorkflowState.DETECTING,
            WorkflowState.SELECTING,
            WorkflowState.INSTALLING,
            WorkflowState.CONFIGURING,
            WorkflowState.COMPLETED,
        ]
        assert result.detected is ProjectKind.NUXT
        assert result.features.css_vars is True
        assert result.features.threejs is False

    async def test_command_sequence(self, config, nuxt_project: Path, mock_runner):
        await Orchestrator(_config_for(config, nuxt_project), run=mock_runner).run(FeatureFlags())

        commands = _commands(mock_runner)
        assert commands[0].startswith("npm install gsap lenis ")
        assert commands[1] == "npm install --save-dev typescript tailwindcss @tailwindcss/vite"
        assert commands[2:] == [
            "npx nuxi@latest module add shadcn-nuxt",
            "npx nuxi@latest prepare",
            "npx shadcn-vue@latest init",
            "npx shadcn-vue@latest add button",
        ]
        assert {c.args[1] for c in mock_runner.await_args_list} == {nuxt_project.resolve()}

    async def test_threejs_packages(self, config, nuxt_project: Path, mock_runner):
        await Orchestrator(_config_for(config, nuxt_project), run=mock_runner).run(
            FeatureFlags(threejs=True)
        )
        commands = _commands(mock_runner)
        assert "three" in commands[0].split()
        assert "postprocessing" in commands[0].split()
        assert "@types/three" in commands[1].split()

    async def test_writes_stylesheet_after_shadcn(self, config, nuxt_project: Path, mock_runner):
        stylesheet = nuxt_project / "app/assets/css/tailwind.css"
        seen: list[str | None] = []

        async def runner(command: str, cwd: Path) -> None:
            if command.endswith("shadcn-vue@latest init"):
                seen.append(stylesheet.read_text(encoding="utf-8"))
                stylesheet.write_text("/* rewritten by shadcn */\n", encoding="utf-8")

        result = await Orchestrator(_config_for(config, nuxt_project), run=runner).run(FeatureFlags())

        assert result.success
        assert seen == ['@import "tailwindcss";\n']
        final = stylesheet.read_text(encoding="utf-8")
        assert "rewritten by shadcn" not in final
        assert "@theme inline" in final

    async def test_written_files(self, config, nuxt_project: Path, mock_runner):
        result = await Orchestrator(_config_for(config, nuxt_project), run=mock_runner).run(FeatureFlags())
        root = nuxt_project.resolve()

        assert {p.relative_to(root).as_posix() for p in result.written} == {
            "nuxt.config.ts",
            "app/app.vue",
            "app/pages/index.vue",
            "app/assets/css/tailwind.css",
            "app/plugins/ssr-width.ts",
            "app/pages/typography/index.vue",
        }

    async def test_second_run_leaves_config_alone(self, config, nuxt_project: Path, mock_runner):
        project_config = _config_for(config, nuxt_project)
        await Orchestrator(project_config, run=mock_runner).run(FeatureFlags())
        first = (nuxt_project / "nuxt.config.ts").read_text(encoding="utf-8")

        result = await Orchestrator(project_config, run=mock_runner).run(FeatureFlags())

        assert result.success
        assert (nuxt_project / "nuxt.config.ts").read_text(encoding="utf-8") == first
        assert nuxt_project.resolve() / "nuxt.config.ts" not in result.written


class TestExistingVueProject:
    async def test_completes(self, config, vue_project: Path, mock_runner):
        result = await Orchestrator(_config_for(config, vue_project), run=mock_runner).run(FeatureFlags())
        root = vue_project.resolve()

        assert result.success, result.error
        assert _commands(mock_runner) == [
            "npm install gsap lenis",
            "npm install --save-dev tailwindcss @tailwindcss/vite tw-animate-css",
        ]
        assert {p.relative_to(root).as_posix() for p in result.written} == {
            "vite.config.js",
            "src/App.vue",
            "src/router/index.js",
            "src/pages/Home.vue",
            "src/pages/Typography.vue",
            "src/main.js",
            "src/assets/style.css",
            "index.html",
        }
        assert result.misses == {}

    async def test_missing_index_html_still_completes(self, config, vue_project: Path, mock_runner):
        (vue_project / "index.html").unlink()

        result = await Orchestrator(_config_for(config, vue_project), run=mock_runner).run(FeatureFlags())

        assert result.success
        assert not (vue_project / "index.html").exists()

    async def test_patch_misses_recorded(self, config, vue_project: Path, mock_runner):
        (vue_project / "vite.config.js").write_text(
            "import { defineConfig } from 'vite'\nexport default defineConfig({})\n",
            encoding="utf-8",
        )

        result = await Orchestrator(
            _config_for(config, vue_project, verbose=True), run=mock_runner
        ).run(FeatureFlags())

        assert result.success
        assert result.misses == {"vite.config.js": ["tailwind-plugin"]}


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class TestErrors:
    async def test_install_failure(self, config, nuxt_project: Path, mock_runner):
        error = CommandError("npm install gsap", 1, "ERR! network")
        mock_runner.side_effect = error
        original = (nuxt_project / "nuxt.config.ts").read_text(encoding="utf-8")

        result = await Orchestrator(_config_for(config, nuxt_project), run=mock_runner).run(FeatureFlags())

        assert result.state is WorkflowState.ERROR
        assert result.error == str(error)
        assert result.history[-2:] == [WorkflowState.INSTALLING, WorkflowState.ERROR]
        assert mock_runner.await_count == 1
        assert (nuxt_project / "nuxt.config.ts").read_text(encoding="utf-8") == original

    async def test_missing_name_in_empty_directory(self, config, mock_runner):
        result = await Orchestrator(config, run=mock_runner).run(FeatureFlags(vue=True))

        assert result.state is WorkflowState.ERROR
        assert "Pass --name <project-name>" in result.error
        assert result.history == [WorkflowState.DETECTING, WorkflowState.SELECTING, WorkflowState.ERROR]
        mock_runner.assert_not_awaited()

    async def test_creation_failure(self, config, mock_runner, tmp_path: Path):
        mock_runner.side_effect = CommandError("npx nuxi@latest init demo", 1)

        result = await Orchestrator(config, run=mock_runner).run(FeatureFlags(name="demo"))

        assert result.state is WorkflowState.ERROR
        assert result.error.startswith("Failed to create Nuxt app: ")
        assert WorkflowState.CREATING in result.history
        assert not (tmp_path / "demo").exists()


# ---------------------------------------------------------------------------
# Interactive selection
# ---------------------------------------------------------------------------


class TestInteractive:
    async def test_prompter_answers_used(self, config, vue_project: Path, mock_runner):
        prompter = MagicMock()
        prompter.confirm_threejs.return_value = True

        result = await Orchestrator(
            _config_for(config, vue_project, non_interactive=False),
            run=mock_runner,
            prompter=prompter,
        ).run(FeatureFlags())

        assert result.success
        assert result.features.threejs is True
        prompter.choose_project_kind.assert_not_called()
        assert "three" in _commands(mock_runner)[0].split()
