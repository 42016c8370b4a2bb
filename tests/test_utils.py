"""Unit tests for utility functions (pni.utils).

Tests cover:
- run_command (success, failure, list vs string, cwd)
- run_checked raising CommandError
- load_json / read_text / write_text
- Rich output helpers
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from pni.errors import CommandError
from pni.utils import (
    STEP_COLORS,
    load_json,
    print_detail,
    print_error,
    print_step_header,
    print_success,
    print_summary_table,
    print_warning,
    read_text,
    run_checked,
    run_command,
    write_text,
)


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    @pytest.mark.unit
    async def test_successful_command_list(self):
        returncode, stdout, stderr = await run_command([sys.executable, "-c", "print('hello')"])
        assert returncode == 0
        assert stdout == "hello"
        assert stderr == ""

    @pytest.mark.unit
    async def test_successful_command_string(self):
        returncode, stdout, _ = await run_command("echo hello")
        assert returncode == 0
        assert "hello" in stdout

    @pytest.mark.unit
    async def test_failing_command(self):
        returncode, _, stderr = await run_command(
            [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"]
        )
        assert returncode == 3
        assert stderr == "boom"

    @pytest.mark.unit
    async def test_cwd(self, tmp_path: Path):
        _, stdout, _ = await run_command(
            [sys.executable, "-c", "import os; print(os.getcwd())"], cwd=tmp_path
        )
        assert Path(stdout).resolve() == tmp_path.resolve()


class TestRunChecked:
    @pytest.mark.unit
    async def test_success_returns_none(self):
        with patch("pni.utils.run_command", AsyncMock(return_value=(0, "", ""))) as mocked:
            assert await run_checked("npm install gsap", cwd="/tmp") is None
        mocked.assert_awaited_once_with("npm install gsap", cwd="/tmp", capture=False)

    @pytest.mark.unit
    async def test_failure_raises_command_error(self):
        with patch("pni.utils.run_command", AsyncMock(return_value=(1, "", "ERR! 404"))):
            with pytest.raises(CommandError) as excinfo:
                await run_checked("npm install nope")
        assert excinfo.value.returncode == 1
        assert excinfo.value.command == "npm install nope"
        assert "ERR! 404" in str(excinfo.value)
        assert "exit code 1" in str(excinfo.value)


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------


class TestFileHelpers:
    @pytest.mark.unit
    def test_load_json_object(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text(json.dumps({"a": 1}), encoding="utf-8")
        assert load_json(path) == {"a": 1}

    @pytest.mark.unit
    def test_load_json_returns_non_objects_as_is(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text("[1, 2]", encoding="utf-8")
        assert load_json(path) == [1, 2]

    @pytest.mark.unit
    def test_load_json_invalid_raises(self, tmp_path: Path):
        path = tmp_path / "data.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            load_json(path)

    @pytest.mark.unit
    def test_read_text_missing_returns_none(self, tmp_path: Path):
        assert read_text(tmp_path / "missing.txt") is None

    @pytest.mark.unit
    def test_read_text_directory_returns_none(self, tmp_path: Path):
        assert read_text(tmp_path) is None

    @pytest.mark.unit
    async def test_write_text_creates_parents(self, tmp_path: Path):
        target = tmp_path / "a" / "b" / "file.txt"
        result = await write_text(target, "content")
        assert result == target
        assert target.read_text(encoding="utf-8") == "content"


# ---------------------------------------------------------------------------
# Rich output
# ---------------------------------------------------------------------------


class TestOutputHelpers:
    @pytest.mark.unit
    def test_step_colors_cover_workflow_steps(self):
        assert set(STEP_COLORS) == {
            "detecting",
            "selecting",
            "creating",
            "installing",
            "configuring",
        }

    @pytest.mark.unit
    def test_helpers_print_without_error(self, capsys):
        print_step_header("installing")
        print_step_header("unknown-step")
        print_summary_table({"Project": "demo"}, title="Test")
        print_success("done")
        print_warning("careful")
        print_error("failed")
        print_detail("detail")
        out = capsys.readouterr().out
        assert "INSTALLING" in out
        assert "demo" in out
        assert "careful" in out

    @pytest.mark.unit
    def test_error_text_is_not_treated_as_markup(self, capsys):
        print_error("missing [bold]closing")
        assert "[bold]closing" in capsys.readouterr().out
