"""Shared utility functions for pni.

Provides async command execution, JSON and text file helpers, and the
Rich-based console output used by every step.  All user-facing output goes
through the module-level ``console``.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Awaitable, Callable

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table

from pni.errors import CommandError

console = Console()

# (command, cwd) -> None; raises CommandError on failure, like run_checked.
CommandRunner = Callable[[str, Path], Awaitable[None]]

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    capture: bool = True,
) -> tuple[int, str, str]:
    """Run a shell command asynchronously and wait for it to exit.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams, so interactive generators can prompt).

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.
    """
    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    if isinstance(cmd, list):
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
        )
    else:
        process = await asyncio.create_subprocess_shell(
            cmd,
            stdout=stdout_pipe,
            stderr=stderr_pipe,
            cwd=str(cwd) if cwd else None,
        )

    stdout_bytes, stderr_bytes = await process.communicate()
    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


async def run_checked(cmd: str, cwd: str | Path | None = None) -> None:
    """Run *cmd* attached to the terminal and raise if it exits non-zero.

    This is the command runner every step uses for package managers and
    project generators.

    Raises:
        CommandError: The command exited with a non-zero status.
    """
    returncode, stdout, stderr = await run_command(cmd, cwd=cwd, capture=False)
    if returncode != 0:
        raise CommandError(cmd, returncode, stderr or stdout)


# ---------------------------------------------------------------------------
# JSON / text I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> Any:
    """Load and parse a JSON file; the top-level value is returned as-is.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    file_path = Path(path)
    raw = file_path.read_text(encoding="utf-8")
    return json.loads(raw)


def read_text(path: str | Path) -> str | None:
    """Return the file's text, or ``None`` when it does not exist."""
    file_path = Path(path)
    if not file_path.is_file():
        return None
    return file_path.read_text(encoding="utf-8")


async def write_text(path: str | Path, content: str) -> Path:
    """Write *content* to *path*, creating parent directories first."""
    out = Path(path)
    await asyncio.to_thread(_write_file, out, content)
    return out


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


STEP_COLORS: dict[str, str] = {
    "detecting": "bright_cyan",
    "selecting": "bright_blue",
    "creating": "bright_green",
    "installing": "bright_yellow",
    "configuring": "bright_magenta",
}


def print_step_header(step: str) -> None:
    """Print a full-width rule announcing a workflow step."""
    color = STEP_COLORS.get(step, "white")
    console.print()
    console.print(Rule(f"[bold {color}] {step.upper()} [/bold {color}]", style=color))


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Args:
        data: Mapping of label -> value.
        title: Table title.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]", highlight=False)


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_detail(message: str) -> None:
    """Print a dimmed detail line."""
    console.print(f"  [dim]{escape(message)}[/dim]")
