"""Shared utility functions for nextforge.

Provides async subprocess execution with streamed output, JSON I/O,
file-system helpers and Rich-based console reporting.
"""

from __future__ import annotations

import asyncio
import json
import os
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from nextforge.errors import CommandError

console = Console()

READ_CHUNK_SIZE = 64 * 1024

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command_streaming(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    on_line: Callable[[str], None] | None = None,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> int:
    """Run a command and hand each output line to *on_line* as it arrives.

    Stdout and stderr are merged into a single stream.  The call returns only
    once the process has exited.

    Args:
        cmd: Shell command string or list of arguments.
        cwd: Working directory for the child process.
        on_line: Receives individual lines (without trailing newlines).
        timeout: Optional wall-clock limit in seconds; ``None`` waits forever.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        The process exit code (``-1`` when killed on timeout).

    Raises:
        OSError: If the process could not be spawned.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    if isinstance(cmd, list):
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )
    else:
        process = await asyncio.create_subprocess_shell(
            cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            cwd=str(cwd) if cwd else None,
            env=merged_env,
        )

    assert process.stdout is not None  # guaranteed by PIPE

    def _emit(raw: bytes) -> None:
        if on_line is not None:
            on_line(raw.decode("utf-8", errors="replace").rstrip("\r"))

    async def _pump() -> None:
        # Fixed-size reads; a single line may be longer than the stream limit.
        pending = b""
        while True:
            chunk = await process.stdout.read(READ_CHUNK_SIZE)
            if not chunk:
                break
            *complete, pending = (pending + chunk).split(b"\n")
            for raw in complete:
                _emit(raw)
        if pending:
            _emit(pending)
        await process.wait()

    try:
        await asyncio.wait_for(_pump(), timeout=timeout)
    except asyncio.TimeoutError:
        return -1
    finally:
        if process.returncode is None:
            process.kill()
            await process.wait()

    return process.returncode or 0


async def run_checked(
    cmd: str | list[str],
    cwd: str | Path | None = None,
    *,
    label: str = "",
    remediation: str = "",
    on_line: Callable[[str], None] | None = None,
    timeout: float | None = None,
) -> None:
    """Run *cmd*, streaming output, and raise unless it exits with code 0.

    Raises:
        CommandError: On spawn failure or a non-zero exit code.  The error
            carries *remediation*, the equivalent command to run by hand.
    """
    cmd_text = cmd if isinstance(cmd, str) else " ".join(cmd)
    prefix = f"[{label}] " if label else ""
    if on_line is not None:
        on_line(f"{prefix}Running: {cmd_text}")

    try:
        returncode = await run_command_streaming(
            cmd, cwd=cwd, on_line=on_line, timeout=timeout
        )
    except OSError as exc:
        raise CommandError(
            f"{prefix}Could not start '{cmd_text}': {exc}",
            command=cmd_text,
            remediation=remediation,
        ) from exc

    if on_line is not None:
        on_line(f"{prefix}Process exited with code {returncode}")
    if returncode != 0:
        raise CommandError(
            f"{prefix}'{cmd_text}' failed with exit code {returncode}",
            command=cmd_text,
            returncode=returncode,
            remediation=remediation,
        )


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> dict[str, Any]:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    if not isinstance(data, dict):
        return {"_root": data}
    return data


async def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> None:
    """Save data as pretty-printed JSON with a trailing newline.

    Parent directories are created automatically and the write runs in a
    worker thread.
    """
    file_path = Path(path)
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"
    await asyncio.to_thread(write_text, file_path, content)


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


def ensure_dir(path: str | Path) -> Path:
    """Create a directory (and parents) if it does not exist."""
    dir_path = Path(path)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def write_text(path: Path, content: str) -> None:
    """Synchronous helper: create parent dirs and write content."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def remove_path(path: Path) -> bool:
    """Delete a file or directory tree.  Returns ``False`` if it was absent."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    if path.exists() or path.is_symlink():
        path.unlink()
        return True
    return False


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_next_steps(title: str, steps: list[str]) -> None:
    """Print a numbered list of follow-up actions inside a panel."""
    body = "\n".join(f"{i}. {step}" for i, step in enumerate(steps, start=1))
    console.print(Panel(escape(body), title=title, border_style="green"))


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str, remediation: str = "") -> None:
    """Print ``Error: <message>`` and, when given, the command to run by hand."""
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    if remediation:
        console.print(f"You can run it manually:\n  {escape(remediation)}")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")
