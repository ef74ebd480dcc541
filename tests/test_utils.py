"""Unit tests for utility functions (nextforge.utils).

Tests cover:
- run_command_streaming (real echo, streamed lines, timeout, env vars)
- run_checked (success, non-zero exit, spawn failure)
- load_json / save_json (use tmp_path)
- ensure_dir / write_text / remove_path
- Rich output helpers
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from nextforge.errors import CommandError
from nextforge.utils import (
    ensure_dir,
    load_json,
    print_error,
    print_next_steps,
    print_success,
    print_summary_table,
    print_warning,
    remove_path,
    run_checked,
    run_command_streaming,
    save_json,
    write_text,
)


# ---------------------------------------------------------------------------
# run_command_streaming
# ---------------------------------------------------------------------------


class TestRunCommandStreaming:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_streams_lines_from_list_command(self):
        lines: list[str] = []
        code = await run_command_streaming(
            [sys.executable, "-c", "print('one'); print('two')"], on_line=lines.append
        )
        assert code == 0
        assert lines == ["one", "two"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_string_command_uses_shell(self):
        lines: list[str] = []
        code = await run_command_streaming("echo hello && echo world", on_line=lines.append)
        assert code == 0
        assert lines == ["hello", "world"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_stderr_is_merged(self):
        lines: list[str] = []
        await run_command_streaming(
            [sys.executable, "-c", "import sys; sys.stderr.write('oops\\n')"], on_line=lines.append
        )
        assert lines == ["oops"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_zero_exit(self):
        code = await run_command_streaming([sys.executable, "-c", "import sys; sys.exit(3)"])
        assert code == 3

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cwd_and_env(self, tmp_path: Path):
        lines: list[str] = []
        await run_command_streaming(
            [sys.executable, "-c", "import os; print(os.getcwd()); print(os.environ['NF_X'])"],
            cwd=tmp_path,
            env={"NF_X": "42"},
            on_line=lines.append,
        )
        assert Path(lines[0]).resolve() == tmp_path.resolve()
        assert lines[1] == "42"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_timeout_kills_process(self):
        code = await run_command_streaming(
            [sys.executable, "-c", "import time; time.sleep(10)"], timeout=0.5
        )
        assert code == -1

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_line_longer_than_stream_limit(self):
        lines: list[str] = []
        code = await run_command_streaming(
            [sys.executable, "-c", "import sys; sys.stdout.write('x' * 200000 + '\\nend')"],
            on_line=lines.append,
        )
        assert code == 0
        assert lines == ["x" * 200000, "end"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_lines_split_across_reads(self, mock_subprocess):
        proc = mock_subprocess()
        proc.stdout.read.side_effect = [b"hel", b"lo\nwor", b"ld\r\n", b""]
        lines: list[str] = []
        with patch("asyncio.create_subprocess_exec", return_value=proc):
            await run_command_streaming(["npm", "install"], on_line=lines.append)
        assert lines == ["hello", "world"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_process_killed_when_sink_raises(self, mock_subprocess):
        proc = mock_subprocess(lines=["boom"])
        proc.returncode = None

        def sink(line: str) -> None:
            raise RuntimeError(line)

        with patch("asyncio.create_subprocess_exec", return_value=proc):
            with pytest.raises(RuntimeError, match="boom"):
                await run_command_streaming(["npm", "install"], on_line=sink)
        proc.kill.assert_called_once()
        proc.wait.assert_awaited()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_mocked_subprocess(self, mock_subprocess):
        lines: list[str] = []
        proc = mock_subprocess(lines=["a", "b"], returncode=0)
        with patch("asyncio.create_subprocess_exec", return_value=proc):
            code = await run_command_streaming(["npm", "install"], on_line=lines.append)
        assert code == 0
        assert lines == ["a", "b"]


# ---------------------------------------------------------------------------
# run_checked
# ---------------------------------------------------------------------------


class TestRunChecked:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_success_reports_start_and_exit(self, mock_subprocess):
        lines: list[str] = []
        with patch("asyncio.create_subprocess_exec", return_value=mock_subprocess(lines=["ok"])):
            await run_checked(["yarn"], label="install", on_line=lines.append)
        assert lines == ["[install] Running: yarn", "ok", "[install] Process exited with code 0"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_failure_raises_with_remediation(self, mock_subprocess):
        with patch("asyncio.create_subprocess_exec", return_value=mock_subprocess(returncode=2)):
            with pytest.raises(CommandError) as excinfo:
                await run_checked(["pnpm", "install"], remediation="cd app && pnpm install")
        err = excinfo.value
        assert err.returncode == 2
        assert err.command == "pnpm install"
        assert err.remediation == "cd app && pnpm install"
        assert "failed with exit code 2" in str(err)

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_long_output_then_failure_raises_command_error(self):
        lines: list[str] = []
        with pytest.raises(CommandError) as excinfo:
            await run_checked(
                [sys.executable, "-c", "import sys; sys.stdout.write('x' * 200000); sys.exit(3)"],
                remediation="run it by hand",
                on_line=lines.append,
            )
        assert excinfo.value.returncode == 3
        assert excinfo.value.remediation == "run it by hand"
        assert "x" * 200000 in lines

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_spawn_failure(self):
        with patch("asyncio.create_subprocess_exec", side_effect=FileNotFoundError("no npm")):
            with pytest.raises(CommandError, match="Could not start 'npm install'") as excinfo:
                await run_checked(["npm", "install"])
        assert excinfo.value.returncode is None


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


class TestJsonIO:
    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_save_and_load(self, tmp_path: Path):
        path = tmp_path / "deep" / "data.json"
        await save_json({"name": "café", "n": [1, 2]}, path)
        raw = path.read_text(encoding="utf-8")
        assert raw.endswith("}\n")
        assert "café" in raw
        assert load_json(path) == {"name": "café", "n": [1, 2]}

    @pytest.mark.unit
    def test_load_non_object_is_wrapped(self, tmp_path: Path):
        path = tmp_path / "list.json"
        path.write_text(json.dumps([1, 2]), encoding="utf-8")
        assert load_json(path) == {"_root": [1, 2]}

    @pytest.mark.unit
    def test_load_missing_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_json(tmp_path / "absent.json")


# ---------------------------------------------------------------------------
# File-system helpers
# ---------------------------------------------------------------------------


class TestFileHelpers:
    @pytest.mark.unit
    def test_ensure_dir_is_idempotent(self, tmp_path: Path):
        target = tmp_path / "a" / "b"
        assert ensure_dir(target) == target
        assert ensure_dir(target).is_dir()

    @pytest.mark.unit
    def test_write_text_creates_parents(self, tmp_path: Path):
        target = tmp_path / "x" / "y.ts"
        write_text(target, "export {};\n")
        assert target.read_text(encoding="utf-8") == "export {};\n"

    @pytest.mark.unit
    def test_remove_path(self, tmp_path: Path):
        (tmp_path / "dir" / "sub").mkdir(parents=True)
        (tmp_path / "file.txt").write_text("x", encoding="utf-8")
        assert remove_path(tmp_path / "dir") is True
        assert remove_path(tmp_path / "file.txt") is True
        assert remove_path(tmp_path / "gone") is False
        assert list(tmp_path.iterdir()) == []


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


class TestRichOutput:
    @pytest.mark.unit
    def test_messages_escape_markup(self, capsys: pytest.CaptureFixture[str]):
        print_success("done [bold]x[/bold]")
        print_error("bad", remediation="npm install")
        print_warning("careful")
        out = capsys.readouterr().out
        assert "done [bold]x[/bold]" in out
        assert "Error: bad" in out
        assert "You can run it manually:\n  npm install" in out
        assert "careful" in out

    @pytest.mark.unit
    def test_summary_and_next_steps(self, capsys: pytest.CaptureFixture[str]):
        print_summary_table({"Path": "/tmp/app"}, title="Created")
        print_next_steps("Next steps", ["cd app", "npm run dev"])
        out = capsys.readouterr().out
        assert "Created" in out
        assert "1. cd app" in out
        assert "2. npm run dev" in out
