"""Shared pytest fixtures for the nextforge test suite.

Provides reusable fixtures for:
- Temporary Next.js project directories with a store file
- A Session bound to that project that records subprocess output
- Isolated settings (no user config or NEXTFORGE_* variables leak in)
- Mock subprocess helpers for streamed command output
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from nextforge.config import Session, Settings


STORE_INDEX = textwrap.dedent(
    """\
    import { configureStore } from '@reduxjs/toolkit';

    export const store = configureStore({
      reducer: {
      },
    });

    export type RootState = ReturnType<typeof store.getState>;
    export type AppDispatch = typeof store.dispatch;
    """
)


# ---------------------------------------------------------------------------
# Settings isolation
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the settings file into tmp_path and clear NEXTFORGE_* variables."""
    for var in (
        "NEXTFORGE_API_BASE",
        "NEXTFORGE_AUTH",
        "NEXTFORGE_WORKDIR",
        "NEXTFORGE_PACKAGE_MANAGER",
    ):
        monkeypatch.delenv(var, raising=False)
    settings_file = tmp_path / "config" / "settings.json"
    monkeypatch.setenv("NEXTFORGE_SETTINGS", str(settings_file))
    return settings_file


# ---------------------------------------------------------------------------
# Projects & sessions
# ---------------------------------------------------------------------------

@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """A minimal Next.js project: package.json plus an empty store."""
    root = tmp_path / "web-app"
    (root / "store").mkdir(parents=True)
    (root / "store" / "index.ts").write_text(STORE_INDEX, encoding="utf-8")
    (root / "package.json").write_text(
        json.dumps(
            {
                "name": "web-app",
                "version": "0.2.0",
                "scripts": {"dev": "next dev"},
                "dependencies": {"next": "^14.2.0", "react": "^18.3.0"},
            },
            indent=2,
        ),
        encoding="utf-8",
    )
    return root


@pytest.fixture
def output_lines() -> list[str]:
    """Collects every line handed to the session sink."""
    return []


@pytest.fixture
def session(project_root: Path, output_lines: list[str]) -> Session:
    """A session rooted at ``project_root`` whose sink records lines."""
    return Session(settings=Settings(), cwd=project_root, sink=output_lines.append)


# ---------------------------------------------------------------------------
# Mock Subprocess (streamed)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess whose stdout streams the given lines.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(lines=["added 1 package"], returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(lines: list[str] | None = None, returncode: int = 0) -> MagicMock:
        chunks = [f"{line}\n".encode("utf-8") for line in (lines or [])] + [b""]
        proc = MagicMock()
        proc.stdout = MagicMock()
        proc.stdout.read = AsyncMock(side_effect=chunks)
        proc.returncode = returncode
        proc.pid = 99999
        proc.kill = MagicMock()
        proc.wait = AsyncMock(return_value=returncode)
        return proc

    return factory
