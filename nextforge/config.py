"""nextforge configuration.

User-level settings (default API base path, default auth mode, persisted
working directory, preferred package manager) are a Pydantic v2 model so
they can be validated on construction and round-tripped through JSON or
environment variables.  A ``Session`` bundles the settings with the resolved
working directory and the output sink, and is handed to every command.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from nextforge.errors import PreconditionError

PackageManager = Literal["npm", "yarn", "pnpm"]

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "nextforge" / "settings.json"

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Persisted user preferences."""

    default_api_base: str | None = Field(
        default=None,
        description="API base path used when --api-base is omitted",
    )
    default_auth: bool = Field(
        default=True,
        description="Whether generated services use the authenticated client",
    )
    working_directory: Path | None = Field(
        default=None,
        description="Project directory commands run against",
    )
    package_manager: PackageManager = Field(default="npm")

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path | None = None) -> Path:
        """Persist the settings to a JSON file.

        Args:
            path: Destination file. Defaults to :func:`settings_path`.

        Returns:
            The path where the file was written.
        """
        target = Path(path) if path else settings_path()
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path | None = None) -> "Settings":
        """Load settings from JSON, falling back to defaults when absent."""
        source = Path(path) if path else settings_path()
        if not source.exists():
            return cls()
        return cls.model_validate_json(source.read_text(encoding="utf-8"))

    @classmethod
    def from_env(cls, base: "Settings | None" = None) -> "Settings":
        """Overlay environment variables on top of *base*.

        Recognised variables (all optional):
            NEXTFORGE_API_BASE, NEXTFORGE_AUTH, NEXTFORGE_WORKDIR,
            NEXTFORGE_PACKAGE_MANAGER.
        """
        data = (base or cls()).model_dump()
        if os.environ.get("NEXTFORGE_API_BASE"):
            data["default_api_base"] = os.environ["NEXTFORGE_API_BASE"]
        if os.environ.get("NEXTFORGE_AUTH"):
            data["default_auth"] = os.environ["NEXTFORGE_AUTH"].strip().lower() in _TRUTHY
        if os.environ.get("NEXTFORGE_WORKDIR"):
            data["working_directory"] = Path(os.environ["NEXTFORGE_WORKDIR"])
        if os.environ.get("NEXTFORGE_PACKAGE_MANAGER"):
            data["package_manager"] = os.environ["NEXTFORGE_PACKAGE_MANAGER"]
        return cls.model_validate(data)


def settings_path() -> Path:
    """Location of the settings file (``NEXTFORGE_SETTINGS`` overrides)."""
    override = os.environ.get("NEXTFORGE_SETTINGS")
    return Path(override) if override else DEFAULT_SETTINGS_PATH


def _default_sink(line: str) -> None:
    from nextforge.utils import console

    console.print(line, style="dim", markup=False, highlight=False)


@dataclass
class Session:
    """Per-invocation context handed to every command handler.

    Attributes:
        settings: Effective user settings.
        cwd: Explicit working directory for this invocation; wins over
            ``settings.working_directory``.
        sink: Callable receiving each line of subprocess output.
    """

    settings: Settings = field(default_factory=Settings)
    cwd: Path | None = None
    sink: Callable[[str], None] = _default_sink

    @property
    def working_dir(self) -> Path:
        """Resolve the directory commands operate on.

        Raises:
            PreconditionError: If the selected directory does not exist.
        """
        chosen = self.cwd or self.settings.working_directory
        if chosen is None:
            return Path.cwd()
        path = Path(chosen).expanduser()
        if not path.is_dir():
            raise PreconditionError(f"Working directory not found: {path}")
        return path.resolve()
