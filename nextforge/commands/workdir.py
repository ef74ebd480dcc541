"""``nextforge workdir`` -- show, set or clear the persisted working directory."""

from __future__ import annotations

from pathlib import Path

from nextforge.config import Settings, settings_path
from nextforge.errors import PreconditionError


def set_working_directory(settings: Settings, path: Path | None) -> Settings:
    """Persist *path* (or clear it when ``None``) and return the new settings.

    Raises:
        PreconditionError: If *path* is not an existing directory.
    """
    if path is not None:
        path = Path(path).expanduser()
        if not path.is_dir():
            raise PreconditionError(f"Working directory not found: {path}")
        path = path.resolve()
    updated = settings.model_copy(update={"working_directory": path})
    updated.save(settings_path())
    return updated
