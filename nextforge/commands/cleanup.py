"""``nextforge cleanup`` -- remove the bundled tasks example from an app."""

from __future__ import annotations

import asyncio

from pydantic import BaseModel, Field

from nextforge.config import Session
from nextforge.scaffolder.store import unregister_reducer_text
from nextforge.scaffolder.templates import TemplateRenderer
from nextforge.utils import print_success, print_warning, remove_path, write_text

EXAMPLE_ITEMS: list[str] = [
    "modules/tasks",
    "nodes/task-node.ts",
    "store/taskSlice.ts",
    "app/tasks",
]
EXAMPLE_REDUCER = "task"


class CleanupResult(BaseModel):
    removed: list[str] = Field(default_factory=list)
    failed: list[str] = Field(default_factory=list)
    store_updated: bool = False


async def cleanup_app(session: Session) -> CleanupResult:
    """Delete the example files, unregister their reducer and reset the home page.

    Each removal is best effort: a failure is reported and the rest continue.
    """
    root = session.working_dir
    result = CleanupResult()

    for rel in EXAMPLE_ITEMS:
        try:
            removed = await asyncio.to_thread(remove_path, root / rel)
        except OSError as exc:
            print_warning(f"Failed to remove {rel}: {exc}")
            result.failed.append(rel)
            continue
        if removed:
            print_success(f"Removed {rel}")
            result.removed.append(rel)

    store_path = root / "store" / "index.ts"
    if store_path.exists():
        try:
            text = await asyncio.to_thread(store_path.read_text, encoding="utf-8")
            updated = unregister_reducer_text(text, EXAMPLE_REDUCER)
            if updated != text:
                await asyncio.to_thread(write_text, store_path, updated)
                result.store_updated = True
                print_success("Removed the task reducer from store/index.ts")
        except OSError as exc:
            print_warning(f"Failed to update store/index.ts: {exc}")

    home = TemplateRenderer().render("extras/home_page.tsx.j2", {})
    await asyncio.to_thread(write_text, root / "app" / "page.tsx", home)
    print_success("Wrote a fresh app/page.tsx")
    return result
