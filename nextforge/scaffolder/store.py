"""Registration of generated reducers in ``store/index.ts``.

The store file is parsed with tree-sitter to locate the ``reducer: { ... }``
object literal.  An import line is prepended and a ``name: nameReducer,``
entry is inserted just inside that object's opening brace.

Patching is not idempotent.  Running it twice for the same reducer prepends
the import twice and registers the key twice.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from pydantic import BaseModel, Field

from nextforge.utils import print_warning, write_text
from .tsparse import (
    default_import_name,
    find_object,
    find_object_block,
    import_statements,
    iter_nodes,
    node_text,
    object_entry,
    pair_key,
    parse_source,
)


class PatchResult(BaseModel):
    """Outcome of one store patch."""

    path: str = Field(..., description="Store file that was (or would have been) patched")
    import_added: bool = Field(default=False)
    reducer_registered: bool = Field(default=False)


def reducer_import_line(name: str) -> str:
    return f"import {name}Reducer from './{name}Slice';"


def reducer_entry(name: str) -> str:
    return f"{name}: {name}Reducer,"


def patch_store_text(text: str, name: str) -> tuple[str, bool]:
    """Add the import and the reducer entry for *name* to store source *text*.

    Returns:
        The patched text and whether the reducer entry was inserted.  When no
        ``reducer: {`` block is found only the import is added.
    """
    registered = False
    block = find_object_block(text, "reducer")
    if block is not None:
        open_index = block[0] + 1
        text = f"{text[:open_index]}\n    {reducer_entry(name)}{text[open_index:]}"
        registered = True
    return f"{reducer_import_line(name)}\n{text}", registered


def reducer_status(text: str, name: str) -> tuple[bool, bool]:
    """Report whether *text* imports and registers the *name* reducer.

    Returns:
        ``(imported, registered)``: a default import of ``nameReducer`` from
        ``./nameSlice``, and a ``name: nameReducer`` entry directly inside
        the ``reducer`` object.
    """
    root = parse_source(text).root_node
    reducer = f"{name}Reducer"
    imported = any(
        default_import_name(stmt) == reducer
        for stmt in import_statements(root, f"./{name}Slice")
    )
    block = find_object(root, "reducer")
    value = object_entry(block, name) if block is not None else None
    registered = value is not None and node_text(value) == reducer
    return imported, registered


def unregister_reducer_text(text: str, name: str) -> str:
    """Remove the import and the reducer entry for *name* from *text*.

    Statements and entries that sit alone on their line are removed together
    with the line.
    """
    data = text.encode("utf-8")
    root = parse_source(text).root_node
    spans = [
        (stmt.start_byte, stmt.end_byte)
        for stmt in import_statements(root, f"./{name}Slice")
    ]
    for node in iter_nodes(root):
        if node.type != "pair" or pair_key(node) != name:
            continue
        value = node.child_by_field_name("value")
        if value is None or node_text(value) != f"{name}Reducer":
            continue
        end = node.end_byte
        following = node.next_sibling
        if following is not None and following.type == ",":
            end = following.end_byte
        spans.append((node.start_byte, end))

    for start, end in sorted(spans, reverse=True):
        start, end = _removal_span(data, start, end)
        data = data[:start] + data[end:]
    return data.decode("utf-8")


async def register_reducer(store_path: Path, name: str) -> PatchResult:
    """Patch the store file at *store_path* to include the *name* reducer.

    A missing store file is reported and left alone.  A store without a
    ``reducer: {`` block still receives the import line.
    """
    result = PatchResult(path=str(store_path))
    if not store_path.exists():
        print_warning(f"Store file not found, skipping reducer registration: {store_path}")
        return result

    original = await asyncio.to_thread(store_path.read_text, encoding="utf-8")
    patched, registered = patch_store_text(original, name)
    await asyncio.to_thread(write_text, store_path, patched)

    if not registered:
        print_warning(
            f"No 'reducer: {{ ... }}' block found in {store_path}; "
            f"add '{reducer_entry(name)}' by hand"
        )
    return PatchResult(
        path=str(store_path),
        import_added=True,
        reducer_registered=registered,
    )


def _removal_span(data: bytes, start: int, end: int) -> tuple[int, int]:
    line_start = data.rfind(b"\n", 0, start) + 1
    line_end = data.find(b"\n", end)
    line_end = len(data) if line_end == -1 else line_end + 1
    if not data[line_start:start].strip() and not data[end:line_end].strip():
        return line_start, line_end
    while end < len(data) and data[end : end + 1] in (b" ", b"\t"):
        end += 1
    return start, end
