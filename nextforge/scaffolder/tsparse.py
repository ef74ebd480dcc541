"""TypeScript/TSX parsing for the store patcher and the verification scanner.

Source is parsed with tree-sitter's TypeScript grammars, so string, template
and regex literals, comments and nested objects are all handled by a real
grammar.  Node offsets from tree-sitter are UTF-8 byte offsets; the helpers
that hand positions back to callers working on ``str`` convert them to
character offsets.
"""

from __future__ import annotations

from collections.abc import Iterator
from functools import lru_cache

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

KEY_NODE_TYPES = ("property_identifier", "identifier", "number")


@lru_cache(maxsize=None)
def _language(tsx: bool) -> Language:
    if tsx:
        return Language(tree_sitter_typescript.language_tsx())
    return Language(tree_sitter_typescript.language_typescript())


def parse_source(text: str, tsx: bool = False) -> Tree:
    """Parse *text* with the TypeScript grammar, or the TSX grammar when *tsx*."""
    return Parser(_language(tsx)).parse(text.encode("utf-8"))


def iter_nodes(node: Node) -> Iterator[Node]:
    """Yield *node* and all its descendants in document order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def node_text(node: Node) -> str:
    return (node.text or b"").decode("utf-8", errors="replace")


def string_value(node: Node) -> str:
    """Contents of a string literal node, without the quotes."""
    return node_text(node)[1:-1]


# ---------------------------------------------------------------------------
# Object literals
# ---------------------------------------------------------------------------


def pair_key(pair: Node) -> str | None:
    """Name of a ``key: value`` pair, unquoted; ``None`` for computed keys."""
    key = pair.child_by_field_name("key")
    if key is None:
        return None
    if key.type in KEY_NODE_TYPES:
        return node_text(key)
    if key.type == "string":
        return string_value(key)
    return None


def find_object(root: Node, key: str) -> Node | None:
    """Return the first closed object literal assigned to ``key:`` under *root*."""
    for node in iter_nodes(root):
        if node.type != "pair" or pair_key(node) != key:
            continue
        value = node.child_by_field_name("value")
        if value is not None and value.type == "object" and _is_closed(value):
            return value
    return None


def object_entry(obj: Node, key: str) -> Node | None:
    """Value node of the direct ``key:`` entry of object literal *obj*."""
    for child in obj.named_children:
        if child.type == "pair" and pair_key(child) == key:
            return child.child_by_field_name("value")
    return None


def find_object_block(text: str, key: str) -> tuple[int, int] | None:
    """Locate the object literal assigned to the first ``key:`` property.

    Returns:
        Character offsets ``(open_index, close_index)`` of its braces, or
        ``None`` when there is no such property or the object never closes.
    """
    data = text.encode("utf-8")
    obj = find_object(parse_source(text).root_node, key)
    if obj is None:
        return None
    return _char_offset(data, obj.start_byte), _char_offset(data, obj.end_byte - 1)


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------


def import_statements(root: Node, source: str) -> list[Node]:
    """Top-level ``import`` statements whose module specifier is *source*."""
    found = []
    for node in root.children:
        if node.type != "import_statement":
            continue
        spec = node.child_by_field_name("source")
        if spec is not None and string_value(spec) == source:
            found.append(node)
    return found


def default_import_name(statement: Node) -> str | None:
    """The default binding of an import statement (``import foo from ...``)."""
    for child in statement.named_children:
        if child.type != "import_clause":
            continue
        for part in child.named_children:
            if part.type == "identifier":
                return node_text(part)
    return None


# ---------------------------------------------------------------------------
# Syntax errors
# ---------------------------------------------------------------------------


def find_syntax_error(text: str, tsx: bool = False) -> str | None:
    """Describe the first syntax error in *text*, or return ``None``.

    The message carries the 1-based line number, e.g.
    ``"missing '}' on line 4"`` or ``"unexpected '= ;' on line 3"``.
    """
    root = parse_source(text, tsx).root_node
    if not root.has_error:
        return None
    stack = [root]
    while stack:
        node = stack.pop()
        line = node.start_point[0] + 1
        if node.is_missing:
            return f"missing '{node.type}' on line {line}"
        if node.is_error:
            snippet = node_text(node).strip()
            if not snippet:
                return f"syntax error on line {line}"
            return f"unexpected '{snippet.splitlines()[0][:40]}' on line {line}"
        stack.extend(child for child in reversed(node.children) if child.has_error)
    return "source could not be parsed"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _is_closed(obj: Node) -> bool:
    last = obj.children[-1] if obj.children else None
    return last is not None and last.type == "}" and not last.is_missing


def _char_offset(data: bytes, byte_offset: int) -> int:
    return len(data[:byte_offset].decode("utf-8", errors="replace"))
