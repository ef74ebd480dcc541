"""Name validation and case helpers for generated TypeScript identifiers."""

from __future__ import annotations

import re

from nextforge.errors import InvalidNameError

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_PATH_SEGMENT_RE = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_-]*$")
_APP_NAME_RE = re.compile(r"^[a-z0-9][a-z0-9-]*$")

# ECMAScript/TypeScript reserved words that cannot name a binding.
TS_RESERVED_WORDS: frozenset[str] = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "new",
    "null", "return", "super", "switch", "this", "throw", "true", "try",
    "typeof", "var", "void", "while", "with", "implements", "interface",
    "let", "package", "private", "protected", "public", "static", "yield",
    "await",
})


def validate_identifier(name: str, what: str = "name") -> str:
    """Return *name* stripped, or raise if it is not a usable TS identifier."""
    cleaned = name.strip()
    if not _IDENTIFIER_RE.match(cleaned):
        raise InvalidNameError(
            f"Invalid {what} '{name}': use letters, digits, '_' or '$', "
            "not starting with a digit"
        )
    if cleaned in TS_RESERVED_WORDS:
        raise InvalidNameError(f"Invalid {what} '{name}': '{cleaned}' is a reserved word")
    return cleaned


def validate_path_segment(name: str, what: str = "module name") -> str:
    """Return *name* stripped, or raise if it is not a safe directory name."""
    cleaned = name.strip()
    if not _PATH_SEGMENT_RE.match(cleaned):
        raise InvalidNameError(
            f"Invalid {what} '{name}': use letters, digits, '-' or '_'"
        )
    return cleaned


def validate_route_path(route: str) -> str:
    """Validate a Next.js route such as ``dashboard/products`` or ``(admin)/users``."""
    cleaned = route.strip().strip("/")
    if not cleaned:
        raise InvalidNameError("Route path must not be empty")
    for segment in cleaned.split("/"):
        if segment in ("", ".", "..") or not re.match(r"^[A-Za-z0-9_\-()\[\].]+$", segment):
            raise InvalidNameError(f"Invalid route path '{route}'")
    return cleaned


def validate_app_name(name: str) -> str:
    """App names may only contain lowercase letters, numbers and hyphens."""
    cleaned = name.strip()
    if not _APP_NAME_RE.match(cleaned):
        raise InvalidNameError(
            f"Invalid app name '{name}': use lowercase letters, numbers and hyphens"
        )
    return cleaned


def to_pascal(value: str) -> str:
    """Convert ``some-thing`` or ``some_thing`` to ``SomeThing``."""
    parts = re.split(r"[-_\s]+", value)
    return "".join(word[:1].upper() + word[1:] for word in parts if word)

