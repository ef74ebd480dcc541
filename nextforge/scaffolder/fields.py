"""Node field declarations and their TypeScript / Zod renderings.

A node type is declared on the command line as a comma-separated list of
``name:type`` pairs, e.g. ``id:string,price:number,status:active|inactive``.
A trailing ``?`` on the type marks the field optional.  Both renderers are
pure functions of the ordered field list: output order equals input order.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from nextforge.errors import FieldSpecError, InvalidNameError
from .naming import validate_identifier

SCALAR_TYPES: dict[str, str] = {
    "string": "string",
    "number": "number",
    "boolean": "boolean",
    "date": "string",
}

ZOD_TYPES: dict[str, str] = {
    "string": "z.string()",
    "number": "z.number()",
    "boolean": "z.boolean()",
    "date": "z.string()",
}

DEFAULT_NODE_TYPE = (
    "id:string,name:string,description:string?,"
    "created_at:string,updated_at:string,status:active|inactive"
)


class FieldSpec(BaseModel):
    """A single field of a generated node interface."""

    model_config = ConfigDict(frozen=True)

    name: str
    type_tag: str
    optional: bool = False

    @property
    def is_union(self) -> bool:
        """True when the tag is a ``a|b|c`` literal union."""
        return "|" in self.type_tag

    @property
    def members(self) -> list[str]:
        """Trimmed literal members of a union tag (empty for scalars)."""
        if not self.is_union:
            return []
        return [part.strip() for part in self.type_tag.split("|")]

    @property
    def is_known(self) -> bool:
        """False for tags that fall back to ``any`` / ``z.any()``."""
        return self.is_union or self.type_tag in SCALAR_TYPES

    @property
    def ts_type(self) -> str:
        """TypeScript type for the interface, e.g. ``'a' | 'b'`` or ``number``."""
        if self.is_union:
            return " | ".join(_quote(m) for m in self.members)
        return SCALAR_TYPES.get(self.type_tag, "any")

    @property
    def zod_type(self) -> str:
        """Zod validator expression, without the ``.optional()`` suffix."""
        if self.is_union:
            return "z.enum([" + ", ".join(_quote(m) for m in self.members) + "])"
        return ZOD_TYPES.get(self.type_tag, "z.any()")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def parse_field(entry: str, strict: bool = False) -> FieldSpec:
    """Parse one ``name:type`` declaration.

    Raises:
        FieldSpecError: On a missing ``:``, an empty name or type, an empty
            union member, an invalid identifier, or (in *strict* mode) an
            unrecognised scalar type.
    """
    if ":" not in entry:
        raise FieldSpecError(f"Field '{entry.strip()}' must be written as name:type")
    raw_name, raw_type = entry.split(":", 1)
    name = raw_name.strip()
    type_tag = raw_type.strip()
    if not name:
        raise FieldSpecError(f"Field '{entry.strip()}' is missing a name")

    optional = type_tag.endswith("?")
    if optional:
        type_tag = type_tag[:-1].strip()
    if not type_tag:
        raise FieldSpecError(f"Field '{name}' is missing a type")

    try:
        validate_identifier(name, "field name")
    except InvalidNameError as exc:
        raise FieldSpecError(str(exc)) from exc

    if "|" in type_tag:
        members = [part.strip() for part in type_tag.split("|")]
        if any(not m for m in members):
            raise FieldSpecError(f"Field '{name}' has an empty union member in '{type_tag}'")
        if any("'" in m or "\\" in m for m in members):
            raise FieldSpecError(f"Field '{name}' has a union member with quotes or backslashes")
    elif strict and type_tag not in SCALAR_TYPES:
        raise FieldSpecError(
            f"Field '{name}' has unknown type '{type_tag}' "
            f"(expected one of {', '.join(SCALAR_TYPES)} or a|b|c)"
        )

    return FieldSpec(name=name, type_tag=type_tag, optional=optional)


def parse_node_type(text: str | None, strict: bool = False) -> list[FieldSpec]:
    """Parse a comma-separated node type definition.

    ``None`` or a blank string yields the default node type.

    Raises:
        FieldSpecError: For any malformed entry or a duplicated field name.
    """
    source = text if text and text.strip() else DEFAULT_NODE_TYPE
    fields: list[FieldSpec] = []
    seen: set[str] = set()
    for entry in source.split(","):
        if not entry.strip():
            raise FieldSpecError(f"Empty field declaration in '{source}'")
        spec = parse_field(entry, strict=strict)
        if spec.name in seen:
            raise FieldSpecError(f"Duplicate field name '{spec.name}'")
        seen.add(spec.name)
        fields.append(spec)
    return fields


def unknown_type_fields(fields: list[FieldSpec]) -> list[FieldSpec]:
    """Fields whose type tag falls back to ``any``."""
    return [f for f in fields if not f.is_known]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_type_definition(fields: list[FieldSpec]) -> str:
    """Render the body of a TypeScript interface, one line per field."""
    return "\n".join(
        f"  {f.name}{'?' if f.optional else ''}: {f.ts_type};" for f in fields
    )


def render_zod_schema(fields: list[FieldSpec]) -> str:
    """Render the body of a ``z.object({...})`` call, one line per field."""
    return "\n".join(
        f"  {f.name}: {f.zod_type}{'.optional()' if f.optional else ''}," for f in fields
    )


def _quote(value: str) -> str:
    return f"'{value}'"
