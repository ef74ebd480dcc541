"""Tests for node field parsing and the TypeScript / Zod renderers.

Covers:
- parse_field / parse_node_type (defaults, optional marker, unions, errors)
- strict mode for unrecognised type tags
- render_type_definition line-per-field ordering
- render_zod_schema union enumeration and .optional()
"""

from __future__ import annotations

import pytest

from nextforge.errors import FieldSpecError
from nextforge.scaffolder.fields import (
    DEFAULT_NODE_TYPE,
    FieldSpec,
    parse_field,
    parse_node_type,
    render_type_definition,
    render_zod_schema,
    unknown_type_fields,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseField:
    def test_scalar(self):
        spec = parse_field("price:number")
        assert spec == FieldSpec(name="price", type_tag="number", optional=False)

    def test_optional_marker(self):
        spec = parse_field("description:string?")
        assert spec.optional is True
        assert spec.type_tag == "string"

    def test_whitespace_is_trimmed(self):
        spec = parse_field("  amount : number ")
        assert spec.name == "amount"
        assert spec.type_tag == "number"

    def test_union_members_trimmed(self):
        spec = parse_field("tier: vip | standard ")
        assert spec.is_union
        assert spec.members == ["vip", "standard"]

    def test_unknown_tag_accepted_by_default(self):
        spec = parse_field("meta:json")
        assert not spec.is_known
        assert spec.ts_type == "any"
        assert spec.zod_type == "z.any()"

    def test_unknown_tag_rejected_in_strict_mode(self):
        with pytest.raises(FieldSpecError, match="unknown type 'json'"):
            parse_field("meta:json", strict=True)

    @pytest.mark.parametrize(
        "entry",
        ["price", ":number", "price:", "price:?", "tier:a||b", "tier:a|", "9lives:string", "class:string"],
    )
    def test_malformed_entries_raise(self, entry: str):
        with pytest.raises(FieldSpecError):
            parse_field(entry)

    def test_quote_in_union_member_rejected(self):
        with pytest.raises(FieldSpecError, match="quotes"):
            parse_field("label:it's|fine")

    def test_field_spec_is_frozen(self):
        spec = parse_field("id:string")
        with pytest.raises(Exception):
            spec.name = "other"  # type: ignore[misc]


class TestParseNodeType:
    def test_none_yields_default(self):
        fields = parse_node_type(None)
        assert [f.name for f in fields] == [
            "id", "name", "description", "created_at", "updated_at", "status",
        ]
        assert fields[2].optional is True
        assert fields[5].members == ["active", "inactive"]

    def test_blank_yields_default(self):
        assert parse_node_type("   ") == parse_node_type(DEFAULT_NODE_TYPE)

    def test_order_is_preserved(self):
        fields = parse_node_type("z:string,a:number,m:boolean")
        assert [f.name for f in fields] == ["z", "a", "m"]

    def test_duplicate_names_raise(self):
        with pytest.raises(FieldSpecError, match="Duplicate field name 'id'"):
            parse_node_type("id:string,id:number")

    def test_empty_entry_raises(self):
        with pytest.raises(FieldSpecError, match="Empty field declaration"):
            parse_node_type("id:string,,name:string")

    def test_unknown_type_fields(self):
        fields = parse_node_type("id:string,meta:json,tags:array")
        assert [f.name for f in unknown_type_fields(fields)] == ["meta", "tags"]


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRenderTypeDefinition:
    def test_one_line_per_field_in_order(self):
        fields = parse_node_type("id:string,amount:number,active:boolean?,due:date")
        lines = render_type_definition(fields).splitlines()
        assert lines == [
            "  id: string;",
            "  amount: number;",
            "  active?: boolean;",
            "  due: string;",
        ]

    def test_union_renders_literal_type(self):
        fields = parse_node_type("tier:vip|standard")
        assert render_type_definition(fields) == "  tier: 'vip' | 'standard';"

    def test_unknown_renders_any(self):
        assert render_type_definition(parse_node_type("meta:json?")) == "  meta?: any;"

    def test_empty_list(self):
        assert render_type_definition([]) == ""


class TestRenderZodSchema:
    def test_scalars_and_optional(self):
        fields = parse_node_type("id:string,count:number?,done:boolean,due:date?")
        assert render_zod_schema(fields).splitlines() == [
            "  id: z.string(),",
            "  count: z.number().optional(),",
            "  done: z.boolean(),",
            "  due: z.string().optional(),",
        ]

    def test_union_enumerates_trimmed_segments_in_order(self):
        fields = parse_node_type("size: xl | s | m ")
        assert render_zod_schema(fields) == "  size: z.enum(['xl', 's', 'm']),"

    def test_union_duplicates_are_not_removed(self):
        fields = parse_node_type("flag:on|off|on")
        assert render_zod_schema(fields) == "  flag: z.enum(['on', 'off', 'on']),"

    def test_unknown_renders_any(self):
        assert render_zod_schema(parse_node_type("meta:json")) == "  meta: z.any(),"
