"""Tests for the tree-sitter based TypeScript helpers."""

from __future__ import annotations

import pytest

from nextforge.scaffolder.tsparse import (
    default_import_name,
    find_object,
    find_object_block,
    find_syntax_error,
    import_statements,
    iter_nodes,
    node_text,
    object_entry,
    parse_source,
)

pytestmark = pytest.mark.unit


class TestFindObjectBlock:
    def test_finds_outer_block_with_nested_objects(self):
        text = "configureStore({ reducer: { a: { b: 1 } }, devTools: true })"
        block = find_object_block(text, "reducer")
        assert block is not None
        start, end = block
        assert text[start : end + 1] == "{ a: { b: 1 } }"

    def test_ignores_key_in_comment_or_string(self):
        text = "// reducer: {\nconst s = 'reducer: {';\nconst x = { reducer: {} };"
        start, end = find_object_block(text, "reducer")
        assert text[start : end + 1] == "{}"
        assert text.count("\n", 0, start) == 2

    def test_regex_literal_with_backtick(self):
        text = "const tick = /`/;\nconst x = { reducer: { a: 1 } };\n"
        start, end = find_object_block(text, "reducer")
        assert text[start : end + 1] == "{ a: 1 }"

    def test_offsets_are_characters_not_bytes(self):
        text = "const s = 'héllo ✓';\nconst x = { reducer: { k: 1 } };"
        start, end = find_object_block(text, "reducer")
        assert text[start : end + 1] == "{ k: 1 }"

    def test_quoted_key(self):
        text = "const x = { 'reducer': { a: 1 } };"
        start, end = find_object_block(text, "reducer")
        assert text[start : end + 1] == "{ a: 1 }"

    def test_other_keys_do_not_match(self):
        assert find_object_block("const x = { myreducer: {} };", "reducer") is None
        assert find_object_block("const store = configureStore({});", "reducer") is None

    def test_value_must_be_object_literal(self):
        assert find_object_block("const x = { reducer: rootReducer };", "reducer") is None

    def test_unclosed_object(self):
        assert find_object_block("const x = { reducer: { a: 1", "reducer") is None


class TestObjectHelpers:
    def test_object_entry(self):
        root = parse_source("const x = { reducer: { users: usersReducer, 'tasks': t } };").root_node
        block = find_object(root, "reducer")
        assert block is not None
        assert node_text(object_entry(block, "users")) == "usersReducer"
        assert node_text(object_entry(block, "tasks")) == "t"
        assert object_entry(block, "missing") is None

    def test_iter_nodes_starts_at_root(self):
        root = parse_source("const a = 1;").root_node
        nodes = list(iter_nodes(root))
        assert nodes[0] == root
        assert any(n.type == "number" for n in nodes)


class TestImports:
    def test_statements_matching_source(self):
        text = (
            "import fooReducer from './fooSlice';\n"
            "import { bar } from './fooSlice';\n"
            "import other from './other';\n"
        )
        statements = import_statements(parse_source(text).root_node, "./fooSlice")
        assert [default_import_name(s) for s in statements] == ["fooReducer", None]


class TestFindSyntaxError:
    def test_valid_typescript(self):
        text = (
            "export interface Foo {\n  id: string;\n  tier?: 'a' | 'b';\n}\n"
            "export const fetchAll = createAsyncThunk<Foo[], void, { rejectValue: string }>(\n"
            "  'foo/fetchAll',\n  async (_, { rejectWithValue }) => rejectWithValue('x')\n);\n"
        )
        assert find_syntax_error(text) is None

    def test_regex_and_template_literals(self):
        assert find_syntax_error("const re = /[{(]/;\nconst t = `a ${re} }`;\n") is None

    def test_garbage_is_reported_with_line(self):
        problem = find_syntax_error("export interface Foo {\n  id: ;\n  export const = ;\n}\n")
        assert problem is not None
        assert "line" in problem

    def test_unclosed_block(self):
        assert find_syntax_error("function f() {\n  return 1;\n") is not None

    def test_tsx_grammar(self):
        text = "export default function Page() {\n  return <div className=\"p-4\">{items.length}</div>;\n}\n"
        assert find_syntax_error(text, tsx=True) is None
