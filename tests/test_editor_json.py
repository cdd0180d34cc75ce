"""Tests for editing Avro JSON text.

Tests cover:
- Field edits (add, remove, rename, type, default)
- Enum symbol edits
- Nested and qualified targets
- Misses returning the input unchanged
- Registry and dispatch
"""

import json

import pytest

from schema_diagram.config.settings import EditorSettings
from schema_diagram.editor import (
    AddField,
    EditorRegistry,
    IdlEditorBackend,
    JsonEditorBackend,
    RenameField,
    add_field,
    add_symbol,
    apply_edit,
    remove_field,
    rename_field,
    rename_symbol,
    unique_field_name,
    unique_symbol_name,
    update_field_default,
    update_field_type,
)
from schema_diagram.editor.json_backend import coerce_type, find_schema
from schema_diagram.graph.models import SchemaFormat
from schema_diagram.parsers import parse_schema
from schema_diagram.samples import get_sample

USER = '{"type":"record","name":"User","fields":[{"name":"id","type":"long"}]}'
JSON = SchemaFormat.AVRO_JSON


@pytest.fixture
def nested_text():
    """User record with inline Address and UserStatus."""
    return get_sample("user-address").content


# =============================================================================
# Field Edits
# =============================================================================

class TestFieldEdits:
    """Tests for record field edits."""

    def test_add_field_then_reparse(self):
        """Test an added field appears after the existing ones."""
        text = add_field(USER, JSON, "User", "age", "int")
        user = parse_schema(text).graph.entities[0]

        assert user.field_names() == ["id", "age"]
        assert user.get_field("age").type.display == "int"

    def test_add_field_default_type(self):
        """Test a field added without a type uses the configured default."""
        text = add_field(USER, JSON, "User", "note")
        assert json.loads(text)["fields"][1] == {"name": "note", "type": "string"}

    def test_add_field_nullable_shorthand(self):
        """Test T? becomes a null union."""
        text = add_field(USER, JSON, "User", "nick", "string?")
        assert json.loads(text)["fields"][1]["type"] == ["null", "string"]

    def test_add_field_json_type(self):
        """Test a JSON type argument is decoded."""
        text = add_field(USER, JSON, "User", "tags", '{"type": "array", "items": "string"}')
        assert json.loads(text)["fields"][1]["type"] == {"type": "array", "items": "string"}

    def test_add_duplicate_field_is_a_miss(self):
        """Test adding an existing field returns the input."""
        assert add_field(USER, JSON, "User", "id", "int") == USER

    def test_remove_field(self):
        """Test removing a field."""
        text = remove_field(USER, JSON, "User", "id")
        assert json.loads(text)["fields"] == []

    def test_rename_field(self):
        """Test renaming a field keeps its type."""
        text = rename_field(USER, JSON, "User", "id", "user_id")
        assert json.loads(text)["fields"] == [{"name": "user_id", "type": "long"}]

    def test_update_field_type(self):
        """Test changing a field type."""
        text = update_field_type(USER, JSON, "User", "id", "string")
        assert json.loads(text)["fields"][0]["type"] == "string"

    def test_update_field_default(self):
        """Test setting and removing a default."""
        text = update_field_default(USER, JSON, "User", "id", 0)
        assert json.loads(text)["fields"][0]["default"] == 0

        text = update_field_default(text, JSON, "User", "id", remove=True)
        assert "default" not in json.loads(text)["fields"][0]

    def test_null_default(self):
        """Test null is a real default value."""
        text = update_field_default(USER, JSON, "User", "id", None)
        assert json.loads(text)["fields"][0]["default"] is None

    @pytest.mark.parametrize("old,new", [(1, True), (0, False), (1, 1.0), (True, 1)])
    def test_default_type_change_is_an_edit(self, old, new):
        """Test values that compare equal in Python but differ in JSON."""
        text = json.dumps({"type": "record", "name": "R", "fields": [
            {"name": "f", "type": ["int", "boolean", "double"], "default": old},
        ]})
        edited = update_field_default(text, JSON, "R", "f", new)

        assert edited != text
        assert json.dumps(json.loads(edited)["fields"][0]["default"]) == json.dumps(new)

    def test_same_default_is_a_miss(self):
        """Test setting the value already there changes nothing."""
        text = update_field_default(USER, JSON, "User", "id", 0)
        assert update_field_default(text, JSON, "User", "id", 0) == text

    def test_remove_missing_default_is_a_miss(self):
        """Test removing a default that is not there."""
        assert update_field_default(USER, JSON, "User", "id", remove=True) == USER

    def test_output_is_reindented(self):
        """Test successful edits re-serialize with canonical indentation."""
        text = rename_field(USER, JSON, "User", "id", "key")
        assert text.startswith('{\n  "type": "record"')

    def test_indent_setting(self):
        """Test the configured indent is used."""
        text = rename_field(USER, JSON, "User", "id", "key", settings=EditorSettings(json_indent=4))
        assert '\n    "type": "record"' in text


# =============================================================================
# Targets
# =============================================================================

class TestTargets:
    """Tests for locating the schema to edit."""

    def test_nested_record_by_simple_name(self, nested_text):
        """Test an inline record can be edited."""
        text = add_field(nested_text, JSON, "Address", "country", "string")
        address = parse_schema(text).graph.get_entity("com.example.Address")
        assert address.field_names()[-1] == "country"

    def test_nested_record_by_qualified_name(self, nested_text):
        """Test qualified names resolve through the enclosing namespace."""
        text = remove_field(nested_text, JSON, "com.example.Address", "zip")
        address = parse_schema(text).graph.get_entity("com.example.Address")
        assert "zip" not in address.field_names()

    def test_schema_in_array(self):
        """Test targets inside a top-level array."""
        text = get_sample("ecommerce").content
        edited = rename_field(text, JSON, "com.shop.Order", "total_cents", "total")
        order = parse_schema(edited).graph.get_entity("com.shop.Order")
        assert "total" in order.field_names()

    def test_schema_in_protocol(self):
        """Test targets inside a JSON protocol."""
        text = json.dumps({"protocol": "P", "namespace": "ns", "types": [
            {"type": "record", "name": "A", "fields": []},
        ]})
        edited = add_field(text, JSON, "ns.A", "x", "int")
        assert json.loads(edited)["types"][0]["fields"] == [{"name": "x", "type": "int"}]

    def test_find_schema_in_union_and_map(self):
        """Test the search descends into unions and map values."""
        data = {"type": "record", "name": "R", "fields": [
            {"name": "a", "type": ["null", {"type": "record", "name": "InUnion", "fields": []}]},
            {"name": "b", "type": {"type": "map", "values": {"type": "enum", "name": "InMap", "symbols": []}}},
        ]}
        assert find_schema(data, "InUnion")["name"] == "InUnion"
        assert find_schema(data, "InMap")["name"] == "InMap"
        assert find_schema(data, "Nowhere") is None


# =============================================================================
# Symbol Edits
# =============================================================================

class TestSymbolEdits:
    """Tests for enum symbol edits."""

    def test_add_symbol(self, nested_text):
        """Test appending a symbol to an inline enum."""
        text = add_symbol(nested_text, JSON, "UserStatus", "DELETED")
        status = parse_schema(text).graph.get_entity("com.example.UserStatus")
        assert status.symbols == ["ACTIVE", "INACTIVE", "SUSPENDED", "DELETED"]

    def test_add_duplicate_symbol_is_a_miss(self, nested_text):
        """Test adding an existing symbol returns the input."""
        assert add_symbol(nested_text, JSON, "UserStatus", "ACTIVE") == nested_text

    def test_rename_symbol_updates_default(self):
        """Test renaming a symbol also renames a matching enum default."""
        text = json.dumps({"type": "enum", "name": "E", "symbols": ["A", "B"], "default": "A"})
        data = json.loads(rename_symbol(text, JSON, "E", "A", "Z"))
        assert data["symbols"] == ["Z", "B"]
        assert data["default"] == "Z"

    def test_symbol_edit_on_record_is_a_miss(self):
        """Test symbol edits only apply to enums."""
        assert add_symbol(USER, JSON, "User", "X") == USER


# =============================================================================
# Misses
# =============================================================================

class TestMisses:
    """Edits that do not apply return the input byte-for-byte."""

    ODD = '{ "type" : "record",\n\t"name":"User", "fields":[ {"name":"id","type":"long"} ] }'

    @pytest.mark.parametrize("edit", [
        lambda t: add_field(t, JSON, "Nobody", "x", "int"),
        lambda t: remove_field(t, JSON, "User", "missing"),
        lambda t: rename_field(t, JSON, "User", "missing", "other"),
        lambda t: rename_field(t, JSON, "User", "id", "id"),
        lambda t: update_field_type(t, JSON, "User", "missing", "int"),
        lambda t: update_field_type(t, JSON, "User", "id", "long"),
        lambda t: update_field_default(t, JSON, "Nobody", "id", 1),
        lambda t: add_symbol(t, JSON, "Nobody", "X"),
        lambda t: rename_symbol(t, JSON, "User", "A", "B"),
    ])
    def test_miss_returns_input(self, edit):
        """Test formatting survives when nothing changes."""
        assert edit(self.ODD) == self.ODD

    def test_invalid_json_returns_input(self):
        """Test undecodable text is returned unchanged."""
        broken = '{"type": "record", "name": "User", "fields": ['
        assert add_field(broken, JSON, "User", "x", "int") == broken


# =============================================================================
# Dispatch
# =============================================================================

class TestDispatch:
    """Tests for format dispatch and the backend registry."""

    def test_registry_defaults(self):
        """Test both formats have a backend."""
        registry = EditorRegistry()
        assert registry.get(SchemaFormat.AVRO_JSON) is JsonEditorBackend
        assert registry.get("avro-idl") is IdlEditorBackend
        assert registry.get("unknown") is None
        assert registry.get("bogus") is None
        assert SchemaFormat.AVRO_JSON in registry
        assert "bogus" not in registry
        assert set(registry.list_formats()) == {SchemaFormat.AVRO_JSON, SchemaFormat.AVRO_IDL}

    def test_registry_create_passes_settings(self):
        """Test created backends carry the settings."""
        backend = EditorRegistry().create("avro-json", EditorSettings(json_indent=0))
        assert backend.settings.json_indent == 0
        assert EditorRegistry().create(SchemaFormat.UNKNOWN) is None

    def test_auto_detect_format(self):
        """Test a None format is detected from the text."""
        assert json.loads(add_field(USER, None, "User", "x", "int"))["fields"][1]["name"] == "x"
        assert add_field("record User { long id; }", None, "User", "x", "int") == "record User { long id; int x; }"

    def test_format_aliases(self):
        """Test short format names."""
        assert apply_edit(USER, "json", RenameField("User", "id", "key")) != USER
        assert apply_edit("record A { int a; }", "idl", RenameField("A", "a", "b")) == "record A { int b; }"

    def test_unknown_format_is_a_miss(self):
        """Test text with no editor is returned unchanged."""
        assert apply_edit(USER, "protobuf", AddField("User", "x", "int")) == USER
        assert apply_edit("plain text", None, AddField("User", "x", "int")) == "plain text"

    def test_backend_failure_returns_input(self):
        """Test an exception inside a backend is contained."""

        class Exploding(JsonEditorBackend):
            def add_field(self, text, intent):
                raise RuntimeError("boom")

        assert Exploding().apply(USER, AddField("User", "x", "int")) == USER

    def test_unsupported_intent(self):
        """Test an unknown intent object is ignored."""
        assert JsonEditorBackend().apply(USER, object()) == USER

    def test_coerce_type(self):
        """Test type argument decoding."""
        assert coerce_type("int") == "int"
        assert coerce_type(" Address? ") == ["null", "Address"]
        assert coerce_type('["null", "int"]') == ["null", "int"]
        assert coerce_type("[broken") == "[broken"


# =============================================================================
# Unique Names
# =============================================================================

class TestUniqueNames:
    """Tests for generated names."""

    def test_unique_field_name(self):
        """Test new field names."""
        assert unique_field_name(set()) == "new_field"
        assert unique_field_name({"new_field"}) == "new_field_2"
        assert unique_field_name({"new_field", "new_field_2"}) == "new_field_3"

    def test_unique_symbol_name(self):
        """Test new symbol names."""
        assert unique_symbol_name([]) == "NEW_SYMBOL"
        assert unique_symbol_name(["NEW_SYMBOL", "NEW_SYMBOL_3"]) == "NEW_SYMBOL_2"
