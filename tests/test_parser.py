"""Tests for format detection and the unified parser interface.

Tests cover:
- Format detection
- SchemaParser and parse_schema dispatch
- File parsing with extension hints
- Parse never raises
- Bundled samples
"""

import json
import time

import pytest

from schema_diagram.graph.models import SchemaFormat, Severity
from schema_diagram.parsers import SchemaParser, detect_format, parse_schema, parse_schema_file
from schema_diagram.parsers.idl import parse_avro_idl
from schema_diagram.parsers.parser import UNKNOWN_FORMAT_MESSAGE
from schema_diagram.samples import get_sample, list_samples


# =============================================================================
# Format Detection
# =============================================================================

class TestDetectFormat:
    """Tests for detect_format."""

    def test_empty_is_unknown(self):
        """Test empty and blank input."""
        assert detect_format("") == SchemaFormat.UNKNOWN
        assert detect_format("   \n ") == SchemaFormat.UNKNOWN

    def test_json_record(self):
        """Test a JSON record."""
        assert detect_format('{"type":"record","name":"X","fields":[]}') == SchemaFormat.AVRO_JSON

    def test_json_array(self):
        """Test a JSON array of named types."""
        assert detect_format('[{"type":"enum","name":"E","symbols":[]}]') == SchemaFormat.AVRO_JSON

    def test_json_protocol(self):
        """Test a JSON protocol object."""
        text = json.dumps({"protocol": "P", "types": [{"type": "fixed", "name": "F", "size": 4}]})
        assert detect_format(text) == SchemaFormat.AVRO_JSON

    def test_json_without_named_type(self):
        """Test JSON that declares nothing is unknown."""
        assert detect_format('{"hello": "world"}') == SchemaFormat.UNKNOWN
        assert detect_format('{"type": "string"}') == SchemaFormat.UNKNOWN

    def test_broken_json_record(self):
        """Test JSON that fails to decode but declares a record."""
        assert detect_format('{"type": "record", "name": "X", "fields": [') == SchemaFormat.AVRO_JSON

    def test_idl_record(self):
        """Test a bare IDL record."""
        assert detect_format("record X { string a; }") == SchemaFormat.AVRO_IDL

    def test_idl_protocol(self):
        """Test an IDL protocol."""
        assert detect_format("protocol Shop {\n}") == SchemaFormat.AVRO_IDL

    def test_idl_enum_and_fixed(self):
        """Test IDL enum and fixed declarations."""
        assert detect_format("enum E { A }") == SchemaFormat.AVRO_IDL
        assert detect_format("fixed F(16);") == SchemaFormat.AVRO_IDL

    def test_plain_text(self):
        """Test prose is unknown."""
        assert detect_format("just some notes") == SchemaFormat.UNKNOWN


# =============================================================================
# Unified Parser
# =============================================================================

class TestSchemaParser:
    """Tests for SchemaParser and parse_schema."""

    def test_parse_json(self):
        """Test JSON text is dispatched to the JSON walker."""
        result = parse_schema('{"type":"record","name":"User","fields":[{"name":"id","type":"long"}]}')
        assert result.format == SchemaFormat.AVRO_JSON
        assert result.graph.entities[0].id == "User"

    def test_parse_idl(self):
        """Test IDL text is dispatched to the IDL parser."""
        result = parse_schema("record Foo { string a; }")
        assert result.format == SchemaFormat.AVRO_IDL
        assert result.graph.entities[0].field_names() == ["a"]

    def test_parse_unknown(self):
        """Test unrecognized input yields one diagnostic and an empty graph."""
        result = parse_schema("hello world")
        assert result.format == SchemaFormat.UNKNOWN
        assert result.graph.entities == []
        assert result.graph.relationships == []
        assert len(result.graph.diagnostics) == 1
        assert result.graph.diagnostics[0].message == UNKNOWN_FORMAT_MESSAGE
        assert result.graph.diagnostics[0].severity == Severity.ERROR

    def test_explicit_format_string(self):
        """Test an explicit format overrides detection."""
        parser = SchemaParser("record Foo { string a; }", "avro-idl")
        assert parser.format == SchemaFormat.AVRO_IDL

    def test_invalid_format_string_raises(self):
        """Test an unknown format name is a programming error."""
        with pytest.raises(ValueError):
            SchemaParser("", "protobuf")

    def test_from_file_uses_content(self, tmp_path):
        """Test content detection wins over the extension."""
        path = tmp_path / "schema.json"
        path.write_text("record Foo { string a; }")
        assert SchemaParser.from_file(path).format == SchemaFormat.AVRO_IDL

    def test_from_file_extension_fallback(self, tmp_path):
        """Test the extension decides when content is unrecognized."""
        path = tmp_path / "empty.avdl"
        path.write_text("// nothing declared yet\n")
        result = parse_schema_file(path)
        assert result.format == SchemaFormat.AVRO_IDL
        assert result.graph.diagnostics == []

    def test_from_file_missing(self, tmp_path):
        """Test a missing file raises."""
        with pytest.raises(FileNotFoundError):
            parse_schema_file(tmp_path / "missing.avsc")

    def test_graph_serializes(self):
        """Test the parse result dumps to JSON-compatible data."""
        result = parse_schema(get_sample("user-service").content)
        data = result.model_dump(mode="json")
        assert data["format"] == "avro-idl"
        assert data["graph"]["relationships"][-1]["cardinality"] == "N:1"
        json.dumps(data)


# =============================================================================
# Never Raises
# =============================================================================

class TestNeverRaises:
    """parse_schema returns a graph for any input."""

    @pytest.mark.parametrize("text", [
        "",
        "{",
        "[",
        "[1, 2, 3]",
        "null",
        '{"type": "record"',
        '{"type": "record", "name": 5, "fields": "x"}',
        '{"type": "record", "name": "A", "fields": [{"name": "f", "type": {"type": "array"}}]}',
        '{"type": "record", "name": "A", "fields": [{"name": "f", "type": {"type": "map", "values": null}}]}',
        '{"type": "record", "name": "A", "fields": [{"name": "f", "type": []}]}',
        '{"type": "record", "name": "A", "fields": [{"name": "f", "type": 3}]}',
        "protocol P {",
        "record X { union { null, ",
        "enum E {",
        '/* "unterminated',
        '"record X {',
        "\x00\x01\x02",
        "[" * 5000,
    ])
    def test_never_raises(self, text):
        """Test malformed input produces a well-formed result."""
        result = parse_schema(text)
        assert isinstance(result.graph.entities, list)
        assert isinstance(result.graph.relationships, list)
        assert isinstance(result.graph.diagnostics, list)


# =============================================================================
# Scaling
# =============================================================================

class TestScaling:
    """Parse time grows linearly with broken input."""

    @staticmethod
    def _elapsed(lines: int) -> float:
        text = "record A {\n" + ";\n" * lines + "}"
        best = None
        for _ in range(3):
            start = time.perf_counter()
            graph = parse_avro_idl(text)
            took = time.perf_counter() - start
            best = took if best is None else min(best, took)
        assert len(graph.diagnostics) >= lines
        return best

    def test_one_diagnostic_per_line_is_linear(self):
        """Test eight times the input stays far below the quadratic cost."""
        small = self._elapsed(2000)
        large = self._elapsed(16000)
        assert large < small * 32


# =============================================================================
# Samples
# =============================================================================

class TestSamples:
    """Tests for the bundled sample schemas."""

    def test_list_samples(self):
        """Test both syntaxes are represented."""
        names = [s.name for s in list_samples()]
        assert names == ["user-address", "ecommerce", "user-service", "clinical"]

    @pytest.mark.parametrize("sample", list_samples(), ids=lambda s: s.name)
    def test_samples_parse_cleanly(self, sample):
        """Test every sample parses without diagnostics."""
        result = parse_schema(sample.content)
        assert result.format != SchemaFormat.UNKNOWN
        assert result.graph.entities
        assert result.graph.diagnostics == []

    def test_clinical_sample(self):
        """Test the namespaced IDL sample."""
        graph = parse_schema(get_sample("clinical").content).graph
        assert graph.entities[0].id == "org.clinic.Gender"
        patient = graph.get_entity("org.clinic.Patient")
        assert patient.get_field("date_of_birth").type.display == "date?"
        assert len(graph.relationships) == 8

    def test_unknown_sample(self):
        """Test an unknown sample name."""
        with pytest.raises(KeyError):
            get_sample("nope")
