"""
schema-diagram - Avro schemas as entity-relationship graphs.

Parses the Avro JSON and Avro IDL syntaxes into one graph of records, enums,
fixed types and their relationships, and edits schema source text without
disturbing the rest of the document.
"""

__version__ = "0.1.0"

from schema_diagram.graph.models import (
    Cardinality,
    Diagnostic,
    EntityKind,
    FieldType,
    ParseResult,
    Relationship,
    RelationshipKind,
    SchemaEntity,
    SchemaField,
    SchemaFormat,
    SchemaGraph,
    Severity,
)
from schema_diagram.parsers import detect_format, parse_avro_idl, parse_avro_json, parse_schema
from schema_diagram.editor import (
    add_field,
    add_symbol,
    remove_field,
    rename_field,
    rename_symbol,
    unique_field_name,
    unique_symbol_name,
    update_field_default,
    update_field_type,
)
from schema_diagram.layout import build_layout_graph

__all__ = [
    "Cardinality",
    "Diagnostic",
    "EntityKind",
    "FieldType",
    "ParseResult",
    "Relationship",
    "RelationshipKind",
    "SchemaEntity",
    "SchemaField",
    "SchemaFormat",
    "SchemaGraph",
    "Severity",
    "add_field",
    "add_symbol",
    "build_layout_graph",
    "detect_format",
    "parse_avro_idl",
    "parse_avro_json",
    "parse_schema",
    "remove_field",
    "rename_field",
    "rename_symbol",
    "unique_field_name",
    "unique_symbol_name",
    "update_field_default",
    "update_field_type",
]
