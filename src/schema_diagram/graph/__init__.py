"""Unified graph model produced by the schema frontends."""

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
]
