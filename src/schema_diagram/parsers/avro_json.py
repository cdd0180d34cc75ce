"""Avro JSON schema walker.

Walks Avro schemas in their JSON form (.avsc, or the types of an .avpr
protocol) and builds a SchemaGraph.
"""

import json
import logging
from typing import Any

from jsonschema import Draft7Validator

from schema_diagram.graph.models import EntityKind, SchemaEntity, SchemaField, SchemaGraph, Severity
from schema_diagram.parsers.base import GraphBuilder
from schema_diagram.parsers.types import (
    PRIMITIVE_TYPES,
    ArrayType,
    InlineType,
    MapType,
    NamedType,
    PrimitiveType,
    TypeNode,
    UnionType,
    UnknownType,
    resolve_type,
)
from schema_diagram.utils.helpers import namespace_of, qualify, resolve_reference, simple_name, split_qualified_name

logger = logging.getLogger(__name__)

NAMED_TYPES = ("record", "enum", "fixed")

# Field keys defined by Avro (plus 'join'); anything else is kept as an annotation
STANDARD_FIELD_KEYS = frozenset({"name", "type", "doc", "default", "order", "aliases", "join"})

# Minimal shape checks for named types; violations are warnings
STRUCTURE_CHECKS = {
    "record": Draft7Validator({
        "type": "object",
        "required": ["fields"],
        "properties": {
            "namespace": {"type": ["string", "null"]},
            "doc": {"type": "string"},
            "fields": {
                "type": "array",
                "items": {
                    "type": "object",
                    "required": ["name", "type"],
                    "properties": {"name": {"type": "string"}},
                },
            },
        },
    }),
    "enum": Draft7Validator({
        "type": "object",
        "required": ["symbols"],
        "properties": {
            "doc": {"type": "string"},
            "symbols": {"type": "array", "items": {"type": "string"}},
        },
    }),
    "fixed": Draft7Validator({
        "type": "object",
        "required": ["size"],
        "properties": {
            "size": {"type": "integer", "minimum": 0},
        },
    }),
}


class AvroJsonParser:
    """Walker for Avro schemas in JSON form."""

    def __init__(self, schema: Any, builder: GraphBuilder | None = None):
        """Initialize walker with an already-decoded schema.

        Args:
            schema: Decoded JSON value (object, array of objects, or protocol)
            builder: Graph builder to collect results into
        """
        self.schema = schema
        self.builder = builder or GraphBuilder()

    @classmethod
    def from_string(cls, content: str) -> "AvroJsonParser":
        """Decode JSON text and create a walker.

        Args:
            content: Avro schema as JSON text

        Returns:
            Initialized walker

        Raises:
            json.JSONDecodeError: If the text is not valid JSON
        """
        return cls(json.loads(content), GraphBuilder(content))

    def parse(self) -> SchemaGraph:
        """Walk every top-level schema, sharing one named-type registry.

        Returns:
            Parsed SchemaGraph
        """
        namespace = None
        top_level = self.schema

        if isinstance(top_level, dict) and isinstance(top_level.get("types"), list) and "protocol" in top_level:
            namespace = top_level.get("namespace") if isinstance(top_level.get("namespace"), str) else None
            top_level = top_level["types"]

        if not isinstance(top_level, list):
            top_level = [top_level]

        for schema in top_level:
            self._process_schema(schema, None, namespace)

        return self.builder.graph

    def _process_schema(self, schema: Any, parent_id: str | None, namespace: str | None) -> str | None:
        """Register a named type and return its id.

        Objects without a known 'type' or without a 'name' yield nothing;
        an id seen before is returned without registering again.

        Args:
            schema: Candidate schema object
            parent_id: Id of the enclosing entity, if any
            namespace: Namespace inherited from the enclosing scope

        Returns:
            Entity id, or None when the object is not a named type
        """
        if not isinstance(schema, dict):
            return None

        kind = schema.get("type")
        name = schema.get("name")
        if kind not in NAMED_TYPES or not isinstance(name, str) or not name:
            return None

        if "." in name:
            namespace, name = split_qualified_name(name)
        elif isinstance(schema.get("namespace"), str):
            namespace = schema["namespace"] or None

        entity_id = qualify(name, namespace)
        if self.builder.has_entity(entity_id):
            return entity_id

        self._check_structure(schema, kind, entity_id)

        doc = schema.get("doc") if isinstance(schema.get("doc"), str) else None
        entity = SchemaEntity(
            id=entity_id,
            name=name,
            namespace=namespace,
            kind=EntityKind(kind),
            doc=doc,
            is_nested=parent_id is not None,
            parent_schema=parent_id,
        )

        if kind == "record":
            entity.fields = []
            self.builder.register(entity)
            fields = schema.get("fields")
            for field in fields if isinstance(fields, list) else []:
                parsed = self._process_field(field, entity_id)
                if parsed is not None:
                    entity.fields.append(parsed)
        elif kind == "enum":
            symbols = schema.get("symbols")
            entity.symbols = [s for s in symbols if isinstance(s, str)] if isinstance(symbols, list) else []
            self.builder.register(entity)
        else:
            size = schema.get("size")
            entity.size = size if isinstance(size, int) and not isinstance(size, bool) else None
            self.builder.register(entity)

        return entity_id

    def _check_structure(self, schema: dict[str, Any], kind: str, entity_id: str) -> None:
        for error in STRUCTURE_CHECKS[kind].iter_errors(schema):
            path = "/".join(str(p) for p in error.absolute_path)
            location = f"{entity_id}/{path}" if path else entity_id
            self.builder.diagnostic(f"{location}: {error.message}", Severity.WARNING)

    def _process_field(self, field: Any, parent_id: str) -> SchemaField | None:
        """Parse an Avro field, its reference edge and its join annotation.

        Args:
            field: Avro field definition
            parent_id: Id of the owning record

        Returns:
            Parsed SchemaField, or None when the field has no name
        """
        if not isinstance(field, dict):
            return None
        name = field.get("name")
        if not isinstance(name, str) or not name:
            return None

        node = self._decode_type(field.get("type"), name, parent_id)
        resolved = resolve_type(node)
        if resolved.edge is not None:
            self.builder.add_reference(parent_id, name, resolved.edge)

        join = field.get("join")
        if isinstance(join, dict):
            self.builder.add_join_spec(parent_id, name, join, namespace_of(parent_id))

        annotations = {k: v for k, v in field.items() if k not in STANDARD_FIELD_KEYS}

        return SchemaField(
            name=name,
            type=resolved.field_type,
            doc=field.get("doc") if isinstance(field.get("doc"), str) else None,
            default=field.get("default"),
            has_default="default" in field,
            annotations=annotations or None,
        )

    def _decode_type(self, avro_type: Any, field_name: str, parent_id: str) -> TypeNode:
        """Decode an Avro type value into a type node.

        Inline named types are registered on the way, each with a nested
        relationship from the enclosing entity.

        Args:
            avro_type: Avro type definition
            field_name: Name of the field being decoded
            parent_id: Id of the enclosing entity

        Returns:
            Decoded TypeNode
        """
        # Primitive or named type as string
        if isinstance(avro_type, str):
            if avro_type in PRIMITIVE_TYPES:
                return PrimitiveType(avro_type)
            target = resolve_reference(avro_type, namespace_of(parent_id), self.builder.known_ids)
            return NamedType(target, simple_name(avro_type))

        # Union type (e.g., ["null", "string"])
        if isinstance(avro_type, list):
            return UnionType(tuple(self._decode_type(t, field_name, parent_id) for t in avro_type))

        if isinstance(avro_type, dict):
            return self._decode_complex_type(avro_type, field_name, parent_id)

        return UnknownType("unknown" if avro_type is None else json.dumps(avro_type))

    def _decode_complex_type(self, type_schema: dict[str, Any], field_name: str, parent_id: str) -> TypeNode:
        type_name = type_schema.get("type")

        if type_name == "array":
            return ArrayType(self._decode_type(type_schema.get("items"), field_name, parent_id))

        if type_name == "map":
            return MapType(self._decode_type(type_schema.get("values"), field_name, parent_id))

        if type_name in NAMED_TYPES:
            inline_id = self._process_schema(type_schema, parent_id, namespace_of(parent_id))
            if inline_id is None:
                return UnknownType(type_name)
            self.builder.add_nested(parent_id, field_name, inline_id)
            return InlineType(inline_id, simple_name(inline_id))

        # Logical types and other annotated primitives
        if type_name in PRIMITIVE_TYPES:
            logical_type = type_schema.get("logicalType")
            return PrimitiveType(type_name, logical_type if isinstance(logical_type, str) else None)

        if isinstance(type_name, (str, list, dict)):
            return self._decode_type(type_name, field_name, parent_id)

        return UnknownType(json.dumps(type_schema))


def parse_avro_json(text: str) -> SchemaGraph:
    """Parse Avro JSON text into a SchemaGraph.

    Invalid JSON yields an empty graph with one positioned diagnostic.
    Never raises.

    Args:
        text: JSON source

    Returns:
        Parsed SchemaGraph
    """
    builder = GraphBuilder(text)
    try:
        schema = json.loads(text)
    except json.JSONDecodeError as e:
        builder.diagnostic(f"JSON parse error: {e.msg}", start=e.pos)
        return builder.graph
    except (ValueError, RecursionError) as e:
        builder.diagnostic(f"JSON parse error: {e}")
        return builder.graph

    try:
        AvroJsonParser(schema, builder).parse()
    except Exception as e:
        logger.debug("JSON walker failed", exc_info=True)
        builder.diagnostic(f"Schema walk error: {e}")
    return builder.graph
