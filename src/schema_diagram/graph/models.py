"""Unified graph model shared by both schema frontends.

Both the Avro JSON walker and the Avro IDL parser produce a SchemaGraph.
Layout and rendering consume it; edits never touch it, they go through the
source text and the graph is rebuilt by parsing again.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class SchemaFormat(str, Enum):
    """Concrete syntaxes the frontends understand."""

    AVRO_JSON = "avro-json"
    AVRO_IDL = "avro-idl"
    UNKNOWN = "unknown"


class EntityKind(str, Enum):
    """Kinds of named types."""

    RECORD = "record"
    ENUM = "enum"
    FIXED = "fixed"


class RelationshipKind(str, Enum):
    """Kinds of edges between entities."""

    REFERENCE = "reference"
    NESTED = "nested"
    JOIN = "join"


class Cardinality(str, Enum):
    """Relationship cardinalities."""

    ONE_TO_ONE = "1:1"
    ONE_TO_MANY = "1:N"
    MANY_TO_ONE = "N:1"
    MANY_TO_MANY = "N:M"


class Severity(str, Enum):
    """Diagnostic severities."""

    ERROR = "error"
    WARNING = "warning"


class Diagnostic(BaseModel):
    """A non-fatal problem found while parsing.

    Positions are 1-based and optional; structural failures such as an
    unrecognized format carry no position.
    """

    message: str = Field(..., description="Human-readable description")
    severity: Severity = Field(default=Severity.ERROR, description="Diagnostic severity")
    start_line: int | None = Field(default=None, description="Start line (1-based)")
    start_column: int | None = Field(default=None, description="Start column (1-based)")
    end_line: int | None = Field(default=None, description="End line (1-based)")
    end_column: int | None = Field(default=None, description="End column (1-based)")


class FieldType(BaseModel):
    """Resolved type of a field.

    A union of exactly null and one other type is never represented as a
    union: it collapses to the other type with is_nullable set and a display
    ending in '?'.
    """

    display: str = Field(..., description="Human-readable rendering of the type")
    is_reference: bool = Field(default=False, description="Whether the type names another entity")
    referenced_schema: str | None = Field(
        default=None,
        description="Id of the referenced entity (may not exist in the graph)",
    )
    is_array: bool = Field(default=False, description="Whether the type is an array")
    is_nullable: bool = Field(default=False, description="Whether null is accepted")
    is_union: bool = Field(default=False, description="Whether the type is a multi-branch union")
    union_types: "list[FieldType] | None" = Field(default=None, description="Union branches, in order")


class SchemaField(BaseModel):
    """A single field of a record."""

    name: str = Field(..., description="Field name")
    type: FieldType = Field(..., description="Resolved field type")
    doc: str | None = Field(default=None, description="Field documentation")
    default: Any | None = Field(default=None, description="Default value, as written")
    has_default: bool = Field(
        default=False,
        description="Whether a default is declared; tells an explicit null from none",
    )
    annotations: dict[str, Any] | None = Field(
        default=None,
        description="Non-standard keys kept for round-tripping",
    )


class SchemaEntity(BaseModel):
    """A named record, enum or fixed type."""

    id: str = Field(..., description="namespace.name, or name without a namespace")
    name: str = Field(..., description="Simple name")
    namespace: str | None = Field(default=None, description="Dotted namespace")
    kind: EntityKind = Field(..., description="Entity kind")
    doc: str | None = Field(default=None, description="Documentation")
    fields: list[SchemaField] | None = Field(default=None, description="Record fields, in order")
    symbols: list[str] | None = Field(default=None, description="Enum symbols, in order")
    size: int | None = Field(default=None, description="Fixed size in bytes")
    is_nested: bool = Field(default=False, description="Whether the type is declared inside another")
    parent_schema: str | None = Field(
        default=None,
        description="Id of the textually enclosing entity (lookup only)",
    )

    def get_field(self, name: str) -> SchemaField | None:
        """Get a field by name."""
        for field in self.fields or []:
            if field.name == name:
                return field
        return None

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields or []]


class Relationship(BaseModel):
    """A directed edge between two entities.

    The target need not be present in the same graph; forward and dangling
    references are legal.
    """

    id: str = Field(..., description="Relationship id, unique within a graph")
    source_schema: str = Field(..., description="Source entity id")
    source_field: str = Field(..., description="Source field (or nested entity name)")
    target_schema: str = Field(..., description="Target entity id")
    target_field: str | None = Field(default=None, description="Target field, for joins")
    kind: RelationshipKind = Field(..., description="Relationship kind")
    label: str | None = Field(default=None, description="Edge label")
    cardinality: Cardinality | None = Field(default=None, description="Cardinality")


class SchemaGraph(BaseModel):
    """Entities, relationships and diagnostics produced by one parse.

    Order is insertion order from the source.
    """

    entities: list[SchemaEntity] = Field(default_factory=list, description="Entities in source order")
    relationships: list[Relationship] = Field(default_factory=list, description="Relationships in source order")
    diagnostics: list[Diagnostic] = Field(default_factory=list, description="Parse diagnostics")

    @property
    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)

    def get_entity(self, entity_id: str) -> SchemaEntity | None:
        """Get an entity by its id."""
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        return None

    def find_entity(self, name: str) -> SchemaEntity | None:
        """Find an entity by id, falling back to its simple name."""
        entity = self.get_entity(name)
        if entity is not None:
            return entity
        for candidate in self.entities:
            if candidate.name == name:
                return candidate
        return None

    def relationships_from(self, entity_id: str) -> list[Relationship]:
        return [r for r in self.relationships if r.source_schema == entity_id]

    def entity_ids(self) -> set[str]:
        return {e.id for e in self.entities}


class ParseResult(BaseModel):
    """Graph plus the format it was parsed from."""

    graph: SchemaGraph = Field(..., description="Parsed graph")
    format: SchemaFormat = Field(..., description="Detected format")


FieldType.model_rebuild()
