"""Graph accumulation shared by the schema frontends."""

import logging
from typing import Any

from schema_diagram.graph.models import (
    Cardinality,
    Diagnostic,
    Relationship,
    RelationshipKind,
    SchemaEntity,
    SchemaGraph,
    Severity,
)
from schema_diagram.parsers.types import ReferenceEdge
from schema_diagram.utils.helpers import line_starts, pos_to_line_col, resolve_reference

logger = logging.getLogger(__name__)


class GraphBuilder:
    """Collects entities, relationships and diagnostics for one parse.

    Entity ids are unique: the first registration of an id wins. Relationship
    ids are unique too; a repeated id is dropped.
    """

    def __init__(self, source: str = ""):
        self.source = source
        self.graph = SchemaGraph()
        self._entities: dict[str, SchemaEntity] = {}
        self._relationship_ids: set[str] = set()
        self._line_starts: list[int] | None = None

    @property
    def known_ids(self) -> dict[str, SchemaEntity]:
        return self._entities

    def has_entity(self, entity_id: str) -> bool:
        return entity_id in self._entities

    def register(self, entity: SchemaEntity) -> bool:
        """Add an entity unless its id is already taken.

        Returns:
            True if the entity was added
        """
        if entity.id in self._entities:
            return False
        self._entities[entity.id] = entity
        self.graph.entities.append(entity)
        return True

    def add_relationship(self, relationship: Relationship) -> None:
        if relationship.id in self._relationship_ids:
            return
        self._relationship_ids.add(relationship.id)
        self.graph.relationships.append(relationship)

    def add_reference(self, source_id: str, field_name: str, edge: ReferenceEdge) -> None:
        self.add_relationship(Relationship(
            id=f"ref-{source_id}.{field_name}-{edge.target}",
            source_schema=source_id,
            source_field=field_name,
            target_schema=edge.target,
            kind=RelationshipKind.REFERENCE,
            cardinality=edge.cardinality,
        ))

    def add_nested(self, parent_id: str, source_field: str, child_id: str) -> None:
        self.add_relationship(Relationship(
            id=f"nested-{parent_id}-{child_id}",
            source_schema=parent_id,
            source_field=source_field,
            target_schema=child_id,
            kind=RelationshipKind.NESTED,
            label="contains",
        ))

    def add_join(
        self,
        source_id: str,
        field_name: str,
        target_schema: str,
        target_field: str | None = None,
        cardinality: Cardinality | None = None,
    ) -> None:
        self.add_relationship(Relationship(
            id=f"join-{source_id}.{field_name}-{target_schema}",
            source_schema=source_id,
            source_field=field_name,
            target_schema=target_schema,
            target_field=target_field,
            kind=RelationshipKind.JOIN,
            label=f"{field_name} → {target_field}" if target_field else None,
            cardinality=cardinality,
        ))

    def add_join_spec(
        self,
        source_id: str,
        field_name: str,
        spec: dict[str, Any],
        namespace: str | None,
    ) -> None:
        """Add a join from an author-declared {schema, field, cardinality} object.

        The join is independent of any reference the field type draws.
        """
        target = spec.get("schema")
        if not isinstance(target, str) or not target:
            self.diagnostic(f"Join on field '{field_name}' has no target schema", Severity.WARNING)
            return

        target_field = spec.get("field")
        raw_cardinality = spec.get("cardinality")
        cardinality = parse_cardinality(raw_cardinality)
        if raw_cardinality is not None and cardinality is None:
            self.diagnostic(
                f"Unknown join cardinality '{raw_cardinality}' on field '{field_name}'",
                Severity.WARNING,
            )

        self.add_join(
            source_id,
            field_name,
            resolve_reference(target, namespace, self._entities),
            target_field if isinstance(target_field, str) else None,
            cardinality,
        )

    def diagnostic(
        self,
        message: str,
        severity: Severity = Severity.ERROR,
        start: int | None = None,
        end: int | None = None,
    ) -> None:
        """Record a diagnostic, converting offsets into line/column pairs."""
        position: dict[str, int] = {}
        if start is not None:
            if self._line_starts is None:
                self._line_starts = line_starts(self.source)
            start_line, start_column = pos_to_line_col(self.source, start, self._line_starts)
            end_line, end_column = pos_to_line_col(
                self.source, end if end is not None else start, self._line_starts,
            )
            position = {
                "start_line": start_line,
                "start_column": start_column,
                "end_line": end_line,
                "end_column": end_column,
            }
        logger.debug("%s: %s", severity.value, message)
        self.graph.diagnostics.append(Diagnostic(message=message, severity=severity, **position))


def parse_cardinality(value: object) -> Cardinality | None:
    """Coerce a cardinality string, returning None when it is not valid."""
    if not isinstance(value, str):
        return None
    try:
        return Cardinality(value)
    except ValueError:
        return None
