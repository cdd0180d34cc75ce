"""Type expressions shared by the JSON and IDL frontends.

Each frontend decodes its own syntax into these nodes once; resolve_type
turns a node into a FieldType plus the reference edge the field should
draw, so both frontends normalize unions and pick edges the same way.
"""

from dataclasses import dataclass, field

from schema_diagram.graph.models import Cardinality, FieldType

PRIMITIVE_TYPES = frozenset({
    "null", "boolean", "int", "long", "float", "double", "bytes", "string",
})

# IDL logical-type keywords that behave like primitives
LOGICAL_PRIMITIVES = frozenset({
    "date", "time_ms", "timestamp_ms", "local_timestamp_ms", "decimal", "uuid",
})


@dataclass(frozen=True)
class PrimitiveType:
    name: str
    display: str | None = None

    @property
    def is_null(self) -> bool:
        return self.name == "null"


@dataclass(frozen=True)
class NamedType:
    """Reference to a named entity by id."""

    target: str
    display: str


@dataclass(frozen=True)
class ArrayType:
    items: "TypeNode"


@dataclass(frozen=True)
class MapType:
    values: "TypeNode"


@dataclass(frozen=True)
class UnionType:
    members: tuple["TypeNode", ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class InlineType:
    """A record, enum or fixed declared inside a field type.

    Its nested relationship is emitted when the entity is registered, so it
    never draws a reference edge of its own.
    """

    target: str
    display: str


@dataclass(frozen=True)
class UnknownType:
    display: str


TypeNode = PrimitiveType | NamedType | ArrayType | MapType | UnionType | InlineType | UnknownType


def nullable(node: TypeNode) -> UnionType:
    """The IDL 'T?' shorthand: union { null, T }."""
    return UnionType((PrimitiveType("null"), node))


@dataclass(frozen=True)
class ReferenceEdge:
    """Reference edge a field draws towards another entity."""

    target: str
    cardinality: Cardinality = Cardinality.ONE_TO_ONE


@dataclass(frozen=True)
class ResolvedType:
    field_type: FieldType
    edge: ReferenceEdge | None = None


def _is_null(node: TypeNode) -> bool:
    return isinstance(node, PrimitiveType) and node.is_null


def resolve_type(node: TypeNode) -> ResolvedType:
    """Resolve a type node into a FieldType and its reference edge.

    Args:
        node: Decoded type expression

    Returns:
        ResolvedType with the field type and the edge to draw, if any
    """
    if isinstance(node, PrimitiveType):
        return ResolvedType(FieldType(
            display=node.display or node.name,
            is_nullable=node.is_null,
        ))

    if isinstance(node, NamedType):
        return ResolvedType(
            FieldType(display=node.display, is_reference=True, referenced_schema=node.target),
            ReferenceEdge(node.target),
        )

    if isinstance(node, InlineType):
        return ResolvedType(FieldType(
            display=node.display,
            is_reference=True,
            referenced_schema=node.target,
        ))

    if isinstance(node, ArrayType):
        item = resolve_type(node.items)
        edge = None
        if item.edge is not None:
            edge = ReferenceEdge(item.edge.target, Cardinality.ONE_TO_MANY)
        return ResolvedType(
            FieldType(
                display=f"{item.field_type.display}[]",
                is_reference=item.field_type.is_reference,
                referenced_schema=item.field_type.referenced_schema,
                is_array=True,
            ),
            edge,
        )

    if isinstance(node, MapType):
        # map values never draw an edge
        value = resolve_type(node.values)
        return ResolvedType(FieldType(
            display=f"map<{value.field_type.display}>",
            is_reference=value.field_type.is_reference,
            referenced_schema=value.field_type.referenced_schema,
        ))

    if isinstance(node, UnionType):
        return _resolve_union(node)

    return ResolvedType(FieldType(display=node.display))


def _resolve_union(node: UnionType) -> ResolvedType:
    members = [(m, resolve_type(m)) for m in node.members]
    has_null = any(_is_null(m) for m, _ in members)
    non_null = [r for m, r in members if not _is_null(m)]

    if has_null and len(non_null) == 1:
        inner = non_null[0]
        display = inner.field_type.display
        if not display.endswith("?"):
            display = f"{display}?"
        return ResolvedType(
            FieldType(
                display=display,
                is_reference=inner.field_type.is_reference,
                referenced_schema=inner.field_type.referenced_schema,
                is_array=inner.field_type.is_array,
                is_nullable=True,
            ),
            inner.edge,
        )

    ref_member = next((r for r in non_null if r.field_type.is_reference), None)
    return ResolvedType(
        FieldType(
            display=" | ".join(r.field_type.display for _, r in members),
            is_reference=ref_member is not None,
            referenced_schema=ref_member.field_type.referenced_schema if ref_member else None,
            is_nullable=has_null,
            is_union=True,
            union_types=[r.field_type for _, r in members],
        ),
        ref_member.edge if ref_member else None,
    )
