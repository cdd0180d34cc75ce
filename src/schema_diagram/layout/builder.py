"""Translation between the schema graph and the layout engine.

The engine itself is external. It receives nodes with per-field ports and
port-to-port edges, and returns coordinates per node id.
"""

import logging
from typing import Iterable, Mapping, Protocol

from schema_diagram.config.settings import LayoutSettings
from schema_diagram.graph.models import EntityKind, Relationship, SchemaEntity, SchemaGraph
from schema_diagram.layout.models import (
    DiagramEdge,
    DiagramNode,
    LayoutEdge,
    LayoutGraph,
    LayoutNode,
    LayoutPort,
    PortSide,
    Position,
)

logger = logging.getLogger(__name__)


class LayoutEngine(Protocol):
    """Anything that can place the nodes of a LayoutGraph."""

    def layout(self, layout_graph: LayoutGraph) -> Mapping[str, Position]:
        ...


def node_source_port(entity_id: str) -> str:
    return f"{entity_id}-source"


def node_target_port(entity_id: str) -> str:
    return f"{entity_id}-target"


def field_source_port(entity_id: str, field_name: str) -> str:
    return f"{entity_id}.{field_name}-source"


def field_target_port(entity_id: str, field_name: str) -> str:
    return f"{entity_id}.{field_name}-target"


def node_height(entity: SchemaEntity, collapsed: bool, settings: LayoutSettings) -> int:
    """Height of an entity's node.

    Enums show at most max_visible_symbols rows. Fixed types are sized like
    a one-symbol enum.
    """
    header = settings.header_height
    if collapsed:
        return header + settings.collapsed_padding
    if entity.kind == EntityKind.RECORD and entity.fields is not None:
        return header + len(entity.fields) * settings.field_height + settings.record_padding
    if entity.kind == EntityKind.ENUM and entity.symbols is not None:
        visible = min(len(entity.symbols), settings.max_visible_symbols)
        return header + visible * settings.symbol_height + settings.enum_padding
    if entity.kind == EntityKind.FIXED:
        return header + settings.symbol_height + settings.enum_padding
    return header + settings.collapsed_padding


def build_ports(entity: SchemaEntity, collapsed: bool, settings: LayoutSettings) -> list[LayoutPort]:
    """Whole-node ports, then a source/target pair per field of an expanded record."""
    size = settings.port_size
    ports = [
        LayoutPort(id=node_target_port(entity.id), side=PortSide.WEST, width=size, height=size),
        LayoutPort(id=node_source_port(entity.id), side=PortSide.EAST, width=size, height=size),
    ]
    if entity.kind == EntityKind.RECORD and entity.fields and not collapsed:
        for field in entity.fields:
            ports.append(LayoutPort(
                id=field_source_port(entity.id, field.name), side=PortSide.EAST, width=size, height=size,
            ))
            ports.append(LayoutPort(
                id=field_target_port(entity.id, field.name), side=PortSide.WEST, width=size, height=size,
            ))
    return ports


def _has_field_port(entity: SchemaEntity, field_name: str | None, collapsed: Iterable[str]) -> bool:
    return (
        field_name is not None
        and entity.id not in collapsed
        and entity.kind == EntityKind.RECORD
        and entity.get_field(field_name) is not None
    )


def edge_ports(
    graph: SchemaGraph,
    relationship: Relationship,
    collapsed: Iterable[str] = (),
) -> tuple[str, str] | None:
    """Source and target port ids for a relationship.

    Field ports are used when the field exists on an expanded node, whole-node
    ports otherwise. Returns None when either endpoint is not in the graph.
    """
    collapsed = set(collapsed)
    source = graph.get_entity(relationship.source_schema)
    target = graph.get_entity(relationship.target_schema)
    if source is None or target is None:
        return None

    if _has_field_port(source, relationship.source_field, collapsed):
        source_port = field_source_port(source.id, relationship.source_field)
    else:
        source_port = node_source_port(source.id)

    if _has_field_port(target, relationship.target_field, collapsed):
        target_port = field_target_port(target.id, relationship.target_field)
    else:
        target_port = node_target_port(target.id)

    return source_port, target_port


def build_layout_graph(
    graph: SchemaGraph,
    collapsed: Iterable[str] = (),
    settings: LayoutSettings | None = None,
) -> LayoutGraph:
    """Build the layout engine input for a graph.

    Args:
        graph: Parsed schema graph
        collapsed: Ids of entities shown as header only
        settings: Node sizing and engine options

    Returns:
        LayoutGraph with one node per entity and one edge per relationship
        whose endpoints both exist
    """
    settings = settings or LayoutSettings()
    collapsed = set(collapsed)

    nodes = [
        LayoutNode(
            id=entity.id,
            width=settings.node_width,
            height=node_height(entity, entity.id in collapsed, settings),
            collapsed=entity.id in collapsed,
            ports=build_ports(entity, entity.id in collapsed, settings),
        )
        for entity in graph.entities
    ]

    edges = []
    for relationship in graph.relationships:
        ports = edge_ports(graph, relationship, collapsed)
        if ports is None:
            logger.debug("skipping dangling relationship %s", relationship.id)
            continue
        edges.append(LayoutEdge(id=relationship.id, source=ports[0], target=ports[1]))

    return LayoutGraph(layout_options=dict(settings.layout_options), nodes=nodes, edges=edges)


def position_nodes(
    graph: SchemaGraph,
    positions: Mapping[str, Position],
    collapsed: Iterable[str] = (),
) -> list[DiagramNode]:
    """Attach engine coordinates to every entity; unplaced nodes sit at the origin."""
    collapsed = set(collapsed)
    return [
        DiagramNode(
            id=entity.id,
            # fixed types share the enum styling
            type="enum" if entity.kind in (EntityKind.ENUM, EntityKind.FIXED) else "schemaEntity",
            position=positions.get(entity.id) or Position(),
            collapsed=entity.id in collapsed,
        )
        for entity in graph.entities
    ]


def diagram_edges(graph: SchemaGraph, collapsed: Iterable[str] = ()) -> list[DiagramEdge]:
    collapsed = set(collapsed)
    edges = []
    for relationship in graph.relationships:
        ports = edge_ports(graph, relationship, collapsed)
        if ports is None:
            continue
        edges.append(DiagramEdge(
            id=relationship.id,
            source=relationship.source_schema,
            source_handle=ports[0],
            target=relationship.target_schema,
            target_handle=ports[1],
        ))
    return edges


def layout_diagram(
    graph: SchemaGraph,
    engine: LayoutEngine,
    collapsed: Iterable[str] = (),
    settings: LayoutSettings | None = None,
) -> tuple[list[DiagramNode], list[DiagramEdge]]:
    """Run an engine over the graph and return renderer-ready nodes and edges."""
    collapsed = set(collapsed)
    positions = engine.layout(build_layout_graph(graph, collapsed, settings))
    return position_nodes(graph, positions, collapsed), diagram_edges(graph, collapsed)
