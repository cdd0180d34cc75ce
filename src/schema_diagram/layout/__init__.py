"""Layout engine contract: graph in, node coordinates out."""

from schema_diagram.layout.builder import (
    LayoutEngine,
    build_layout_graph,
    diagram_edges,
    edge_ports,
    layout_diagram,
    node_height,
    position_nodes,
)
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

__all__ = [
    "DiagramEdge",
    "DiagramNode",
    "LayoutEdge",
    "LayoutEngine",
    "LayoutGraph",
    "LayoutNode",
    "LayoutPort",
    "PortSide",
    "Position",
    "build_layout_graph",
    "diagram_edges",
    "edge_ports",
    "layout_diagram",
    "node_height",
    "position_nodes",
]
