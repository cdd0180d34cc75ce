"""Models exchanged with the layout engine and the renderer."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

PORT_SIDE_KEY = "org.eclipse.elk.port.side"
PORT_CONSTRAINTS_KEY = "org.eclipse.elk.portConstraints"


class PortSide(str, Enum):
    """Node side a port is pinned to."""

    WEST = "WEST"
    EAST = "EAST"


class LayoutPort(BaseModel):
    """An edge anchor on a node."""

    id: str = Field(..., description="Port id, e.g. 'com.acme.User.id-source'")
    side: PortSide = Field(..., description="Side of the node")
    width: int = Field(default=8, description="Port width")
    height: int = Field(default=8, description="Port height")

    def to_engine_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "properties": {PORT_SIDE_KEY: self.side.value},
            "width": self.width,
            "height": self.height,
        }


class LayoutNode(BaseModel):
    """One entity, sized for the layout engine."""

    id: str = Field(..., description="Entity id")
    width: int = Field(..., description="Node width")
    height: int = Field(..., description="Node height")
    collapsed: bool = Field(default=False, description="Whether only the header is shown")
    ports: list[LayoutPort] = Field(default_factory=list, description="Node and field ports")

    def to_engine_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "width": self.width,
            "height": self.height,
            "ports": [p.to_engine_dict() for p in self.ports],
            "properties": {PORT_CONSTRAINTS_KEY: "FIXED_ORDER"},
        }


class LayoutEdge(BaseModel):
    """One relationship as a port-to-port edge."""

    id: str = Field(..., description="Relationship id")
    source: str = Field(..., description="Source port id")
    target: str = Field(..., description="Target port id")

    def to_engine_dict(self) -> dict[str, Any]:
        return {"id": self.id, "sources": [self.source], "targets": [self.target]}


class LayoutGraph(BaseModel):
    """Everything the layout engine needs."""

    layout_options: dict[str, str] = Field(default_factory=dict, description="Engine options")
    nodes: list[LayoutNode] = Field(default_factory=list, description="Nodes in entity order")
    edges: list[LayoutEdge] = Field(default_factory=list, description="Edges in relationship order")

    def get_node(self, node_id: str) -> LayoutNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_engine_dict(self) -> dict[str, Any]:
        """Render the graph in the JSON shape ELK expects."""
        return {
            "id": "root",
            "layoutOptions": dict(self.layout_options),
            "children": [n.to_engine_dict() for n in self.nodes],
            "edges": [e.to_engine_dict() for e in self.edges],
        }


class Position(BaseModel):
    """Top-left corner of a laid-out node."""

    x: float = Field(default=0, description="Horizontal offset")
    y: float = Field(default=0, description="Vertical offset")


class DiagramNode(BaseModel):
    """A positioned node handed to the renderer."""

    id: str = Field(..., description="Entity id")
    type: str = Field(..., description="Renderer node type: 'schemaEntity' or 'enum'")
    position: Position = Field(default_factory=Position, description="Laid-out position")
    collapsed: bool = Field(default=False, description="Whether only the header is shown")


class DiagramEdge(BaseModel):
    """An edge handed to the renderer."""

    id: str = Field(..., description="Relationship id")
    source: str = Field(..., description="Source entity id")
    source_handle: str = Field(..., description="Source port id")
    target: str = Field(..., description="Target entity id")
    target_handle: str = Field(..., description="Target port id")
    type: str = Field(default="relationship", description="Renderer edge type")
