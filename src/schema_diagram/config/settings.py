"""Settings for layout input and text editing."""

from typing import Any

from pydantic import BaseModel, Field


def _default_layout_options() -> dict[str, str]:
    return {
        "elk.algorithm": "layered",
        "elk.direction": "RIGHT",
        "elk.spacing.nodeNode": "60",
        "elk.layered.spacing.nodeNodeBetweenLayers": "80",
        "elk.spacing.edgeNode": "30",
        "elk.spacing.edgeEdge": "20",
        "elk.layered.mergeEdges": "true",
        "elk.edgeRouting": "ORTHOGONAL",
        "elk.layered.considerModelOrder.strategy": "NODES_AND_EDGES",
    }


class LayoutSettings(BaseModel):
    """Node sizing and options handed to the layout engine."""

    node_width: int = Field(default=280, ge=1, description="Width of every node")
    header_height: int = Field(default=34, ge=0, description="Height of a node header")
    field_height: int = Field(default=28, ge=0, description="Height of one record field row")
    symbol_height: int = Field(default=21, ge=0, description="Height of one enum symbol row")
    record_padding: int = Field(default=8, ge=0, description="Extra height below record fields")
    enum_padding: int = Field(default=12, ge=0, description="Extra height below enum symbols")
    max_visible_symbols: int = Field(default=8, ge=1, description="Enum symbols shown before truncation")
    collapsed_padding: int = Field(default=2, ge=0, description="Extra height of a collapsed node")
    port_size: int = Field(default=8, ge=1, description="Width and height of a port")
    layout_options: dict[str, str] = Field(
        default_factory=_default_layout_options,
        description="Options passed to the layout engine as-is",
    )


class EditorSettings(BaseModel):
    """Text editing preferences."""

    json_indent: int = Field(default=2, ge=0, description="Indent used when re-serializing JSON")
    indent_unit: str = Field(default="  ", description="Indent for the first member of an empty IDL body")
    default_field_type: str = Field(default="string", description="Type of fields added without one")


class DiagramSettings(BaseModel):
    """Top-level settings."""

    layout: LayoutSettings = Field(default_factory=LayoutSettings, description="Layout settings")
    editor: EditorSettings = Field(default_factory=EditorSettings, description="Editor settings")
    metadata: dict[str, Any] = Field(default_factory=dict, description="Free-form metadata")
