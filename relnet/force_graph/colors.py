from __future__ import annotations
from typing import Dict, List, Sequence

from ..graph import GraphEdge, GraphNode

CENTER_NODE_COLOR = "#3B82F6"
UNGROUPED_NODE_COLOR = "#9CA3AF"
EDGE_FALLBACK_COLOR = "#999"
EDGE_LABEL_FALLBACK_COLOR = "#666"
NODE_STROKE_COLOR = "#fff"

# edge stroke opacity per highlight state; arrow markers are pre-built for each
OPACITY_LEVELS: Dict[str, float] = {
    "dim": 0.05,
    "normal": 0.15,
    "highlight": 0.8,
}


def node_fill(node: GraphNode) -> str:
    if node.is_center:
        return CENTER_NODE_COLOR
    if node.colors:
        return node.colors[0]
    return UNGROUPED_NODE_COLOR


def edge_stroke(edge: GraphEdge) -> str:
    return edge.color or EDGE_FALLBACK_COLOR


def edge_label_fill(edge: GraphEdge) -> str:
    return edge.color or EDGE_LABEL_FALLBACK_COLOR


def marker_id(color: str, level: str) -> str:
    return f"arrow-{color.replace('#', '')}-{level}"


def build_markers(edges: Sequence[GraphEdge]) -> List[dict]:
    """One arrowhead definition per distinct edge color and opacity level."""
    colors: List[str] = []
    for e in edges:
        c = edge_stroke(e)
        if c not in colors:
            colors.append(c)
    return [
        {"id": marker_id(c, level), "fill": c, "fill_opacity": opacity}
        for c in colors
        for level, opacity in OPACITY_LEVELS.items()
    ]
