from __future__ import annotations
import math
from typing import Dict, List, Optional, Sequence, Tuple

from ..graph import GraphNode

CLUSTER_RADIUS_FACTOR = 0.35


def cluster_centers(
    nodes: Sequence[GraphNode],
    width: float,
    height: float,
) -> Dict[str, Tuple[float, float]]:
    """
    Place every group present on the nodes evenly on a circle of radius
    0.35 * min(width, height) around the canvas center. The first group
    sits straight up (-pi/2) and the rest follow clockwise in screen space.
    """
    group_ids: List[str] = []
    for n in nodes:
        for g in n.groups:
            if g and g not in group_ids:
                group_ids.append(g)
    if not group_ids:
        return {}

    radius = min(width, height) * CLUSTER_RADIUS_FACTOR
    cx, cy = width / 2.0, height / 2.0
    centers: Dict[str, Tuple[float, float]] = {}
    for i, gid in enumerate(group_ids):
        angle = 2.0 * math.pi * i / len(group_ids) - math.pi / 2.0
        centers[gid] = (cx + radius * math.cos(angle), cy + radius * math.sin(angle))
    return centers


def cluster_target(
    node: GraphNode,
    centers: Dict[str, Tuple[float, float]],
    enabled: bool = True,
) -> Optional[Tuple[float, float]]:
    """Primary-group cluster center, or None for the center node and group-less nodes."""
    if not enabled or node.is_center or not node.groups:
        return None
    return centers.get(node.groups[0])
