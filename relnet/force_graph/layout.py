from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Tuple

from ..graph import Graph, GraphNode
from .clusters import cluster_centers, cluster_target
from .forces import Center, Collide, Link, ManyBody, PositionX, PositionY
from .simulation import Simulation

MOBILE_BREAKPOINT = 768
DEFAULT_LINK_DISTANCE = 120.0
DEFAULT_CHARGE_STRENGTH = -400.0
DEFAULT_CLUSTER_STRENGTH = 0.3
MOBILE_LINK_DISTANCE = 80.0
MOBILE_CHARGE_STRENGTH = -250.0
CLUSTER_CHARGE_FACTOR = 1.5
ZOOM_EXTENT = (0.5, 3.0)


def is_mobile_width(viewport_width: float) -> bool:
    return viewport_width < MOBILE_BREAKPOINT


@dataclass(frozen=True)
class LayoutPreset:
    center_radius: float
    node_radius: float
    center_font: float
    node_font: float
    edge_font: float
    center_label_dy: float
    node_label_dy: float
    link_distance: float
    charge_strength: float
    collision_radius: float

    def radius(self, node: GraphNode) -> float:
        return self.center_radius if node.is_center else self.node_radius

    def font_size(self, node: GraphNode) -> float:
        return self.center_font if node.is_center else self.node_font

    def label_dy(self, node: GraphNode) -> float:
        return self.center_label_dy if node.is_center else self.node_label_dy


def layout_preset(
    is_mobile: bool,
    clustering: bool,
    link_distance: float = DEFAULT_LINK_DISTANCE,
    charge_strength: float = DEFAULT_CHARGE_STRENGTH,
) -> LayoutPreset:
    """Sizes and force tuning for one render pass. Mobile overrides the
    configured link distance and charge."""
    charge = MOBILE_CHARGE_STRENGTH if is_mobile else charge_strength
    if clustering:
        charge *= CLUSTER_CHARGE_FACTOR
        collision = 40.0 if is_mobile else 50.0
    else:
        collision = 25.0 if is_mobile else 30.0
    if is_mobile:
        return LayoutPreset(
            center_radius=10, node_radius=7,
            center_font=12, node_font=10, edge_font=9,
            center_label_dy=22, node_label_dy=18,
            link_distance=MOBILE_LINK_DISTANCE,
            charge_strength=charge,
            collision_radius=collision,
        )
    return LayoutPreset(
        center_radius=12, node_radius=8,
        center_font=14, node_font=12, edge_font=10,
        center_label_dy=25, node_label_dy=20,
        link_distance=link_distance,
        charge_strength=charge,
        collision_radius=collision,
    )


def build_simulation(
    graph: Graph,
    width: float,
    height: float,
    preset: LayoutPreset,
    clustering: bool = False,
    cluster_strength: float = DEFAULT_CLUSTER_STRENGTH,
    seed: int = 0,
) -> Tuple[Simulation, Dict[str, Tuple[float, float]]]:
    """
    Wire link, charge, center and collision forces, plus clusterX/clusterY
    when clustering. Returns the simulation and the cluster centers used.
    """
    sim = Simulation(graph.nodes, seed=seed)
    cx, cy = width / 2.0, height / 2.0

    sim.force("link", Link(graph.edges, distance=preset.link_distance))
    sim.force("charge", ManyBody(strength=preset.charge_strength))
    sim.force("center", Center(cx, cy))
    sim.force("collision", Collide(radius=preset.collision_radius))

    centers = cluster_centers(graph.nodes, width, height) if clustering else {}
    if clustering:
        def target(node: GraphNode):
            return cluster_target(node, centers, enabled=True)

        def strength(node: GraphNode) -> float:
            return cluster_strength if target(node) else 0.0

        sim.force("clusterX", PositionX(
            target=lambda n: (target(n) or (cx, cy))[0], strength=strength))
        sim.force("clusterY", PositionY(
            target=lambda n: (target(n) or (cx, cy))[1], strength=strength))
    return sim, centers

