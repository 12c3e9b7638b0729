"""
Forces for Simulation. Each force is called once per tick with the current
alpha and adds to node velocities (Center moves positions directly).
"""
from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Sequence, Union

from ..graph import GraphEdge, GraphNode
from .simulation import SimNode, Simulation

Number = Union[float, int]
PerNode = Union[Number, Callable[[GraphNode], Number]]


def _per_node(value: PerNode, node: GraphNode) -> float:
    return float(value(node)) if callable(value) else float(value)


class ManyBody:
    """Pairwise charge between every two nodes; negative strength repels."""

    def __init__(self, strength: PerNode = -30.0, distance_min: float = 1.0):
        self.strength = strength
        self.distance_min2 = distance_min * distance_min
        self.sim: Optional[Simulation] = None
        self.strengths: List[float] = []

    def initialize(self, sim: Simulation):
        self.sim = sim
        self.strengths = [_per_node(self.strength, n.node) for n in sim.nodes]

    def __call__(self, alpha: float):
        nodes = self.sim.nodes
        for node in nodes:
            for other in nodes:
                if other is node:
                    continue
                x = other.x - node.x
                y = other.y - node.y
                l = x * x + y * y
                if x == 0:
                    x = self.sim.jiggle()
                    l += x * x
                if y == 0:
                    y = self.sim.jiggle()
                    l += y * y
                if l < self.distance_min2:
                    l = math.sqrt(self.distance_min2 * l)
                w = self.strengths[other.index] * alpha / l
                node.vx += x * w
                node.vy += y * w


class SimLink:
    """An edge with both endpoints resolved to simulation nodes."""

    def __init__(self, edge: GraphEdge, source: SimNode, target: SimNode):
        self.edge = edge
        self.source = source
        self.target = target


class Link:
    """Spring toward a target distance. Endpoints of well-connected nodes move less."""

    def __init__(self, edges: Sequence[GraphEdge], distance: float = 30.0,
                 strength: Optional[float] = None):
        self.edges = list(edges)
        self.distance = distance
        self.strength = strength
        self.links: List[SimLink] = []
        self.strengths: List[float] = []
        self.bias: List[float] = []
        self.sim: Optional[Simulation] = None

    def initialize(self, sim: Simulation):
        self.sim = sim
        self.links = []
        for edge in self.edges:
            source = sim.find(edge.source)
            target = sim.find(edge.target)
            if source is None or target is None:
                missing = edge.source if source is None else edge.target
                raise ValueError(f"node not found: {missing}")
            self.links.append(SimLink(edge, source, target))

        count: Dict[int, int] = {}
        for link in self.links:
            count[link.source.index] = count.get(link.source.index, 0) + 1
            count[link.target.index] = count.get(link.target.index, 0) + 1

        self.bias = []
        self.strengths = []
        for link in self.links:
            cs = count[link.source.index]
            ct = count[link.target.index]
            self.bias.append(cs / (cs + ct))
            if self.strength is None:
                self.strengths.append(1 / min(cs, ct))
            else:
                self.strengths.append(self.strength)

    def __call__(self, alpha: float):
        for i, link in enumerate(self.links):
            source, target = link.source, link.target
            x = target.x + target.vx - source.x - source.vx
            y = target.y + target.vy - source.y - source.vy
            if x == 0:
                x = self.sim.jiggle()
            if y == 0:
                y = self.sim.jiggle()
            l = math.sqrt(x * x + y * y)
            l = (l - self.distance) / l * alpha * self.strengths[i]
            x *= l
            y *= l
            b = self.bias[i]
            target.vx -= x * b
            target.vy -= y * b
            source.vx += x * (1 - b)
            source.vy += y * (1 - b)


class Center:
    """Translate the whole layout so its mean position sits on (x, y)."""

    def __init__(self, x: float = 0.0, y: float = 0.0, strength: float = 1.0):
        self.x = x
        self.y = y
        self.strength = strength
        self.sim: Optional[Simulation] = None

    def initialize(self, sim: Simulation):
        self.sim = sim

    def __call__(self, alpha: float):
        nodes = self.sim.nodes
        if not nodes:
            return
        sx = sum(n.x for n in nodes) / len(nodes) - self.x
        sy = sum(n.y for n in nodes) / len(nodes) - self.y
        for n in nodes:
            n.x -= sx * self.strength
            n.y -= sy * self.strength


class Collide:
    """Keep node centers at least radius_i + radius_j apart, judged on the
    positions the nodes are about to move to."""

    def __init__(self, radius: PerNode = 1.0, strength: float = 1.0, iterations: int = 1):
        self.radius = radius
        self.strength = strength
        self.iterations = iterations
        self.radii: List[float] = []
        self.sim: Optional[Simulation] = None

    def initialize(self, sim: Simulation):
        self.sim = sim
        self.radii = [_per_node(self.radius, n.node) for n in sim.nodes]

    def __call__(self, alpha: float):
        nodes = self.sim.nodes
        for _ in range(self.iterations):
            for node in nodes:
                ri = self.radii[node.index]
                ri2 = ri * ri
                xi = node.x + node.vx
                yi = node.y + node.vy
                for data in nodes[node.index + 1:]:
                    rj = self.radii[data.index]
                    r = ri + rj
                    x = xi - data.x - data.vx
                    y = yi - data.y - data.vy
                    l = x * x + y * y
                    if l >= r * r:
                        continue
                    if x == 0:
                        x = self.sim.jiggle()
                        l += x * x
                    if y == 0:
                        y = self.sim.jiggle()
                        l += y * y
                    l = math.sqrt(l)
                    l = (r - l) / l * self.strength
                    x *= l
                    y *= l
                    rj2 = rj * rj
                    share = rj2 / (ri2 + rj2)
                    node.vx += x * share
                    node.vy += y * share
                    data.vx -= x * (1 - share)
                    data.vy -= y * (1 - share)


class PositionX:
    """Pull each node's x toward a per-node target with a per-node strength."""

    axis = "x"

    def __init__(self, target: PerNode = 0.0, strength: PerNode = 0.1):
        self.target = target
        self.strength = strength
        self.targets: List[float] = []
        self.strengths: List[float] = []
        self.sim: Optional[Simulation] = None

    def initialize(self, sim: Simulation):
        self.sim = sim
        self.targets = [_per_node(self.target, n.node) for n in sim.nodes]
        self.strengths = [_per_node(self.strength, n.node) for n in sim.nodes]

    def __call__(self, alpha: float):
        for n in self.sim.nodes:
            k = self.strengths[n.index] * alpha
            if self.axis == "x":
                n.vx += (self.targets[n.index] - n.x) * k
            else:
                n.vy += (self.targets[n.index] - n.y) * k


class PositionY(PositionX):
    axis = "y"
