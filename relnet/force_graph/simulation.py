from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from ..graph import GraphNode

INITIAL_RADIUS = 10.0
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))


@dataclass
class SimNode:
    """Mutable physics state wrapped around an assembler node."""
    node: GraphNode
    index: int
    x: float = math.nan
    y: float = math.nan
    vx: float = 0.0
    vy: float = 0.0
    fx: Optional[float] = None
    fy: Optional[float] = None

    @property
    def id(self) -> str:
        return self.node.id


class Simulation:
    """
    Velocity-Verlet style force simulation with an alpha cooling schedule.

    Forces are callables taking alpha; each is given the node arena once via
    initialize(simulation) when registered. A host loop calls step() on every
    timer frame; run() drives it synchronously until alpha falls below alpha_min.
    """

    def __init__(self, nodes: List[GraphNode], seed: int = 0):
        self.random = random.Random(seed)
        self.nodes: List[SimNode] = [SimNode(node=n, index=i) for i, n in enumerate(nodes)]
        self.by_id: Dict[str, SimNode] = {n.id: n for n in self.nodes}
        self.alpha = 1.0
        self.alpha_min = 0.001
        self.alpha_decay = 1 - self.alpha_min ** (1 / 300)
        self._alpha_target = 0.0
        self.velocity_decay = 0.4
        self.forces: Dict[str, object] = {}
        self.running = True
        self._listeners: Dict[str, List[Callable[["Simulation"], None]]] = {"tick": [], "end": []}
        self._initialize_nodes()

    def _initialize_nodes(self):
        for i, n in enumerate(self.nodes):
            if n.fx is not None:
                n.x = n.fx
            if n.fy is not None:
                n.y = n.fy
            if math.isnan(n.x) or math.isnan(n.y):
                radius = INITIAL_RADIUS * math.sqrt(0.5 + i)
                angle = i * INITIAL_ANGLE
                n.x = radius * math.cos(angle)
                n.y = radius * math.sin(angle)

    def jiggle(self) -> float:
        return (self.random.random() - 0.5) * 1e-6

    # ── configuration ──

    def force(self, name: str, force=None):
        """Register (or with force=None, look up) a named force."""
        if force is None:
            return self.forces.get(name)
        if hasattr(force, "initialize"):
            force.initialize(self)
        self.forces[name] = force
        return self

    def remove_force(self, name: str):
        self.forces.pop(name, None)
        return self

    def on(self, event: str, callback: Callable[["Simulation"], None]):
        self._listeners[event].append(callback)
        return self

    def alpha_target(self, value: float | None = None):
        if value is None:
            return self._alpha_target
        self._alpha_target = value
        return self

    def find(self, node_id: str) -> SimNode | None:
        return self.by_id.get(node_id)

    # ── lifecycle ──

    def restart(self):
        self.running = True
        return self

    def stop(self):
        self.running = False
        return self

    def tick(self, iterations: int = 1):
        """Advance the physics without notifying listeners."""
        for _ in range(iterations):
            self.alpha += (self._alpha_target - self.alpha) * self.alpha_decay
            for force in self.forces.values():
                force(self.alpha)
            for n in self.nodes:
                if n.fx is None:
                    n.vx *= 1 - self.velocity_decay
                    n.x += n.vx
                else:
                    n.x = n.fx
                    n.vx = 0.0
                if n.fy is None:
                    n.vy *= 1 - self.velocity_decay
                    n.y += n.vy
                else:
                    n.y = n.fy
                    n.vy = 0.0
        return self

    def step(self) -> bool:
        """One timer frame: tick once and notify. Returns False once settled or stopped."""
        if not self.running:
            return False
        self.tick()
        self._emit("tick")
        if self.alpha < self.alpha_min:
            self.running = False
            self._emit("end")
            return False
        return True

    def run(self, max_ticks: int = 10_000) -> int:
        """Step until the simulation settles. Returns the number of ticks taken."""
        ticks = 0
        while ticks < max_ticks and self.running:
            self.step()
            ticks += 1
        return ticks

    def _emit(self, event: str):
        for callback in list(self._listeners[event]):
            callback(self)
