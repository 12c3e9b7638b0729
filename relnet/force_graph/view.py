"""
Headless network view: fetches a graph payload, lays it out, and tracks the
interaction state a UI shell draws from (drag pins, zoom/pan, hover
highlighting, click navigation, new-node animation).

Everything runs on one event loop. The HTTP fetch in load() is the only
await; rendering, ticking and event handling are synchronous.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

import httpx

from ..graph import Graph, GraphEdge, GraphNode, is_user_node_id
from ..schemas import GraphOut, GraphViewOptions
from .colors import (
    NODE_STROKE_COLOR,
    OPACITY_LEVELS,
    build_markers,
    edge_label_fill,
    edge_stroke,
    marker_id,
    node_fill,
)
from .layout import (
    ZOOM_EXTENT,
    LayoutPreset,
    build_simulation,
    is_mobile_width,
    layout_preset,
)
from .simulation import Simulation

logger = logging.getLogger(__name__)

HOVER_MS = 200
NODE_GROW_MS = 300
EDGE_FADE_MS = 400
EDGE_FADE_DELAY_MS = 100
DRAG_ALPHA_TARGET = 0.3


def ease_cubic_in_out(t: float) -> float:
    t *= 2
    if t <= 1:
        return t * t * t / 2
    t -= 2
    return (t * t * t + 2) / 2


class Animated:
    """A scalar that can ease from its current value to a new one over time."""

    def __init__(self, value: float):
        self._from = value
        self._to = value
        self._begin = 0.0
        self._duration = 0.0

    def animate_to(self, value: float, now: float, duration_ms: float, delay_ms: float = 0.0):
        self._from = self.value(now)
        self._to = value
        self._begin = now + delay_ms / 1000.0
        self._duration = duration_ms / 1000.0

    def value(self, now: float) -> float:
        if self._duration <= 0 or now >= self._begin + self._duration:
            return self._to
        if now <= self._begin:
            return self._from
        t = (now - self._begin) / self._duration
        return self._from + (self._to - self._from) * ease_cubic_in_out(t)

    @property
    def target(self) -> float:
        return self._to


@dataclass(frozen=True)
class ZoomTransform:
    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def apply(self, px: float, py: float) -> Tuple[float, float]:
        return px * self.k + self.x, py * self.k + self.y

    def invert(self, px: float, py: float) -> Tuple[float, float]:
        return (px - self.x) / self.k, (py - self.y) / self.k

    def scale_by(self, factor: float, px: float, py: float,
                 extent: Tuple[float, float] = ZOOM_EXTENT) -> "ZoomTransform":
        """Zoom about the canvas point (px, py), keeping that point fixed."""
        k = min(max(self.k * factor, extent[0]), extent[1])
        lx, ly = self.invert(px, py)
        return ZoomTransform(k, px - lx * k, py - ly * k)

    def translate_by(self, dx: float, dy: float) -> "ZoomTransform":
        return ZoomTransform(self.k, self.x + dx, self.y + dy)


IDENTITY = ZoomTransform()


def graph_from_payload(data: dict) -> Graph:
    payload = GraphOut.model_validate(data)
    return Graph(
        nodes=[GraphNode(id=n.id, label=n.label, groups=list(n.groups),
                         colors=list(n.colors), is_center=n.is_center)
               for n in payload.nodes],
        edges=[GraphEdge(source=e.source, target=e.target, type=e.type, color=e.color)
               for e in payload.edges],
    )


class GraphView:
    def __init__(
        self,
        options: GraphViewOptions,
        client: Optional[httpx.AsyncClient] = None,
        navigate: Optional[Callable[[str], None]] = None,
        clock: Callable[[], float] = time.monotonic,
        seed: int = 0,
    ):
        self.options = options
        self.client = client
        self.navigate = navigate
        self.clock = clock
        self.seed = seed

        self.canvas: Optional[Tuple[float, float]] = None
        self.is_mobile = False
        self.clustering_enabled = options.enable_group_clustering
        self.selected_group_id: Optional[str] = None

        # survive re-renders
        self.saved_transform: Optional[ZoomTransform] = None
        self.previous_node_ids: Optional[set[str]] = None

        # per render pass
        self.graph = Graph()
        self.simulation: Optional[Simulation] = None
        self.preset: Optional[LayoutPreset] = None
        self.transform = IDENTITY
        self.cluster_centers: Dict[str, Tuple[float, float]] = {}
        self.new_node_ids: set[str] = set()
        self.hovered: Optional[str] = None
        self.edge_opacity: List[Animated] = []
        self.edge_label_opacity: List[Animated] = []
        self.edge_marker_level: List[str] = []
        self.node_radius: Dict[str, Animated] = {}
        self.node_label_opacity: Dict[str, Animated] = {}
        self.edge_geometry: List[dict] = []
        self.node_positions: Dict[str, Tuple[float, float]] = {}
        self.render_count = 0

        self._generation = 0
        self._active_drags = 0

    # ── canvas ──

    def mount(self, width: float, height: float, viewport_width: Optional[float] = None):
        self.canvas = (width, height)
        self.is_mobile = is_mobile_width(viewport_width if viewport_width is not None else width)

    def unmount(self):
        self._teardown()
        self.canvas = None

    async def resize(self, width: float, height: float, viewport_width: float):
        """Crossing the mobile breakpoint swaps presets and re-renders."""
        was_mobile = self.is_mobile
        self.canvas = (width, height)
        self.is_mobile = is_mobile_width(viewport_width)
        if self.is_mobile != was_mobile:
            await self.load()

    # ── data ──

    async def load(self) -> bool:
        """Fetch and render. A response that arrives after a newer load()
        started is dropped. Returns whether this response was rendered."""
        if self.client is None:
            raise RuntimeError("GraphView has no HTTP client to load from")
        self._generation += 1
        generation = self._generation
        params = {"groupId": self.selected_group_id} if self.selected_group_id else None
        response = await self.client.get(self.options.api_endpoint, params=params)
        response.raise_for_status()
        data = response.json()
        if generation != self._generation:
            logger.debug("Dropping stale graph response for %s", self.options.api_endpoint)
            return False
        self.render(data)
        return True

    async def refresh(self, refresh_key: Optional[int] = None):
        self.options.refresh_key = refresh_key if refresh_key is not None else (
            (self.options.refresh_key or 0) + 1)
        await self.load()

    async def select_group(self, group_id: Optional[str]):
        self.selected_group_id = group_id or None
        await self.load()

    async def toggle_clustering(self):
        self.clustering_enabled = not self.clustering_enabled
        await self.load()

    # ── render pass ──

    def _teardown(self):
        if self.simulation is not None:
            self.simulation.stop()
        self.simulation = None
        self.hovered = None
        self._active_drags = 0

    def render(self, data: dict) -> bool:
        """Replace the current render pass with one for data. No-op without a canvas."""
        if self.canvas is None:
            return False
        self._teardown()
        now = self.clock()
        width, height = self.canvas
        opts = self.options
        graph = graph_from_payload(data)
        self.graph = graph

        current_ids = {n.id for n in graph.nodes}
        if opts.animate_new_nodes and self.previous_node_ids is not None:
            self.new_node_ids = current_ids - self.previous_node_ids
        else:
            self.new_node_ids = set()
        self.previous_node_ids = current_ids

        preset = layout_preset(self.is_mobile, self.clustering_enabled,
                               opts.link_distance, opts.charge_strength)
        self.preset = preset
        self.simulation, self.cluster_centers = build_simulation(
            graph, width, height, preset,
            clustering=self.clustering_enabled,
            cluster_strength=opts.cluster_strength,
            seed=self.seed,
        )
        self.simulation.on("tick", self._on_tick)

        normal = OPACITY_LEVELS["normal"]
        self.edge_opacity = []
        self.edge_label_opacity = []
        self.edge_marker_level = []
        for e in graph.edges:
            opacity = Animated(normal)
            if opts.animate_new_nodes and e.target in self.new_node_ids:
                opacity = Animated(0.0)
                opacity.animate_to(normal, now, EDGE_FADE_MS, EDGE_FADE_DELAY_MS)
            self.edge_opacity.append(opacity)
            self.edge_label_opacity.append(Animated(0.0))
            self.edge_marker_level.append("normal")

        self.node_radius = {}
        self.node_label_opacity = {}
        for n in graph.nodes:
            radius = Animated(preset.radius(n))
            label = Animated(1.0)
            if n.id in self.new_node_ids:
                radius = Animated(0.0)
                radius.animate_to(preset.radius(n), now, NODE_GROW_MS)
                label = Animated(0.0)
                label.animate_to(1.0, now, NODE_GROW_MS)
            self.node_radius[n.id] = radius
            self.node_label_opacity[n.id] = label

        self.transform = self.saved_transform or IDENTITY
        self._on_tick(self.simulation)
        self.render_count += 1
        logger.debug("Rendered %d nodes, %d edges (new: %d)",
                     len(graph.nodes), len(graph.edges), len(self.new_node_ids))
        return True

    def _on_tick(self, sim: Simulation):
        self.node_positions = {n.id: (n.x, n.y) for n in sim.nodes}
        geometry = []
        for e in self.graph.edges:
            x1, y1 = self.node_positions[e.source]
            x2, y2 = self.node_positions[e.target]
            geometry.append({"x1": x1, "y1": y1, "x2": x2, "y2": y2,
                             "label_x": (x1 + x2) / 2, "label_y": (y1 + y2) / 2})
        self.edge_geometry = geometry

    def step(self) -> bool:
        """One animation frame for the host loop."""
        if self.simulation is None:
            return False
        return self.simulation.step()

    def settle(self) -> int:
        if self.simulation is None:
            return 0
        return self.simulation.run()

    # ── drag ──

    def _sim_node(self, node_id: str):
        if self.simulation is None:
            return None
        return self.simulation.find(node_id)

    def drag_start(self, node_id: str):
        n = self._sim_node(node_id)
        if n is None:
            return
        if self._active_drags == 0:
            self.simulation.alpha_target(DRAG_ALPHA_TARGET).restart()
        self._active_drags += 1
        n.fx = n.x
        n.fy = n.y

    def drag_move(self, node_id: str, px: float, py: float):
        """Pin the node under the pointer; (px, py) are canvas coordinates."""
        n = self._sim_node(node_id)
        if n is None:
            return
        n.fx, n.fy = self.transform.invert(px, py)

    def drag_end(self, node_id: str):
        n = self._sim_node(node_id)
        if n is None:
            return
        self._active_drags = max(self._active_drags - 1, 0)
        if self._active_drags == 0:
            self.simulation.alpha_target(0)
        n.fx = None
        n.fy = None

    # ── zoom / pan ──

    def set_transform(self, transform: ZoomTransform):
        k = min(max(transform.k, ZOOM_EXTENT[0]), ZOOM_EXTENT[1])
        self.transform = ZoomTransform(k, transform.x, transform.y)
        self.saved_transform = self.transform

    def zoom(self, factor: float, px: float, py: float):
        self.set_transform(self.transform.scale_by(factor, px, py))

    def pan(self, dx: float, dy: float):
        self.set_transform(self.transform.translate_by(dx, dy))

    # ── hover ──

    def hover(self, node_id: str):
        now = self.clock()
        self.hovered = node_id
        for i, e in enumerate(self.graph.edges):
            connected = node_id in (e.source, e.target)
            level = "highlight" if connected else "dim"
            self.edge_opacity[i].animate_to(OPACITY_LEVELS[level], now, HOVER_MS)
            self.edge_marker_level[i] = level
            self.edge_label_opacity[i].animate_to(1.0 if connected else 0.0, now, HOVER_MS)

    def unhover(self):
        now = self.clock()
        self.hovered = None
        for i in range(len(self.graph.edges)):
            self.edge_opacity[i].animate_to(OPACITY_LEVELS["normal"], now, HOVER_MS)
            self.edge_marker_level[i] = "normal"
            self.edge_label_opacity[i].animate_to(0.0, now, HOVER_MS)

    # ── click ──

    def _is_inert(self, node: GraphNode) -> bool:
        return self.options.center_node_non_clickable and node.is_center

    def click(self, node_id: str) -> Optional[str]:
        """Navigate to the node's page. Returns the path, or None when inert."""
        node = next((n for n in self.graph.nodes if n.id == node_id), None)
        if node is None or self._is_inert(node):
            return None
        path = "/dashboard" if is_user_node_id(node.id) else f"/people/{node.id}"
        if self.navigate is not None:
            self.navigate(path)
        return path

    # ── scene ──

    def group_filter(self) -> Optional[dict]:
        """Choices for the group filter, or None when no groups were configured."""
        if self.options.groups is None:
            return None
        choices = [{"id": "", "name": "All groups", "color": None}]
        choices += [g.model_dump() for g in self.options.groups]
        return {"selected": self.selected_group_id or "", "choices": choices}

    def snapshot(self, now: Optional[float] = None) -> dict:
        """Everything a renderer needs for one frame."""
        now = self.clock() if now is None else now
        width, height = self.canvas or (0, 0)
        preset = self.preset
        nodes = []
        for n in self.graph.nodes:
            x, y = self.node_positions.get(n.id, (0.0, 0.0))
            nodes.append({
                "id": n.id,
                "label": n.label,
                "x": x,
                "y": y,
                "r": self.node_radius[n.id].value(now),
                "fill": node_fill(n),
                "stroke": NODE_STROKE_COLOR,
                "is_center": n.is_center,
                "font_size": preset.font_size(n),
                "font_weight": "bold" if n.is_center else "normal",
                "label_dy": preset.label_dy(n),
                "label_opacity": self.node_label_opacity[n.id].value(now),
                "cursor": "default" if self._is_inert(n) else "pointer",
                "groups": list(n.groups),
            })
        edges = []
        for i, e in enumerate(self.graph.edges):
            stroke = edge_stroke(e)
            edge = {
                "source": e.source,
                "target": e.target,
                "stroke": stroke,
                "opacity": self.edge_opacity[i].value(now),
                "marker": marker_id(stroke, self.edge_marker_level[i]),
                "label": e.type.lower(),
                "label_fill": edge_label_fill(e),
                "label_opacity": self.edge_label_opacity[i].value(now),
                "font_size": preset.edge_font,
            }
            edge.update(self.edge_geometry[i])
            edges.append(edge)
        t = self.transform
        return {
            "width": width,
            "height": height,
            "transform": {"k": t.k, "x": t.x, "y": t.y},
            "clusters": {g: {"x": x, "y": y} for g, (x, y) in self.cluster_centers.items()},
            "clustering": self.clustering_enabled,
            "group_filter": self.group_filter(),
            "markers": build_markers(self.graph.edges),
            "nodes": nodes,
            "edges": edges,
        }
