from __future__ import annotations

import json
from typing import Dict, List

from plotly import graph_objects as go


def _edge_traces(edges: List[dict]) -> List[go.Scatter]:
    """One line trace per edge color so each relationship type keeps its color."""
    by_color: Dict[str, Dict[str, list]] = {}
    for e in edges:
        bucket = by_color.setdefault(e["stroke"], {"x": [], "y": [], "opacity": e["opacity"]})
        bucket["x"] += [e["x1"], e["x2"], None]
        bucket["y"] += [e["y1"], e["y2"], None]

    traces = []
    for color, bucket in by_color.items():
        traces.append(go.Scatter(
            x=bucket["x"],
            y=bucket["y"],
            mode="lines",
            line=dict(width=2, color=color),
            opacity=max(bucket["opacity"], 0.15),
            hoverinfo="none",
        ))
    return traces


def _edge_label_trace(edges: List[dict]) -> go.Scatter:
    return go.Scatter(
        x=[e["label_x"] for e in edges],
        y=[e["label_y"] for e in edges],
        mode="markers",
        marker=dict(size=6, opacity=0),
        hoverinfo="text",
        hovertext=[f"{e['source']} → {e['target']}: {e['label']}" for e in edges],
    )


def build_figure(scene: dict) -> go.Figure:
    nodes = scene["nodes"]
    edges = scene["edges"]

    if not nodes:
        fig = go.Figure()
        fig.update_layout(title="No relationships to show")
        return fig

    node_trace = go.Scatter(
        x=[n["x"] for n in nodes],
        y=[n["y"] for n in nodes],
        mode="markers+text",
        text=[n["label"] for n in nodes],
        textposition="bottom center",
        hoverinfo="text",
        hovertext=[
            n["label"] + (f"<br>{', '.join(n['groups'])}" if n["groups"] else "")
            for n in nodes
        ],
        customdata=[n["id"] for n in nodes],
        marker=dict(
            size=[2 * n["r"] for n in nodes],
            color=[n["fill"] for n in nodes],
            line=dict(width=2, color=nodes[0]["stroke"]),
        ),
        textfont=dict(size=[n["font_size"] for n in nodes]),
    )

    data = _edge_traces(edges)
    if edges:
        data.append(_edge_label_trace(edges))
    data.append(node_trace)

    xs = [n["x"] for n in nodes]
    ys = [n["y"] for n in nodes]
    x_min, x_max = min(xs), max(xs)
    y_min, y_max = min(ys), max(ys)
    pad_x = 0.15 * (x_max - x_min if x_max > x_min else 1)
    pad_y = 0.15 * (y_max - y_min if y_max > y_min else 1)

    fig = go.Figure(data=data)
    fig.update_layout(
        showlegend=False,
        hovermode="closest",
        dragmode="pan",
        autosize=True,
        margin=dict(l=0, r=0, t=0, b=0),
        plot_bgcolor="white",
        paper_bgcolor="white",
        xaxis=dict(
            showgrid=False,
            zeroline=False,
            showticklabels=False,
            range=[x_min - pad_x, x_max + pad_x],
            scaleanchor="y",
            scaleratio=1,
        ),
        # screen coordinates grow downward
        yaxis=dict(
            showgrid=False,
            zeroline=False,
            showticklabels=False,
            range=[y_max + pad_y, y_min - pad_y],
        ),
    )
    return fig


def figure_json(scene: dict) -> dict:
    return json.loads(build_figure(scene).to_json())
