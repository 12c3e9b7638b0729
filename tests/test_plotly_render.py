"""Tests for relnet/force_graph/plotly_render.py."""
from relnet.force_graph.plotly_render import build_figure, figure_json
from relnet.force_graph.view import GraphView
from relnet.schemas import GraphViewOptions


def _scene(payload, clustering=True):
    view = GraphView(GraphViewOptions(api_endpoint="/api/dashboard/graph",
                                      enable_group_clustering=clustering))
    view.mount(800, 600)
    view.render(payload)
    view.settle()
    return view.snapshot()


PAYLOAD = {
    "nodes": [
        {"id": "user-u1", "label": "You", "groups": [], "colors": [], "isCenter": True},
        {"id": "a", "label": "Ann", "groups": ["Work"], "colors": ["#F97316"], "isCenter": False},
        {"id": "b", "label": "Ben", "groups": [], "colors": [], "isCenter": False},
    ],
    "edges": [
        {"source": "a", "target": "user-u1", "type": "Friend", "color": "#3B82F6"},
        {"source": "b", "target": "user-u1", "type": "Friend", "color": "#3B82F6"},
        {"source": "a", "target": "b", "type": "Colleague", "color": "#10B981"},
    ],
}


def test_traces_per_edge_color():
    fig = build_figure(_scene(PAYLOAD))
    line_traces = [t for t in fig.data if t.mode == "lines"]
    assert sorted(t.line.color for t in line_traces) == ["#10B981", "#3B82F6"]
    # edge label hover trace, then nodes last
    assert fig.data[-2].mode == "markers"
    assert len(fig.data[-2].hovertext) == 3


def test_node_trace():
    fig = build_figure(_scene(PAYLOAD))
    nodes = fig.data[-1]
    assert list(nodes.text) == ["You", "Ann", "Ben"]
    assert list(nodes.marker.color) == ["#3B82F6", "#F97316", "#9CA3AF"]
    assert list(nodes.customdata) == ["user-u1", "a", "b"]
    assert list(nodes.marker.size) == [24, 16, 16]


def test_y_axis_reversed():
    fig = build_figure(_scene(PAYLOAD))
    low, high = fig.layout.yaxis.range
    assert low > high


def test_empty_scene():
    fig = build_figure(_scene({"nodes": [], "edges": []}))
    assert len(fig.data) == 0
    assert fig.layout.title.text == "No relationships to show"


def test_single_node_without_edges():
    payload = {"nodes": PAYLOAD["nodes"][:1], "edges": []}
    fig = build_figure(_scene(payload))
    assert len(fig.data) == 1
    x_low, x_high = fig.layout.xaxis.range
    assert x_low < x_high


def test_figure_json_is_plain_data():
    data = figure_json(_scene(PAYLOAD, clustering=False))
    assert isinstance(data, dict)
    assert data["data"][-1]["text"] == ["You", "Ann", "Ben"]
