import logging
import math
import re

import numpy as np
import pytest

from shapegraph.config import EngineConfig
from shapegraph.geometry import as_array
from shapegraph.graph import GraphBuilder, build_graph, letter_label, proximity_threshold
from shapegraph.shapes import Circle, Circle3D, Line, Rectangle, Rectangle3D


def _circles(*points, radius=5.0):
    return [Circle(x, y, radius) for x, y in points]


def _edge_set(result):
    return {frozenset((edge.source.label, edge.target.label)) for edge in result.graph.edges}


def test_empty_input_gives_empty_graph():
    result = build_graph([])
    assert result.graph.node_count == 0
    assert result.graph.edge_count == 0
    assert result.node_for_shape == {}
    assert math.isinf(result.threshold)


def test_single_shape_gives_single_node():
    shape = Circle(10, 20, 5)
    result = build_graph([shape])
    assert result.graph.node_count == 1
    assert result.graph.edge_count == 0
    assert result.node_for(shape).position == (10.0, 20.0)
    assert math.isinf(result.threshold)


def test_node_ids_follow_shape_class():
    shapes = [Circle(0, 0, 5), Rectangle(50, 50, 10, 10), Line(0, 100, 20, 100)]
    result = build_graph(shapes)
    ids = [result.node_for(shape).id for shape in shapes]
    assert re.fullmatch(r"Circle_[0-9a-f]{8}", ids[0])
    assert re.fullmatch(r"Rectangle_[0-9a-f]{8}", ids[1])
    assert re.fullmatch(r"Line_[0-9a-f]{8}", ids[2])
    assert len(set(ids)) == 3


def test_node_positions_use_shape_centers():
    rect = Rectangle(10, 20, 40, 60)
    line = Line(0, 0, 10, 20)
    circle = Circle(7, 8, 3)
    result = build_graph([rect, line, circle])
    assert result.node_for(rect).position == (30.0, 50.0)
    assert result.node_for(line).position == (5.0, 10.0)
    assert result.node_for(circle).position == (7.0, 8.0)


def test_pseudo_3d_shapes_use_anchor_with_warning(caplog):
    box = Rectangle3D(10, 20, 40, 60)
    with caplog.at_level(logging.WARNING, logger="shapegraph.geometry"):
        result = build_graph([box, Circle3D(100, 100, 10)])
    assert result.node_for(box).position == (10.0, 20.0)
    assert "Rectangle3D" in caplog.text


def test_label_sequences_per_kind():
    shapes = [
        Circle(0, 0, 5),
        Rectangle(10, 0, 5, 5),
        Line(20, 0, 30, 0),
        Circle(40, 0, 5),
        Rectangle3D(50, 0, 5, 5),
        Line(60, 0, 70, 0),
        Rectangle(80, 0, 5, 5),
        Circle3D(90, 0, 5),
    ]
    result = build_graph(shapes)
    labels = [result.node_for(shape).label for shape in shapes]
    assert labels == ["A", "A", "1", "B", "Rectangle3D 4", "2", "B", "Circle3D 7"]


@pytest.mark.parametrize(
    "index, expected",
    [(0, "A"), (1, "B"), (25, "Z"), (26, "AA"), (27, "AB"), (701, "ZZ"), (702, "AAA")],
)
def test_letter_label(index, expected):
    assert letter_label(index) == expected


def test_proximity_threshold_formula():
    points = as_array([(0, 0), (10, 0), (20, 0), (1000, 1000)])
    diagonal = math.hypot(1000, 1000)
    assert proximity_threshold(points) == pytest.approx(0.3 * diagonal)

    unclamped = EngineConfig(min_diagonal_ratio=0.0)
    average = (10 + 20 + 10 + math.hypot(1000, 1000) + math.hypot(990, 1000) + math.hypot(980, 1000)) / 6
    assert proximity_threshold(points, unclamped) == pytest.approx(average * 0.6 * 0.8)


def test_proximity_threshold_count_factor_floor():
    points = as_array([(float(i), 0.0) for i in range(20)])
    cfg = EngineConfig(min_diagonal_ratio=0.0)
    distances = [abs(i - j) for i in range(20) for j in range(i + 1, 20)]
    expected = np.mean(distances) * 0.6 * 0.3
    assert proximity_threshold(points, cfg) == pytest.approx(expected)


def test_proximity_threshold_needs_two_points():
    assert math.isinf(proximity_threshold(as_array([])))
    assert math.isinf(proximity_threshold(as_array([(1, 1)])))


def test_two_shapes_are_joined_by_isolated_repair():
    result = build_graph(_circles((0, 0), (100, 0)))
    assert result.threshold == pytest.approx(60.0)
    assert result.graph.edge_count == 1
    assert result.graph.edges[0].weight == pytest.approx(100.0)


def test_outlier_is_attached_only_by_repair():
    shapes = _circles((0, 0), (10, 0), (20, 0), (1000, 1000))
    result = build_graph(shapes)
    graph = result.graph
    outlier = result.node_for(shapes[3])

    assert result.threshold == pytest.approx(0.3 * math.hypot(1000, 1000))
    assert graph.is_connected()
    assert _edge_set(result) == {
        frozenset(("A", "B")),
        frozenset(("A", "C")),
        frozenset(("B", "C")),
        frozenset(("C", "D")),
    }
    outlier_edges = graph.edges_for(outlier)
    assert len(outlier_edges) == 1
    assert outlier_edges[0].weight == pytest.approx(math.hypot(980, 1000))


def test_far_apart_clusters_are_bridged():
    shapes = _circles((0, 0), (1, 0), (100, 0), (101, 0))
    result = build_graph(shapes)
    assert result.threshold == pytest.approx(67.0 * 0.6 * 0.8)
    assert result.graph.is_connected()
    assert _edge_set(result) == {frozenset(("A", "B")), frozenset(("C", "D")), frozenset(("B", "C"))}


def test_connectivity_repair_adds_shortest_candidates_first():
    # a chain whose middle gap is larger than the threshold but inside 1.5x
    shapes = _circles((0, 0), (10, 0), (20, 0), (50, 0), (60, 0), (70, 0))
    result = build_graph(shapes)
    gap = 30.0
    assert result.threshold < gap <= 1.5 * result.threshold
    assert result.graph.is_connected()
    assert frozenset(("C", "D")) in _edge_set(result)


def test_coincident_shapes_are_linked_only_by_repair():
    shapes = _circles((5, 5), (5, 5), (50, 5))
    result = build_graph(shapes)
    graph = result.graph
    assert graph.is_connected()
    a, b = result.node_for(shapes[0]), result.node_for(shapes[1])
    assert graph.edge_count == 2
    assert graph.get_neighbors(a)[b] == 0.0


def test_edge_weights_are_center_distances():
    shapes = [Rectangle(0, 0, 20, 20), Circle(60, 10, 5), Line(10, 80, 30, 80)]
    result = build_graph(shapes)
    for edge in result.graph.edges:
        assert edge.weight == pytest.approx(edge.source.distance_to(edge.target))


@pytest.mark.parametrize("seed", [0, 1, 2, 3])
def test_random_layouts_are_always_connected(seed):
    rng = np.random.default_rng(seed)
    coords = rng.uniform(0, 800, size=(25, 2))
    # push a few shapes far away to form separate clusters
    coords[:5] += 5000.0
    shapes = _circles(*[tuple(row) for row in coords])
    result = GraphBuilder().build(shapes)
    assert result.graph.node_count == 25
    assert result.graph.is_connected()
    assert len(result.node_for_shape) == 25


def test_builder_uses_node_radius_from_config():
    builder = GraphBuilder(EngineConfig(node_radius=7.5))
    result = builder.build(_circles((0, 0), (30, 0)))
    assert all(node.radius == 7.5 for node in result.graph.nodes)
