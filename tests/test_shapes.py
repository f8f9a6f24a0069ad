import json
import logging
import math

import numpy as np
import pytest

from shapegraph.config import EngineConfig, get_engine_config, set_engine_config
from shapegraph.geometry import (
    as_array,
    bounding_diagonal,
    euclidean,
    mean_pairwise_distance,
    pairwise_distances,
    shape_center,
)
from shapegraph.shapes import (
    Circle,
    Circle3D,
    Drawing,
    Line,
    Rectangle,
    Rectangle3D,
    drawing_from_dict,
    load_drawing,
    shape_from_dict,
)


def test_shape_ids_are_unique_and_prefixed():
    a, b = Circle(0, 0, 1), Circle(0, 0, 1)
    assert a.id != b.id
    assert a.id.startswith("Circle_")
    assert Rectangle(0, 0, 1, 1, id="fixed").id == "fixed"


@pytest.mark.parametrize(
    "shape, inside, outside",
    [
        (Circle(0, 0, 10), (6, 8), (8, 8)),
        (Rectangle(0, 0, 20, 10), (20, 10), (21, 5)),
        (Line(0, 0, 100, 0), (50, 4), (50, 6)),
        (Circle3D(0, 0, 20), (19, 0), (0, 11)),
        (Rectangle3D(5, 5, 10, 10), (5, 5), (4, 5)),
    ],
)
def test_contains(shape, inside, outside):
    assert shape.contains(*inside)
    assert not shape.contains(*outside)


def test_area_and_perimeter():
    assert Circle(0, 0, 2).area == pytest.approx(4 * math.pi)
    assert Rectangle(0, 0, 3, 4).perimeter == pytest.approx(14.0)
    assert Line(0, 0, 3, 4).perimeter == pytest.approx(5.0)
    assert Line(0, 0, 3, 4).area == 0.0
    assert Circle3D(0, 0, 4).area == pytest.approx(8 * math.pi)


def test_drawing_find_shape_at_prefers_topmost():
    bottom = Rectangle(0, 0, 100, 100)
    top = Circle(50, 50, 10)
    drawing = Drawing()
    drawing.add_shape(bottom)
    drawing.add_shape(top)

    assert drawing.find_shape_at(50, 50) is top
    assert drawing.find_shape_at(5, 5) is bottom
    assert drawing.find_shape_at(500, 500) is None


def test_drawing_remove_and_totals():
    a, b = Rectangle(0, 0, 2, 3), Rectangle(0, 0, 1, 1)
    drawing = Drawing(name="boxes")
    drawing.add_shape(a)
    drawing.add_shape(b)
    assert drawing.total_area == pytest.approx(7.0)

    assert drawing.remove_shape(a)
    assert not drawing.remove_shape(a)
    assert drawing.shapes == [b]
    drawing.clear()
    assert drawing.shape_count == 0


def test_shape_center():
    assert shape_center(Rectangle(10, 20, 40, 60)) == (30.0, 50.0)
    assert shape_center(Circle(3, 4, 1)) == (3.0, 4.0)
    assert shape_center(Line(0, 0, 10, -10)) == (5.0, -5.0)


def test_shape_center_fallback_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="shapegraph.geometry"):
        assert shape_center(Circle3D(7, 9, 3)) == (7.0, 9.0)
    assert "Circle3D" in caplog.text


def test_distance_helpers():
    points = as_array([(0, 0), (3, 4), (6, 0)])
    assert euclidean((0, 0), (3, 4)) == pytest.approx(5.0)
    assert bounding_diagonal(points) == pytest.approx(math.hypot(6, 4))
    matrix = pairwise_distances(points)
    assert matrix.shape == (3, 3)
    assert np.allclose(matrix, matrix.T)
    assert matrix[0, 2] == pytest.approx(6.0)
    assert mean_pairwise_distance(points) == pytest.approx((5 + 6 + 5) / 3)
    assert as_array([]).shape == (0, 2)
    assert pairwise_distances(as_array([(1, 1)])).shape == (1, 1)


def test_shape_from_dict_reads_json_keys():
    line = shape_from_dict({"type": "Line", "x": 1, "y": 2, "endX": 3, "endY": 4, "strokeWidth": 5})
    assert isinstance(line, Line)
    assert (line.end_x, line.end_y, line.stroke_width) == (3.0, 4.0, 5.0)

    rect = shape_from_dict({"type": "Rectangle3D", "x": 0, "y": 0, "width": 2, "height": 3, "color": "#ff0000"})
    assert isinstance(rect, Rectangle3D)
    assert rect.color == "#ff0000"


def test_shape_from_dict_unknown_type(caplog):
    with caplog.at_level(logging.ERROR, logger="shapegraph.shapes"):
        assert shape_from_dict({"type": "Triangle", "x": 0, "y": 0}) is None
    assert "Triangle" in caplog.text


def test_shape_from_dict_missing_field():
    with pytest.raises(ValueError, match="radius"):
        shape_from_dict({"type": "Circle", "x": 0, "y": 0})


def test_drawing_from_dict_skips_unknown_shapes():
    drawing = drawing_from_dict(
        {
            "name": "demo",
            "shapes": [
                {"type": "Circle", "x": 0, "y": 0, "radius": 5},
                {"type": "Hexagon", "x": 1, "y": 1},
                {"type": "Rectangle", "x": 10, "y": 10, "width": 4, "height": 4},
            ],
        }
    )
    assert drawing.name == "demo"
    assert [shape.type_name for shape in drawing.shapes] == ["Circle", "Rectangle"]


@pytest.mark.parametrize("document", [[], {"shapes": {}}, {"shapes": [1]}])
def test_drawing_from_dict_rejects_malformed(document):
    with pytest.raises(ValueError):
        drawing_from_dict(document)


def test_load_drawing(tmp_path):
    path = tmp_path / "drawing.json"
    path.write_text(json.dumps({"shapes": [{"type": "Circle", "x": 1, "y": 2, "radius": 3}]}), encoding="utf-8")
    drawing = load_drawing(path)
    assert drawing.shape_count == 1
    assert drawing.name == "Untitled"

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError, match="invalid drawing JSON"):
        load_drawing(bad)


def test_engine_config_defaults_are_copied():
    cfg = get_engine_config()
    assert cfg.average_distance_factor == pytest.approx(0.6)
    assert cfg.repair_distance_factor == pytest.approx(1.5)
    assert cfg.status_reset_delay == pytest.approx(3.0)
    cfg.node_radius = 99.0
    assert get_engine_config().node_radius == pytest.approx(20.0)


def test_set_engine_config(monkeypatch):
    import shapegraph.config as config_module

    monkeypatch.setattr(config_module, "_ENGINE_CONFIG", EngineConfig())
    set_engine_config(EngineConfig(default_algorithm="bfs"))
    assert get_engine_config().default_algorithm == "bfs"
