"""Planar helpers shared by the graph builder and the path controller."""

from __future__ import annotations

import logging
import math
from typing import Sequence, Tuple

import numpy as np
from scipy.spatial.distance import pdist, squareform

logger = logging.getLogger(__name__)

Point2D = Tuple[float, float]


def euclidean(a: Point2D, b: Point2D) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def midpoint(a: Point2D, b: Point2D) -> Point2D:
    return (a[0] + b[0]) * 0.5, (a[1] + b[1]) * 0.5


def shape_center(shape) -> Point2D:
    """Return the semantic center used to place a shape's graph node.

    Rectangles use their bounding-box centroid, circles their stored center
    and lines the midpoint of their endpoints. Any other kind falls back to
    the raw anchor point.
    """

    kind = getattr(shape, "kind", None)
    if kind == "rectangle":
        return shape.x + shape.width / 2.0, shape.y + shape.height / 2.0
    if kind == "circle":
        return float(shape.x), float(shape.y)
    if kind == "line":
        return midpoint((shape.x, shape.y), (shape.end_x, shape.end_y))
    logger.warning(
        "Using anchor (x, y) as center for shape type %s", getattr(shape, "type_name", type(shape).__name__)
    )
    return float(shape.x), float(shape.y)


def as_array(points: Sequence[Point2D]) -> np.ndarray:
    if not points:
        return np.zeros((0, 2), dtype=float)
    return np.asarray(points, dtype=float).reshape(-1, 2)


def bounding_diagonal(points: np.ndarray) -> float:
    if points.shape[0] == 0:
        return 0.0
    span = np.ptp(points, axis=0)
    return float(math.hypot(float(span[0]), float(span[1])))


def pairwise_distances(points: np.ndarray) -> np.ndarray:
    """Square matrix of Euclidean distances between ``points`` rows."""

    if points.shape[0] < 2:
        return np.zeros((points.shape[0], points.shape[0]), dtype=float)
    return squareform(pdist(points, metric="euclidean"))


def mean_pairwise_distance(points: np.ndarray) -> float:
    if points.shape[0] < 2:
        return 0.0
    return float(np.mean(pdist(points, metric="euclidean")))


def polyline_length(points: Sequence[Point2D]) -> float:
    total = 0.0
    for a, b in zip(points, points[1:]):
        total += euclidean(a, b)
    return total


__all__ = [
    "Point2D",
    "as_array",
    "bounding_diagonal",
    "euclidean",
    "mean_pairwise_distance",
    "midpoint",
    "pairwise_distances",
    "polyline_length",
    "shape_center",
]
