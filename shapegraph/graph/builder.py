"""Turn an ordered shape collection into a connected proximity graph.

The build runs in fixed stages:

1. one node per shape, placed at the shape's semantic center;
2. a proximity threshold derived from the spread of those centers;
3. an edge for every pair closer than the threshold;
4. isolated nodes are tied to their nearest neighbour;
5. the shortest non-adjacent pairs within ``repair_distance_factor`` times
   the threshold are added until the graph is connected;
6. any components still apart are bridged by their closest pair.

Edge weights are always the Euclidean distance between the two centers.
"""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set, Tuple

import numpy as np

from ..config import EngineConfig, get_engine_config
from ..geometry import as_array, bounding_diagonal, mean_pairwise_distance, pairwise_distances, shape_center
from ..logging_utils import apply_debug_logging
from .model import Graph, Node

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    """Graph produced by one build plus the shape-id to node cache."""

    graph: Graph
    node_for_shape: Dict[str, Node] = field(default_factory=dict)
    threshold: float = math.inf

    def node_for(self, shape) -> Optional[Node]:
        if shape is None:
            return None
        return self.node_for_shape.get(shape.id)


def letter_label(index: int) -> str:
    """Spreadsheet-style letters: 0 -> A, 25 -> Z, 26 -> AA."""

    letters = ""
    index += 1
    while index > 0:
        index, rem = divmod(index - 1, 26)
        letters = chr(ord("A") + rem) + letters
    return letters


def proximity_threshold(points: np.ndarray, config: Optional[EngineConfig] = None) -> float:
    """Maximum center distance for a direct edge between two nodes.

    The mean pairwise distance, scaled down as the node count grows, is
    clamped between fixed fractions of the bounding-box diagonal.
    """

    cfg = config or get_engine_config()
    count = int(points.shape[0])
    if count < 2:
        return math.inf

    diagonal = bounding_diagonal(points)
    average = mean_pairwise_distance(points)
    count_factor = max(cfg.min_node_count_factor, 1.0 - (count - 2) * cfg.node_count_decay)
    threshold = average * cfg.average_distance_factor * count_factor
    threshold = max(threshold, diagonal * cfg.min_diagonal_ratio)
    threshold = min(threshold, diagonal * cfg.max_diagonal_ratio)

    logger.info(
        "Proximity threshold %.2f (diagonal=%.2f, average=%.2f, nodes=%d)", threshold, diagonal, average, count
    )
    return threshold


class GraphBuilder:
    """Build :class:`Graph` instances from shapes using an :class:`EngineConfig`."""

    def __init__(self, config: Optional[EngineConfig] = None):
        self.config = config or get_engine_config()

    def build(self, shapes: Iterable) -> BuildResult:
        shape_list = list(shapes)
        graph = Graph(directed=False)
        node_for_shape: Dict[str, Node] = {}
        nodes: List[Node] = []

        counters = {"circle": 0, "rectangle": 0, "line": 0}
        for index, shape in enumerate(shape_list):
            cx, cy = shape_center(shape)
            node = Node(
                id=self._new_node_id(shape, graph),
                x=cx,
                y=cy,
                label=self._label_for(shape, index, counters),
                radius=self.config.node_radius,
            )
            graph.add_node(node)
            node_for_shape[shape.id] = node
            nodes.append(node)
            logger.debug("Node %s (%s) for %s at (%.2f, %.2f)", node.label, node.id, shape.id, cx, cy)

        if len(nodes) < 2:
            logger.info("Built graph with %d node(s) and no edges", len(nodes))
            return BuildResult(graph, node_for_shape, math.inf)

        points = as_array([node.position for node in nodes])
        distances = pairwise_distances(points)
        threshold = proximity_threshold(points, self.config)

        created = self._add_proximity_edges(graph, nodes, distances, threshold)
        logger.info("Created %d proximity edge(s) with threshold %.2f", created, threshold)

        self._repair_isolated(graph, nodes, distances)
        if not graph.is_connected():
            logger.info("Graph still disconnected, adding repair edges")
            self._repair_connectivity(graph, nodes, distances, threshold * self.config.repair_distance_factor)
        if not graph.is_connected():
            logger.info("Bridging components further apart than the repair distance")
            self._bridge_components(graph, nodes, distances)

        logger.info(
            "Built graph with %d node(s) and %d edge(s), connected=%s",
            graph.node_count,
            graph.edge_count,
            graph.is_connected(),
        )
        return BuildResult(graph, node_for_shape, threshold)

    # -- nodes ------------------------------------------------------------

    @staticmethod
    def _new_node_id(shape, graph: Graph) -> str:
        prefix = type(shape).__name__
        while True:
            candidate = f"{prefix}_{uuid.uuid4().hex[:8]}"
            if graph.get_node(candidate) is None:
                return candidate

    @staticmethod
    def _label_for(shape, index: int, counters: Dict[str, int]) -> str:
        kind = getattr(shape, "kind", None)
        if kind in ("circle", "rectangle"):
            label = letter_label(counters[kind])
            counters[kind] += 1
            return label
        if kind == "line":
            counters["line"] += 1
            return str(counters["line"])
        return f"{type(shape).__name__} {index}"

    # -- edges ------------------------------------------------------------

    @staticmethod
    def _add_proximity_edges(graph: Graph, nodes: List[Node], distances: np.ndarray, threshold: float) -> int:
        created = 0
        count = len(nodes)
        for i in range(count):
            for j in range(i + 1, count):
                distance = float(distances[i, j])
                if 0.0 < distance <= threshold and graph.connect(nodes[i].id, nodes[j].id, distance):
                    created += 1
                    logger.debug("Edge %s-%s (%.2f)", nodes[i].label, nodes[j].label, distance)
        return created

    @staticmethod
    def _repair_isolated(graph: Graph, nodes: List[Node], distances: np.ndarray) -> None:
        isolated = [idx for idx, node in enumerate(nodes) if not graph.get_neighbors(node)]
        for idx in isolated:
            closest: Optional[int] = None
            best = math.inf
            for other in range(len(nodes)):
                if other == idx:
                    continue
                distance = float(distances[idx, other])
                if distance < best:
                    best = distance
                    closest = other
            if closest is not None and graph.connect(nodes[idx].id, nodes[closest].id, best):
                logger.info(
                    "Connected isolated node %s to %s (%.2f)", nodes[idx].label, nodes[closest].label, best
                )

    @staticmethod
    def _repair_connectivity(graph: Graph, nodes: List[Node], distances: np.ndarray, max_distance: float) -> None:
        candidates: List[Tuple[float, int, int]] = []
        for i in range(len(nodes)):
            neighbors = graph.get_neighbors(nodes[i])
            for j in range(i + 1, len(nodes)):
                distance = float(distances[i, j])
                if nodes[j] not in neighbors and distance <= max_distance:
                    candidates.append((distance, i, j))
        candidates.sort(key=lambda item: item[0])

        for distance, i, j in candidates:
            if graph.connect(nodes[i].id, nodes[j].id, distance):
                logger.debug("Repair edge %s-%s (%.2f)", nodes[i].label, nodes[j].label, distance)
            if graph.is_connected():
                break

    @staticmethod
    def _bridge_components(graph: Graph, nodes: List[Node], distances: np.ndarray) -> None:
        index_of = {node.id: idx for idx, node in enumerate(nodes)}
        while True:
            reached: Set[int] = {index_of[node.id] for node in graph.reachable_from(nodes[0])}
            if len(reached) == len(nodes):
                return
            outside = [idx for idx in range(len(nodes)) if idx not in reached]
            inside = sorted(reached)
            block = distances[np.ix_(inside, outside)]
            flat = int(np.argmin(block))
            row, col = divmod(flat, len(outside))
            i, j = inside[row], outside[col]
            distance = float(block[row, col])
            graph.connect(nodes[i].id, nodes[j].id, distance)
            logger.info("Bridged %s-%s (%.2f)", nodes[i].label, nodes[j].label, distance)


def build_graph(shapes: Iterable, config: Optional[EngineConfig] = None) -> BuildResult:
    return GraphBuilder(config).build(shapes)


__all__ = ["BuildResult", "GraphBuilder", "build_graph", "letter_label", "proximity_threshold"]


apply_debug_logging(globals(), logger=logger)
