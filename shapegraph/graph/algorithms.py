"""Shortest-path strategies over :class:`~shapegraph.graph.model.Graph`.

Two interchangeable strategies share the :class:`ShortestPathStrategy`
protocol:

``DijkstraStrategy``
    Classical non-negative single-source shortest paths. The heap is keyed by
    ``(distance, node id)`` so ties settle in node-id order. Decrease-key is
    done by pushing a fresh entry and skipping stale ones on pop.

``BFSStrategy``
    FIFO traversal that accumulates edge weights in discovery order. Paths
    have the minimum number of edges but not necessarily the minimum total
    weight. The two strategies are offered side by side precisely because
    they give different guarantees.
"""

from __future__ import annotations

import heapq
import logging
import math
from collections import deque
from dataclasses import dataclass, field
from typing import ClassVar, Deque, Dict, List, Optional, Protocol, Set, Tuple, Type

from ..geometry import polyline_length
from ..logging_utils import apply_debug_logging
from .model import Graph, Node, NodeId

logger = logging.getLogger(__name__)


@dataclass
class ShortestPathResult:
    """Per-node distances and predecessors computed from one source."""

    source: Optional[Node]
    success: bool = True
    error_message: Optional[str] = None
    distances: Dict[NodeId, float] = field(default_factory=dict)
    predecessors: Dict[NodeId, Optional[NodeId]] = field(default_factory=dict)
    graph: Optional[Graph] = field(default=None, repr=False, compare=False)

    def distance_to(self, target: Node) -> float:
        return self.distances.get(target.id, math.inf)

    def is_reachable(self, target: Node) -> bool:
        return self.distance_to(target) != math.inf

    def path_to(self, target: Optional[Node]) -> List[Node]:
        if not self.success or self.graph is None or target is None:
            return []
        return reconstruct_path(self.graph, self.predecessors, self.distances, target.id)


def reconstruct_path(
    graph: Graph,
    predecessors: Dict[NodeId, Optional[NodeId]],
    distances: Dict[NodeId, float],
    target_id: NodeId,
) -> List[Node]:
    """Walk predecessor ids back from ``target_id`` and return source-first nodes."""

    if distances.get(target_id, math.inf) == math.inf:
        return []
    path: List[Node] = []
    current: Optional[NodeId] = target_id
    while current is not None:
        node = graph.get_node(current)
        if node is None or len(path) > graph.node_count:
            logger.error("Predecessor chain from %s is broken at %s", target_id, current)
            return []
        path.append(node)
        current = predecessors.get(current)
    path.reverse()
    return path


def path_distance(path: List[Node]) -> float:
    """Sum of Euclidean distances between consecutive path nodes."""

    return polyline_length([node.position for node in path])


def _resolve(graph: Graph, node: Optional[Node]) -> Optional[Node]:
    # callers may hold a stale Node object with the same id
    if node is None:
        return None
    return graph.get_node(node.id)


class ShortestPathStrategy(Protocol):
    """Protocol implemented by shortest-path algorithms."""

    key: ClassVar[str]
    algorithm_name: ClassVar[str]
    supports_negative_weights: ClassVar[bool]

    def find_shortest_path(self, graph: Graph, source: Optional[Node], target: Optional[Node]) -> List[Node]:
        """Return the source-to-target node sequence, or ``[]`` when there is none."""

    def find_shortest_paths(self, graph: Graph, source: Optional[Node]) -> ShortestPathResult:
        """Compute distances and predecessors from ``source`` to every node."""


class DijkstraStrategy:
    key: ClassVar[str] = "dijkstra"
    algorithm_name: ClassVar[str] = "Dijkstra"
    supports_negative_weights: ClassVar[bool] = False

    def find_shortest_paths(self, graph: Graph, source: Optional[Node]) -> ShortestPathResult:
        return self._run(graph, source, None)

    def find_shortest_path(self, graph: Graph, source: Optional[Node], target: Optional[Node]) -> List[Node]:
        if source is None or target is None:
            return []
        actual_target = _resolve(graph, target)
        if actual_target is None:
            logger.warning("Dijkstra: target node %s is not in the graph", target.id)
            return []
        result = self._run(graph, source, actual_target)
        if not result.success:
            logger.warning("Dijkstra failed: %s", result.error_message)
            return []
        return result.path_to(actual_target)

    def _run(self, graph: Graph, source: Optional[Node], target: Optional[Node]) -> ShortestPathResult:
        if source is None:
            return ShortestPathResult(None, False, "source node is None")
        actual_source = _resolve(graph, source)
        if actual_source is None:
            return ShortestPathResult(source, False, f"source node {source.id} not found in graph")

        graph.reset_algorithm_properties()
        distances: Dict[NodeId, float] = {node.id: math.inf for node in graph.nodes}
        predecessors: Dict[NodeId, Optional[NodeId]] = {node.id: None for node in graph.nodes}
        distances[actual_source.id] = 0.0
        actual_source.distance = 0.0

        heap: List[Tuple[float, NodeId]] = [(0.0, actual_source.id)]
        settled: Set[NodeId] = set()

        while heap:
            dist, node_id = heapq.heappop(heap)
            if node_id in settled or dist > distances[node_id]:
                continue
            settled.add(node_id)
            current = graph.get_node(node_id)
            current.visited = True
            if target is not None and node_id == target.id:
                break

            for neighbor, weight in graph.get_neighbors(current).items():
                if weight < 0:
                    message = (
                        f"Dijkstra does not support negative edge weights "
                        f"(edge {current.label}-{neighbor.label} has weight {weight:g})"
                    )
                    return ShortestPathResult(actual_source, False, message)
                if neighbor.id in settled:
                    continue
                candidate = dist + weight
                if candidate < distances[neighbor.id]:
                    distances[neighbor.id] = candidate
                    predecessors[neighbor.id] = node_id
                    neighbor.distance = candidate
                    neighbor.previous = node_id
                    heapq.heappush(heap, (candidate, neighbor.id))

        reached = sum(1 for value in distances.values() if value != math.inf)
        logger.info(
            "Dijkstra from %s settled %d node(s), reached %d/%d",
            actual_source.label,
            len(settled),
            reached,
            graph.node_count,
        )
        return ShortestPathResult(actual_source, True, None, distances, predecessors, graph)


class BFSStrategy:
    key: ClassVar[str] = "bfs"
    algorithm_name: ClassVar[str] = "BFS (Breadth-First Search)"
    supports_negative_weights: ClassVar[bool] = True

    def find_shortest_paths(self, graph: Graph, source: Optional[Node]) -> ShortestPathResult:
        return self._traverse(graph, source, None, unweighted=False)

    def find_shortest_path(self, graph: Graph, source: Optional[Node], target: Optional[Node]) -> List[Node]:
        return self._path(graph, source, target, unweighted=False)

    def find_shortest_path_unweighted(
        self, graph: Graph, source: Optional[Node], target: Optional[Node]
    ) -> List[Node]:
        """Same traversal with ``distance`` counting edges instead of weights."""

        return self._path(graph, source, target, unweighted=True)

    def _path(
        self, graph: Graph, source: Optional[Node], target: Optional[Node], *, unweighted: bool
    ) -> List[Node]:
        if source is None or target is None:
            return []
        actual_target = _resolve(graph, target)
        if actual_target is None:
            return []
        result = self._traverse(graph, source, actual_target, unweighted=unweighted)
        if not result.success:
            logger.warning("BFS failed: %s", result.error_message)
            return []
        return result.path_to(actual_target)

    def _traverse(
        self, graph: Graph, source: Optional[Node], target: Optional[Node], *, unweighted: bool
    ) -> ShortestPathResult:
        if source is None:
            return ShortestPathResult(None, False, "source node is None")
        actual_source = _resolve(graph, source)
        if actual_source is None:
            return ShortestPathResult(source, False, f"source node {source.id} not found in graph")

        graph.reset_algorithm_properties()
        distances: Dict[NodeId, float] = {node.id: math.inf for node in graph.nodes}
        predecessors: Dict[NodeId, Optional[NodeId]] = {node.id: None for node in graph.nodes}
        distances[actual_source.id] = 0.0
        actual_source.distance = 0.0

        queue: Deque[Node] = deque([actual_source])
        discovered: Set[NodeId] = {actual_source.id}

        while queue:
            current = queue.popleft()
            current.visited = True
            if target is not None and current.id == target.id:
                break
            for neighbor, weight in graph.get_neighbors(current).items():
                if neighbor.id in discovered:
                    continue
                discovered.add(neighbor.id)
                step = 1.0 if unweighted else weight
                distances[neighbor.id] = distances[current.id] + step
                predecessors[neighbor.id] = current.id
                neighbor.distance = distances[neighbor.id]
                neighbor.previous = current.id
                queue.append(neighbor)

        logger.info(
            "BFS from %s discovered %d/%d node(s)", actual_source.label, len(discovered), graph.node_count
        )
        return ShortestPathResult(actual_source, True, None, distances, predecessors, graph)


def connected_components(graph: Graph) -> List[Set[Node]]:
    """Return the node sets of each connected component, in node order."""

    components: List[Set[Node]] = []
    seen: Set[Node] = set()
    for node in graph.nodes:
        if node in seen:
            continue
        component = graph.reachable_from(node)
        seen.update(component)
        components.append(component)
    return components


def is_bipartite(graph: Graph) -> bool:
    colors: Dict[NodeId, int] = {}
    for start in graph.nodes:
        if start.id in colors:
            continue
        colors[start.id] = 0
        queue: Deque[Node] = deque([start])
        while queue:
            current = queue.popleft()
            for neighbor in graph.get_neighbors(current):
                if neighbor.id not in colors:
                    colors[neighbor.id] = 1 - colors[current.id]
                    queue.append(neighbor)
                elif colors[neighbor.id] == colors[current.id]:
                    return False
    return True


_STRATEGIES: Dict[str, Type] = {
    DijkstraStrategy.key: DijkstraStrategy,
    BFSStrategy.key: BFSStrategy,
}


def available_strategies() -> List[str]:
    return sorted(_STRATEGIES)


def get_strategy(name: str) -> ShortestPathStrategy:
    """Instantiate a strategy by case-insensitive name (``dijkstra`` or ``bfs``)."""

    try:
        factory = _STRATEGIES[name.strip().lower()]
    except KeyError as exc:
        raise ValueError(
            f"unknown shortest-path algorithm {name!r}; expected one of {', '.join(available_strategies())}"
        ) from exc
    return factory()


__all__ = [
    "BFSStrategy",
    "DijkstraStrategy",
    "ShortestPathResult",
    "ShortestPathStrategy",
    "available_strategies",
    "connected_components",
    "get_strategy",
    "is_bipartite",
    "path_distance",
    "reconstruct_path",
]


apply_debug_logging(globals(), logger=logger)
