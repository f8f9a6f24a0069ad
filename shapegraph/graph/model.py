"""Core graph data structures: nodes, edges and the graph container."""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterable, List, Optional, Set, Tuple

logger = logging.getLogger(__name__)

NodeId = str

DEFAULT_NODE_RADIUS = 20.0


@dataclass(eq=False)
class Node:
    """Graph vertex placed at a shape's center.

    Equality and hashing use ``id`` only. ``previous`` holds the id of the
    predecessor found by the last shortest-path run, so it always refers into
    the owning graph's node mapping.
    """

    id: NodeId
    x: float
    y: float
    label: str = ""
    radius: float = DEFAULT_NODE_RADIUS
    distance: float = math.inf
    previous: Optional[NodeId] = None
    visited: bool = False
    selected: bool = False

    def __post_init__(self) -> None:
        self.x = float(self.x)
        self.y = float(self.y)
        if not self.label:
            self.label = self.id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __repr__(self) -> str:
        return f"Node(id={self.id!r}, position=({self.x:.2f}, {self.y:.2f}), label={self.label!r})"

    @property
    def position(self) -> Tuple[float, float]:
        return self.x, self.y

    def distance_to(self, other: "Node") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def contains(self, px: float, py: float) -> bool:
        return math.hypot(px - self.x, py - self.y) <= self.radius

    def reset_algorithm_properties(self) -> None:
        self.distance = math.inf
        self.previous = None
        self.visited = False
        self.selected = False


@dataclass(eq=False)
class Edge:
    """Weighted connection between two nodes.

    Undirected edges compare equal regardless of endpoint order.
    """

    source: Node
    target: Node
    weight: float = 1.0
    directed: bool = False
    highlighted: bool = False
    deemphasized: bool = False

    def __post_init__(self) -> None:
        self.weight = float(self.weight)

    def _key(self, directed: Optional[bool] = None) -> Tuple[NodeId, NodeId]:
        a, b = self.source.id, self.target.id
        if directed is None:
            directed = self.directed
        if directed:
            return a, b
        return (a, b) if a <= b else (b, a)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        return self.directed == other.directed and self._key() == other._key()

    def __hash__(self) -> int:
        return hash((self.directed, self._key()))

    def __repr__(self) -> str:
        arrow = " -> " if self.directed else " -- "
        return f"Edge({self.source.id}{arrow}{self.target.id}, weight={self.weight:.2f})"

    @property
    def label(self) -> str:
        return f"{self.weight:.1f}"

    def other(self, node: Node) -> Optional[Node]:
        if node == self.source:
            return self.target
        if node == self.target:
            return self.source
        return None

    def joins(self, a: Node, b: Node, directed: Optional[bool] = None) -> bool:
        if self.source == a and self.target == b:
            return True
        if directed is None:
            directed = self.directed
        return not directed and self.source == b and self.target == a

    def touches(self, node: Node) -> bool:
        return self.source == node or self.target == node


class Graph:
    """Node mapping plus edge list, undirected unless ``directed`` is set.

    Added edges take the graph's orientation, so duplicates are detected by
    endpoint pair with order mattering only in directed graphs.
    """

    def __init__(self, directed: bool = False):
        self.directed = directed
        self._nodes: Dict[NodeId, Node] = {}
        self._edges: List[Edge] = []

    def __repr__(self) -> str:
        return f"Graph(nodes={len(self._nodes)}, edges={len(self._edges)}, directed={self.directed})"

    # -- nodes -----------------------------------------------------------

    def add_node(self, node: Node) -> bool:
        if node.id in self._nodes:
            return False
        self._nodes[node.id] = node
        return True

    def remove_node(self, node_id: NodeId) -> bool:
        node = self._nodes.pop(node_id, None)
        if node is None:
            return False
        before = len(self._edges)
        self._edges = [edge for edge in self._edges if not edge.touches(node)]
        logger.debug("Removed node %s and %d incident edge(s)", node_id, before - len(self._edges))
        return True

    def get_node(self, node_id: NodeId) -> Optional[Node]:
        return self._nodes.get(node_id)

    def has_node(self, node: Optional[Node]) -> bool:
        return node is not None and node.id in self._nodes

    @property
    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    def find_node_at(self, x: float, y: float) -> Optional[Node]:
        for node in self._nodes.values():
            if node.contains(x, y):
                return node
        return None

    # -- edges -----------------------------------------------------------

    def add_edge(self, edge: Edge) -> bool:
        if edge.source.id not in self._nodes or edge.target.id not in self._nodes:
            return False
        key = edge._key(self.directed)
        if any(existing._key(self.directed) == key for existing in self._edges):
            return False
        edge.directed = self.directed
        self._edges.append(edge)
        return True

    def connect(self, source_id: NodeId, target_id: NodeId, weight: float = 1.0) -> bool:
        source = self._nodes.get(source_id)
        target = self._nodes.get(target_id)
        if source is None or target is None:
            return False
        return self.add_edge(Edge(source, target, weight, directed=self.directed))

    def remove_edge(self, edge: Edge) -> bool:
        key = edge._key(self.directed)
        for idx, existing in enumerate(self._edges):
            if existing._key(self.directed) == key:
                del self._edges[idx]
                return True
        return False

    @property
    def edges(self) -> List[Edge]:
        return list(self._edges)

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def edges_for(self, node: Node) -> List[Edge]:
        return [edge for edge in self._edges if edge.touches(node)]

    def get_neighbors(self, node: Node) -> Dict[Node, float]:
        """Map each neighbor of ``node`` to the weight of the joining edge."""

        neighbors: Dict[Node, float] = {}
        for edge in self._edges:
            if edge.source == node:
                neighbors[edge.target] = edge.weight
            elif not self.directed and edge.target == node:
                neighbors[edge.source] = edge.weight
        return neighbors

    # -- analysis --------------------------------------------------------

    def reachable_from(self, start: Node) -> Set[Node]:
        visited: Set[Node] = {start}
        queue: Deque[Node] = deque([start])
        while queue:
            current = queue.popleft()
            for neighbor in self.get_neighbors(current):
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)
        return visited

    def is_connected(self) -> bool:
        if not self._nodes:
            return True
        start = next(iter(self._nodes.values()))
        return len(self.reachable_from(start)) == len(self._nodes)

    # -- algorithm and presentation state --------------------------------

    def reset_algorithm_properties(self) -> None:
        for node in self._nodes.values():
            node.reset_algorithm_properties()
        for edge in self._edges:
            edge.highlighted = False

    def highlight_path(self, path: Iterable[Node]) -> None:
        """Highlight the edges joining consecutive nodes of ``path``.

        Earlier highlights are kept; callers reset them first when needed.
        """

        nodes = list(path)
        for current, nxt in zip(nodes, nodes[1:]):
            for edge in self._edges:
                if edge.joins(current, nxt, self.directed):
                    edge.highlighted = True
                    break

    def set_deemphasize_non_highlighted(self, deemphasize: bool) -> None:
        for edge in self._edges:
            edge.deemphasized = deemphasize and not edge.highlighted

    def reset_highlights(self) -> None:
        for node in self._nodes.values():
            node.selected = False
        for edge in self._edges:
            edge.highlighted = False
            edge.deemphasized = False
        logger.debug("Graph highlights have been reset")

    def clear(self) -> None:
        self._nodes.clear()
        self._edges.clear()


__all__ = ["DEFAULT_NODE_RADIUS", "Edge", "Graph", "Node", "NodeId"]
