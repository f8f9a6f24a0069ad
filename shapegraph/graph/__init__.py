"""Proximity graph model, builder and shortest-path strategies."""

from __future__ import annotations

from .algorithms import (
    BFSStrategy,
    DijkstraStrategy,
    ShortestPathResult,
    ShortestPathStrategy,
    available_strategies,
    connected_components,
    get_strategy,
    is_bipartite,
    path_distance,
    reconstruct_path,
)
from .builder import BuildResult, GraphBuilder, build_graph, letter_label, proximity_threshold
from .model import DEFAULT_NODE_RADIUS, Edge, Graph, Node, NodeId

__all__ = [
    "BFSStrategy",
    "BuildResult",
    "DEFAULT_NODE_RADIUS",
    "DijkstraStrategy",
    "Edge",
    "Graph",
    "GraphBuilder",
    "Node",
    "NodeId",
    "ShortestPathResult",
    "ShortestPathStrategy",
    "available_strategies",
    "build_graph",
    "connected_components",
    "get_strategy",
    "is_bipartite",
    "letter_label",
    "path_distance",
    "proximity_threshold",
    "reconstruct_path",
]
