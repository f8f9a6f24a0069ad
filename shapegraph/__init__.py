from .config import EngineConfig, get_engine_config, set_engine_config
from .geometry import euclidean, shape_center
from .shapes import (
    Circle,
    Circle3D,
    Drawing,
    Line,
    Rectangle,
    Rectangle3D,
    Shape,
    drawing_from_dict,
    load_drawing,
    shape_from_dict,
)
from .graph import (
    BFSStrategy,
    BuildResult,
    DijkstraStrategy,
    Edge,
    Graph,
    GraphBuilder,
    Node,
    ShortestPathResult,
    ShortestPathStrategy,
    available_strategies,
    build_graph,
    connected_components,
    get_strategy,
    is_bipartite,
    path_distance,
    proximity_threshold,
)
from .sessions import PathSession, SessionStore, path_nodes_json
from .selection import (
    ClickKind,
    ClickOutcome,
    InteractionMode,
    PathSelectionController,
    SelectionState,
)

__all__ = [
    'EngineConfig',
    'get_engine_config',
    'set_engine_config',
    'euclidean',
    'shape_center',
    'Shape',
    'Circle',
    'Circle3D',
    'Rectangle',
    'Rectangle3D',
    'Line',
    'Drawing',
    'shape_from_dict',
    'drawing_from_dict',
    'load_drawing',
    'Node',
    'Edge',
    'Graph',
    'GraphBuilder',
    'BuildResult',
    'build_graph',
    'proximity_threshold',
    'ShortestPathStrategy',
    'ShortestPathResult',
    'DijkstraStrategy',
    'BFSStrategy',
    'available_strategies',
    'get_strategy',
    'connected_components',
    'is_bipartite',
    'path_distance',
    'PathSession',
    'SessionStore',
    'path_nodes_json',
    'ClickKind',
    'ClickOutcome',
    'InteractionMode',
    'PathSelectionController',
    'SelectionState',
]
