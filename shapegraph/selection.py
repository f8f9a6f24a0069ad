"""Two-click start/end selection over a drawing's proximity graph.

:class:`PathSelectionController` owns the interaction state. It builds the
graph when path selection is switched on, maps clicks to shapes and nodes,
rebuilds when the drawing and the cached mapping drift apart, runs the
selected strategy and leaves the result in the graph's highlight flags for a
renderer to pick up.
"""

from __future__ import annotations

import logging
import math
import sqlite3
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from .config import EngineConfig, get_engine_config
from .graph.algorithms import ShortestPathStrategy, get_strategy, path_distance
from .graph.builder import GraphBuilder
from .graph.model import Graph, Node
from .sessions import PathSession, SessionStore
from .shapes import Drawing, Shape

logger = logging.getLogger(__name__)

PROMPT_START = "Shortest path mode: click the START shape."
PROMPT_END = "Start shape {label} selected. Click the END shape."
NOT_ENOUGH_SHAPES = "Draw at least two shapes to use shortest path mode."
SAME_SHAPE = "End shape cannot be the same as the start shape. Select a different end shape."
START_LOST = "The selected start shape is no longer available. Click the START shape."
NO_PATH = "No path found between {start} and {end}."
PATH_FOUND = "Shortest path found: {start} -> {end} ({segments} segments, {distance:.2f} units)"
NORMAL_MODE = "Normal mode."

TimerFactory = Callable[[float, Callable[[], None]], Any]


class InteractionMode(Enum):
    NORMAL = "NORMAL"
    PATH_SELECTION = "PATH_SELECTION"


class SelectionState(Enum):
    IDLE = "idle"
    AWAITING_START = "awaiting_start"
    AWAITING_END = "awaiting_end"


class ClickKind(Enum):
    IGNORED = "ignored"
    START_SELECTED = "start_selected"
    SAME_SHAPE_REJECTED = "same_shape_rejected"
    START_LOST = "start_lost"
    NO_PATH = "no_path"
    PATH_FOUND = "path_found"


@dataclass
class ClickOutcome:
    """What a single click did; ``path`` is filled only for completed queries."""

    kind: ClickKind
    path: List[Node] = field(default_factory=list)
    total_distance: float = 0.0
    execution_time_ms: float = 0.0
    message: str = ""

    @property
    def completed(self) -> bool:
        return self.kind in (ClickKind.NO_PATH, ClickKind.PATH_FOUND)


def _daemon_timer(delay: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


class PathSelectionController:
    def __init__(
        self,
        drawing: Drawing,
        *,
        algorithm: Optional[str] = None,
        config: Optional[EngineConfig] = None,
        builder: Optional[GraphBuilder] = None,
        session_store: Optional[SessionStore] = None,
        drawing_id: Optional[int] = None,
        timer_factory: Optional[TimerFactory] = None,
    ):
        self.config = config or get_engine_config()
        self.drawing = drawing
        self.builder = builder or GraphBuilder(self.config)
        self.session_store = session_store
        self.drawing_id = drawing_id
        self._strategy: ShortestPathStrategy = get_strategy(algorithm or self.config.default_algorithm)
        self._timer_factory = timer_factory or _daemon_timer
        self._timer: Any = None

        self.mode = InteractionMode.NORMAL
        self.state = SelectionState.IDLE
        self.graph: Optional[Graph] = None
        self.node_for_shape: Dict[str, Node] = {}
        self.threshold = math.inf
        self.status_message = ""
        self._start_shape: Optional[Shape] = None

    @property
    def strategy(self) -> ShortestPathStrategy:
        return self._strategy

    @property
    def is_active(self) -> bool:
        return self.mode is InteractionMode.PATH_SELECTION

    @property
    def start_shape(self) -> Optional[Shape]:
        return self._start_shape

    # -- mode -------------------------------------------------------------

    def activate(self) -> None:
        self.mode = InteractionMode.PATH_SELECTION
        self.state = SelectionState.AWAITING_START
        self._start_shape = None
        self._rebuild()
        self.graph.reset_highlights()
        if self.drawing.shape_count < 2:
            logger.info("Path selection enabled with %d shape(s); nothing to connect", self.drawing.shape_count)
            self.status_message = NOT_ENOUGH_SHAPES
            return
        logger.info("Path selection enabled, graph has %d nodes", self.graph.node_count)
        self.status_message = PROMPT_START

    def deactivate(self) -> None:
        self._cancel_timer()
        self.mode = InteractionMode.NORMAL
        self.state = SelectionState.IDLE
        self._start_shape = None
        if self.graph is not None:
            self.graph.reset_highlights()
        self.node_for_shape.clear()
        self.status_message = NORMAL_MODE
        logger.info("Path selection disabled")

    def toggle(self) -> InteractionMode:
        if self.is_active:
            self.deactivate()
        else:
            self.activate()
        return self.mode

    def set_algorithm(self, name: str) -> bool:
        try:
            strategy = get_strategy(name)
        except ValueError:
            logger.error("Unknown shortest path algorithm %r", name)
            return False
        self._strategy = strategy
        self.status_message = f"Shortest path algorithm: {strategy.algorithm_name}"
        logger.info("Shortest path algorithm set to %s", strategy.algorithm_name)
        return True

    # -- clicks -----------------------------------------------------------

    def handle_click(self, x: float, y: float) -> ClickOutcome:
        if not self.is_active or self.drawing.shape_count == 0:
            return ClickOutcome(ClickKind.IGNORED)

        shape = self.drawing.find_shape_at(x, y)
        if shape is None:
            logger.debug("Click at (%.1f, %.1f) hit no shape", x, y)
            return ClickOutcome(ClickKind.IGNORED)

        if self._needs_rebuild(shape):
            logger.info("Drawing changed since the last build, rebuilding graph")
            self._rebuild()
        else:
            logger.debug("Reusing graph with %d nodes", self.graph.node_count)

        node = self.node_for_shape.get(shape.id)
        if node is None:
            logger.error("Shape %s has no node after rebuild", shape.id)
            return ClickOutcome(ClickKind.IGNORED)

        if self._start_shape is None:
            return self._select_start(shape, node)

        start_node = self.node_for_shape.get(self._start_shape.id)
        if start_node is None:
            logger.error("Start shape %s can no longer be mapped to a node", self._start_shape.id)
            self._start_shape = None
            self.state = SelectionState.AWAITING_START
            self.graph.reset_highlights()
            self.status_message = START_LOST
            return ClickOutcome(ClickKind.START_LOST, message=self.status_message)

        if start_node == node:
            logger.info("End click on start node %s ignored", node.label)
            self.status_message = SAME_SHAPE
            return ClickOutcome(ClickKind.SAME_SHAPE_REJECTED, message=self.status_message)

        return self._complete(start_node, node)

    def _select_start(self, shape: Shape, node: Node) -> ClickOutcome:
        self._cancel_timer()
        self._start_shape = shape
        node.selected = True
        self.state = SelectionState.AWAITING_END
        self.status_message = PROMPT_END.format(label=node.label)
        logger.info("Start node %s selected", node.label)
        return ClickOutcome(ClickKind.START_SELECTED, message=self.status_message)

    def _complete(self, start: Node, end: Node) -> ClickOutcome:
        graph = self.graph
        graph.reset_highlights()
        start.selected = False
        logger.info("Computing %s path %s -> %s", self._strategy.algorithm_name, start.label, end.label)

        began = time.perf_counter()
        path = self._strategy.find_shortest_path(graph, start, end)
        elapsed_ms = (time.perf_counter() - began) * 1000.0

        self._start_shape = None
        self.state = SelectionState.AWAITING_START

        if not path:
            self.status_message = NO_PATH.format(start=start.label, end=end.label)
            logger.info("No path between %s and %s", start.label, end.label)
            outcome = ClickOutcome(
                ClickKind.NO_PATH, execution_time_ms=elapsed_ms, message=self.status_message
            )
        else:
            total = path_distance(path)
            graph.highlight_path(path)
            graph.set_deemphasize_non_highlighted(True)
            self.status_message = PATH_FOUND.format(
                start=start.label, end=end.label, segments=len(path) - 1, distance=total
            )
            logger.info(
                "Path %s found (%d nodes, distance %.2f, %.3f ms)",
                " -> ".join(node.label for node in path),
                len(path),
                total,
                elapsed_ms,
            )
            outcome = ClickOutcome(
                ClickKind.PATH_FOUND,
                path=path,
                total_distance=total,
                execution_time_ms=elapsed_ms,
                message=self.status_message,
            )

        self._record_session(start, end, outcome)
        self._schedule_status_reset()
        return outcome

    # -- graph cache ------------------------------------------------------

    def _needs_rebuild(self, shape: Shape) -> bool:
        if self.graph is None:
            return True
        count = self.drawing.shape_count
        return (
            count != self.graph.node_count
            or len(self.node_for_shape) != count
            or shape.id not in self.node_for_shape
        )

    def _rebuild(self) -> None:
        result = self.builder.build(self.drawing.shapes)
        self.graph = result.graph
        self.node_for_shape = dict(result.node_for_shape)
        self.threshold = result.threshold
        if self._start_shape is not None:
            start_node = self.node_for_shape.get(self._start_shape.id)
            if start_node is not None:
                start_node.selected = True

    # -- side effects -----------------------------------------------------

    def _record_session(self, start: Node, end: Node, outcome: ClickOutcome) -> None:
        if self.session_store is None:
            return
        session = PathSession.from_path(
            drawing_id=self.drawing_id,
            algorithm=self._strategy.key,
            start_label=start.label,
            end_label=end.label,
            path=outcome.path,
            total_distance=outcome.total_distance,
            execution_time_ms=outcome.execution_time_ms,
        )
        try:
            self.session_store.record(session)
        except (sqlite3.Error, OSError):
            logger.exception("Could not record path session %s -> %s", start.label, end.label)

    def _schedule_status_reset(self) -> None:
        self._cancel_timer()
        self._timer = self._timer_factory(self.config.status_reset_delay, self._reset_status)
        self._timer.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _reset_status(self) -> None:
        if self.mode is InteractionMode.PATH_SELECTION and self.state is SelectionState.AWAITING_START:
            self.status_message = PROMPT_START


__all__ = [
    "ClickKind",
    "ClickOutcome",
    "InteractionMode",
    "PathSelectionController",
    "SelectionState",
]
