import argparse
import logging
import sys
from typing import Optional, Sequence, Tuple

from shapegraph import (
    ClickKind,
    PathSelectionController,
    SessionStore,
    available_strategies,
    get_engine_config,
    load_drawing,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s:%(name)s:%(message)s"


def _configure_logging(level: str, log_file: Optional[str] = None) -> None:
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=log_level, format=LOG_FORMAT)
    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(log_level)
        handler.setFormatter(logging.Formatter("%(asctime)s " + LOG_FORMAT))
        logging.getLogger().addHandler(handler)


def _parse_point(value: str) -> Tuple[float, float]:
    parts = [part.strip() for part in value.split(",")]
    if len(parts) != 2:
        raise ValueError(f"expected X,Y but got {value!r}")
    return float(parts[0]), float(parts[1])


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Build a proximity graph from a drawing and query shortest paths")
    parser.add_argument("path", help="Path to the drawing JSON document")
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Also append log records to this file",
    )
    parser.add_argument(
        "--algorithm",
        choices=available_strategies(),
        default=get_engine_config().default_algorithm,
        help="Shortest path algorithm (default: %(default)s)",
    )
    parser.add_argument(
        "--start",
        type=_parse_point,
        help="Canvas point inside the start shape, e.g. 10,20",
    )
    parser.add_argument(
        "--end",
        type=_parse_point,
        help="Canvas point inside the end shape, e.g. 300,40",
    )
    parser.add_argument(
        "--sessions-db",
        help="Record the query in this SQLite database",
    )
    parser.add_argument(
        "--drawing-id",
        type=int,
        help="Drawing identifier stored with recorded sessions",
    )
    args = parser.parse_args(argv)

    if (args.start is None) != (args.end is None):
        parser.error("--start and --end must be given together")

    _configure_logging(args.log_level, args.log_file)

    logger.info("Loading drawing from %s", args.path)
    drawing = load_drawing(args.path)

    store = SessionStore(args.sessions_db) if args.sessions_db else None
    controller = PathSelectionController(
        drawing,
        algorithm=args.algorithm,
        session_store=store,
        drawing_id=args.drawing_id,
    )
    controller.activate()
    graph = controller.graph

    print(f"Drawing: {drawing.name} ({drawing.shape_count} shapes)")
    print(f"Threshold: {controller.threshold:.2f}")
    print(f"Nodes ({graph.node_count}):")
    for node in graph.nodes:
        print(f"  {node.label}: ({node.x:.2f}, {node.y:.2f})")
    print(f"Edges ({graph.edge_count}):")
    for edge in graph.edges:
        print(f"  {edge.source.label} -- {edge.target.label}: {edge.label}")

    if args.start is not None:
        first = controller.handle_click(*args.start)
        if first.kind is not ClickKind.START_SELECTED:
            logger.error("No shape at start point %s", args.start)
            controller.deactivate()
            raise SystemExit(1)
        outcome = controller.handle_click(*args.end)
        print(f"Algorithm: {controller.strategy.algorithm_name}")
        print(f"Result: {outcome.kind.value}")
        if outcome.message:
            print(outcome.message)
        if outcome.path:
            print("Path: " + " -> ".join(node.label for node in outcome.path))
            print(f"Distance: {outcome.total_distance:.2f}")
        if not outcome.completed:
            controller.deactivate()
            raise SystemExit(1)

    controller.deactivate()


if __name__ == "__main__":
    main(sys.argv[1:])
