"""Example pipeline: build the proximity graph of a drawing and compare strategies."""

from pathlib import Path

from shapegraph import BFSStrategy, DijkstraStrategy, build_graph, load_drawing, path_distance

DRAWING = Path(__file__).parent / "drawings" / "house.json"


def main() -> None:
    drawing = load_drawing(DRAWING)
    result = build_graph(drawing.shapes)
    graph = result.graph

    print(f"Threshold: {result.threshold:.2f}")
    print(f"Nodes ({graph.node_count}):")
    for node in graph.nodes:
        print(f"  {node.label}: ({node.x:.1f}, {node.y:.1f})")
    print(f"Edges ({graph.edge_count}):")
    for edge in graph.edges:
        print(f"  {edge.source.label} -- {edge.target.label}: {edge.label}")

    shapes = drawing.shapes
    source = result.node_for(shapes[0])
    target = result.node_for(shapes[-1])
    for strategy in (DijkstraStrategy(), BFSStrategy()):
        path = strategy.find_shortest_path(graph, source, target)
        route = " -> ".join(node.label for node in path)
        print(f"{strategy.algorithm_name}: {route} ({path_distance(path):.2f})")


if __name__ == "__main__":
    main()
