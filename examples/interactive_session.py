"""Example pipeline: drive the two-click controller and keep a session log."""

import tempfile
from pathlib import Path

from shapegraph import Circle, Drawing, PathSelectionController, Rectangle, SessionStore


def main() -> None:
    drawing = Drawing(name="rooms")
    for shape in (
        Rectangle(0, 0, 80, 60),
        Circle(150, 30, 15),
        Rectangle(220, 0, 80, 60),
        Circle(150, 160, 15),
    ):
        drawing.add_shape(shape)

    with tempfile.TemporaryDirectory() as tmp:
        store = SessionStore(Path(tmp) / "sessions.db")
        controller = PathSelectionController(drawing, session_store=store, drawing_id=1)
        controller.activate()
        print(controller.status_message)

        for x, y in [(40, 30), (260, 30), (150, 160), (40, 30)]:
            outcome = controller.handle_click(x, y)
            print(f"click ({x}, {y}): {outcome.kind.value}")
            print(f"  {controller.status_message}")

        controller.set_algorithm("bfs")
        controller.handle_click(40, 30)
        controller.handle_click(260, 30)
        controller.deactivate()

        print("Recorded sessions:")
        for session in store.list_sessions():
            print(
                f"  [{session.id}] {session.algorithm} {session.start_label} -> {session.end_label}: "
                f"{session.path_length} segment(s), {session.total_distance:.2f}"
            )


if __name__ == "__main__":
    main()
