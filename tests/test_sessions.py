import json
import sqlite3

import pytest

from shapegraph.graph import Node
from shapegraph.sessions import PathSession, SessionStore, path_nodes_json


def _path():
    return [Node("n1", 0, 0, label="A"), Node("n2", 30, 40, label="B"), Node("n3", 30, 90, label="C")]


def test_path_nodes_json_lists_labels_and_positions():
    payload = json.loads(path_nodes_json(_path()))
    assert payload == [
        {"label": "A", "x": 0.0, "y": 0.0},
        {"label": "B", "x": 30.0, "y": 40.0},
        {"label": "C", "x": 30.0, "y": 90.0},
    ]
    assert path_nodes_json([]) == "[]"


def test_session_from_path():
    session = PathSession.from_path(
        drawing_id=3,
        algorithm="dijkstra",
        start_label="A",
        end_label="C",
        path=_path(),
        total_distance=100.0,
        execution_time_ms=1.5,
    )
    assert session.algorithm == "DIJKSTRA"
    assert session.path_length == 2
    assert [entry["label"] for entry in session.path_nodes] == ["A", "B", "C"]
    assert session.created_at
    assert session.id is None


def test_store_creates_table(tmp_path):
    db_path = tmp_path / "nested" / "sessions.db"
    SessionStore(db_path)
    with sqlite3.connect(db_path) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert "shortest_path_sessions" in tables


def test_record_and_list_round_trip(tmp_path):
    store = SessionStore(tmp_path / "sessions.db")
    session = PathSession.from_path(
        drawing_id=1,
        algorithm="bfs",
        start_label="A",
        end_label="C",
        path=_path(),
        total_distance=100.0,
        execution_time_ms=0.25,
    )

    row_id = store.record(session)

    assert row_id == session.id
    (loaded,) = store.list_sessions()
    assert loaded == session


def test_list_sessions_filters_by_drawing(tmp_path):
    store = SessionStore(tmp_path / "sessions.db")
    for drawing_id in (1, 2, 1):
        store.record(PathSession(drawing_id, "DIJKSTRA", "A", "B", 1, 10.0))

    assert [s.drawing_id for s in store.list_sessions(drawing_id=1)] == [1, 1]
    assert len(store.list_sessions()) == 3
    assert store.list_sessions(drawing_id=99) == []


def test_store_survives_reopen(tmp_path):
    db_path = tmp_path / "sessions.db"
    SessionStore(db_path).record(PathSession(None, "BFS", "A", "B", 0, 0.0))
    (session,) = SessionStore(db_path).list_sessions()
    assert session.drawing_id is None
    assert session.total_distance == pytest.approx(0.0)
