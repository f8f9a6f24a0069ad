import json
import logging

import pytest

import shapegraph.__main__ as cli
from shapegraph.sessions import SessionStore


def _write_drawing(tmp_path):
    path = tmp_path / "drawing.json"
    shapes = [{"type": "Circle", "x": x, "y": y, "radius": 10} for x, y in [(0, 0), (100, 0), (200, 0), (100, 80)]]
    path.write_text(json.dumps({"name": "cross", "shapes": shapes}), encoding="utf-8")
    return path


def test_main_prints_graph(tmp_path, capsys):
    cli.main([str(_write_drawing(tmp_path)), "--log-level", "WARNING"])
    out = capsys.readouterr().out
    assert "Drawing: cross (4 shapes)" in out
    assert "Nodes (4):" in out
    assert "  A: (0.00, 0.00)" in out
    assert "Edges (3):" in out
    assert "  A -- B: 100.0" in out


def test_main_runs_query_and_records_session(tmp_path, capsys):
    db_path = tmp_path / "sessions.db"
    cli.main(
        [
            str(_write_drawing(tmp_path)),
            "--start",
            "0,0",
            "--end",
            "200,0",
            "--algorithm",
            "bfs",
            "--sessions-db",
            str(db_path),
            "--drawing-id",
            "4",
        ]
    )
    out = capsys.readouterr().out
    assert "Algorithm: BFS (Breadth-First Search)" in out
    assert "Path: A -> B -> C" in out
    assert "Distance: 200.00" in out

    (session,) = SessionStore(db_path).list_sessions(drawing_id=4)
    assert session.algorithm == "BFS"
    assert session.path_length == 2


def test_main_fails_when_start_misses_every_shape(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(_write_drawing(tmp_path)), "--start", "500,500", "--end", "0,0"])
    assert excinfo.value.code == 1


def test_main_requires_both_points(tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        cli.main([str(_write_drawing(tmp_path)), "--start", "0,0"])
    assert excinfo.value.code == 2


def test_main_rejects_malformed_point(tmp_path):
    with pytest.raises(SystemExit):
        cli.main([str(_write_drawing(tmp_path)), "--start", "0;0", "--end", "1,1"])


def test_main_uses_loaded_drawing(tmp_path, monkeypatch, capsys):
    loaded = []
    original = cli.load_drawing

    def _load(path):
        loaded.append(path)
        return original(path)

    monkeypatch.setattr(cli, "load_drawing", _load)
    drawing_path = _write_drawing(tmp_path)
    cli.main([str(drawing_path)])

    assert loaded == [str(drawing_path)]
    assert "Threshold:" in capsys.readouterr().out


def test_parse_point():
    assert cli._parse_point(" 1.5, -2 ") == (1.5, -2.0)
    with pytest.raises(ValueError):
        cli._parse_point("1,2,3")


def test_main_appends_log_records_to_file(tmp_path):
    log_path = tmp_path / "actions.log"
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        with pytest.raises(SystemExit):
            cli.main(
                [
                    str(_write_drawing(tmp_path)),
                    "--start",
                    "500,500",
                    "--end",
                    "0,0",
                    "--log-file",
                    str(log_path),
                ]
            )
    finally:
        for handler in root.handlers[:]:
            if handler not in before:
                root.removeHandler(handler)
                handler.close()

    text = log_path.read_text(encoding="utf-8")
    assert "ERROR:shapegraph.__main__:No shape at start point (500.0, 500.0)" in text
