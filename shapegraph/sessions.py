"""SQLite record of completed shortest-path queries."""

from __future__ import annotations

import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Union

logger = logging.getLogger(__name__)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def path_nodes_json(path: Sequence) -> str:
    """Serialise a node path as ``[{"label": .., "x": .., "y": ..}, ...]``."""

    return json.dumps([{"label": node.label, "x": node.x, "y": node.y} for node in path])


@dataclass
class PathSession:
    drawing_id: Optional[int]
    algorithm: str
    start_label: str
    end_label: str
    path_length: int
    total_distance: float
    path_nodes: List[Dict[str, Any]] = field(default_factory=list)
    execution_time_ms: float = 0.0
    created_at: str = field(default_factory=_utc_now)
    id: Optional[int] = None

    @classmethod
    def from_path(
        cls,
        *,
        drawing_id: Optional[int],
        algorithm: str,
        start_label: str,
        end_label: str,
        path: Sequence,
        total_distance: float,
        execution_time_ms: float,
    ) -> "PathSession":
        """Build a session for ``path``; an empty path records zero edges."""

        return cls(
            drawing_id=drawing_id,
            algorithm=algorithm.upper(),
            start_label=start_label,
            end_label=end_label,
            path_length=max(len(path) - 1, 0),
            total_distance=total_distance,
            path_nodes=json.loads(path_nodes_json(path)),
            execution_time_ms=execution_time_ms,
        )


class SessionStore:
    """Append-only store of :class:`PathSession` rows."""

    def __init__(self, db_path: Union[str, Path]):
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _init_db(self) -> None:
        with self._get_conn() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS shortest_path_sessions (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    drawing_id INTEGER,
                    algorithm_used TEXT NOT NULL,
                    start_shape_label TEXT NOT NULL,
                    end_shape_label TEXT NOT NULL,
                    path_length INTEGER NOT NULL,
                    total_distance REAL NOT NULL,
                    path_nodes TEXT NOT NULL,
                    execution_time_ms REAL NOT NULL,
                    created_at TEXT NOT NULL
                );

                CREATE INDEX IF NOT EXISTS idx_sessions_drawing
                    ON shortest_path_sessions(drawing_id);
                """
            )

    @contextmanager
    def _get_conn(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def record(self, session: PathSession) -> int:
        with self._get_conn() as conn:
            cursor = conn.execute(
                """
                INSERT INTO shortest_path_sessions
                    (drawing_id, algorithm_used, start_shape_label, end_shape_label,
                     path_length, total_distance, path_nodes, execution_time_ms, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    session.drawing_id,
                    session.algorithm,
                    session.start_label,
                    session.end_label,
                    session.path_length,
                    session.total_distance,
                    json.dumps(session.path_nodes),
                    session.execution_time_ms,
                    session.created_at,
                ),
            )
            row_id = int(cursor.lastrowid)
        session.id = row_id
        logger.info(
            "Recorded %s session %s -> %s (%d edges, %.2f)",
            session.algorithm,
            session.start_label,
            session.end_label,
            session.path_length,
            session.total_distance,
        )
        return row_id

    def list_sessions(self, drawing_id: Optional[int] = None) -> List[PathSession]:
        query = "SELECT * FROM shortest_path_sessions"
        params: tuple = ()
        if drawing_id is not None:
            query += " WHERE drawing_id = ?"
            params = (drawing_id,)
        query += " ORDER BY id"
        with self._get_conn() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._row_to_session(row) for row in rows]

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> PathSession:
        return PathSession(
            drawing_id=row["drawing_id"],
            algorithm=row["algorithm_used"],
            start_label=row["start_shape_label"],
            end_label=row["end_shape_label"],
            path_length=row["path_length"],
            total_distance=row["total_distance"],
            path_nodes=json.loads(row["path_nodes"]),
            execution_time_ms=row["execution_time_ms"],
            created_at=row["created_at"],
            id=row["id"],
        )


__all__ = ["PathSession", "SessionStore", "path_nodes_json"]
