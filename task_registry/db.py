import json
import sqlite3
from pathlib import Path

# IMPORTANT:
# the events table is an audit trail of the in-memory registry.
# Registry state is never rebuilt from it.
EVENTS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS events (
    event_id INTEGER PRIMARY KEY AUTOINCREMENT,

    stream_id TEXT NOT NULL,
    stream_version INTEGER NOT NULL,

    event_type TEXT NOT NULL,
    event_payload TEXT NOT NULL,
    event_metadata TEXT NOT NULL,

    occurred_at INTEGER NOT NULL,

    UNIQUE(stream_id, stream_version)
);
"""


class ConcurrencyError(Exception):
    pass


def get_connection(db_path: str | Path):
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str | Path):
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    try:
        conn.execute(EVENTS_TABLE_SQL)
        conn.commit()
    finally:
        conn.close()


def load_events(db_path: str | Path, stream_id: str):
    conn = get_connection(db_path)
    try:
        rows = conn.execute(
            """
            SELECT event_type, event_payload, event_metadata, stream_version, occurred_at
            FROM events
            WHERE stream_id = ?
            ORDER BY stream_version ASC
            """,
            (stream_id,)
        ).fetchall()
    finally:
        conn.close()

    return [
        {
            "event_type": row["event_type"],
            "payload": json.loads(row["event_payload"]),
            "metadata": json.loads(row["event_metadata"]),
            "version": row["stream_version"],
            "occurred_at": row["occurred_at"],
        }
        for row in rows
    ]


def append_event(
    db_path: str | Path,
    *,
    stream_id: str,
    expected_version: int,
    event_type: str,
    payload: dict,
    metadata: dict,
    occurred_at: int
) -> int:
    conn = get_connection(db_path)
    try:
        cur = conn.cursor()

        # Get current stream version
        cur.execute(
            "SELECT MAX(stream_version) FROM events WHERE stream_id = ?",
            (stream_id,)
        )
        row = cur.fetchone()
        found_version = row[0] if row and row[0] is not None else 0

        if found_version != expected_version:
            raise ConcurrencyError(
                f"Expected version {expected_version}, found {found_version}"
            )

        next_version = found_version + 1

        cur.execute(
            """
            INSERT INTO events (
                stream_id,
                stream_version,
                event_type,
                event_payload,
                event_metadata,
                occurred_at
            )
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                stream_id,
                next_version,
                event_type,
                json.dumps(payload),
                json.dumps(metadata),
                occurred_at
            )
        )

        conn.commit()
        return next_version

    finally:
        conn.close()
