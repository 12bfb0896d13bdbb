"""Configuration read from the environment at call time."""

import os
from pathlib import Path


def get_db_path() -> Path | None:
    """SQLite file for the audit-event sink, or None to keep events in memory only."""
    raw = os.getenv("TASK_REGISTRY_DB_PATH")
    if not raw:
        return None
    return Path(raw)


def get_stream_id() -> str:
    return os.getenv("TASK_REGISTRY_STREAM_ID", "registry")


def get_log_format() -> str:
    return os.getenv("TASK_REGISTRY_LOG_FORMAT", "dev")


def get_log_level() -> str:
    return os.getenv("TASK_REGISTRY_LOG_LEVEL", "INFO")
