import pytest

from task_registry.registry import TaskRegistry

OWNER = "0xA11CE"
BOB = "0xB0B"
CAROL = "0xCA401"


class FixedClock:
    def __init__(self, now: int = 1_700_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int):
        self.now += seconds


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def registry(clock):
    return TaskRegistry(OWNER, clock=clock)


@pytest.fixture
def events_db(tmp_path, monkeypatch):
    path = tmp_path / "audit" / "events.db"
    monkeypatch.setenv("TASK_REGISTRY_DB_PATH", str(path))
    monkeypatch.setenv("TASK_REGISTRY_STREAM_ID", "test-stream")
    return path
