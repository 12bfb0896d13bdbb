from collections.abc import Callable

import structlog
from pydantic import BaseModel

from task_registry import config, db
from task_registry.contracts import Event, EventType

log = structlog.get_logger()

Subscriber = Callable[[Event], None]


class EventLog:
    """
    Ordered audit trail of successful registry mutations.

    With a db_path every event is written to the SQLite sink before it is
    recorded in memory; a sink failure raises and nothing is recorded.
    Subscribers are only called through publish(), after the caller has
    applied the change the event describes.
    """

    def __init__(self, db_path=None, stream_id: str = "registry") -> None:
        self._events: list[Event] = []
        self._subscribers: list[Subscriber] = []
        self.db_path = db_path
        self.stream_id = stream_id
        if db_path is not None:
            db.init_db(db_path)

    @classmethod
    def from_env(cls) -> "EventLog":
        return cls(db_path=config.get_db_path(), stream_id=config.get_stream_id())

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(list(self._events))

    def append(
        self,
        event_type: EventType,
        payload: BaseModel,
        *,
        actor: str,
        occurred_at: int,
    ) -> Event:
        event = Event(
            version=len(self._events) + 1,
            event_type=event_type,
            payload=payload.model_dump(mode="json"),
            metadata={"actor": actor},
            occurred_at=occurred_at,
        )

        if self.db_path is not None:
            db.append_event(
                self.db_path,
                stream_id=self.stream_id,
                expected_version=len(self._events),
                event_type=event.event_type.value,
                payload=event.payload,
                metadata=event.metadata,
                occurred_at=event.occurred_at,
            )

        self._events.append(event)
        return event

    def publish(self, event: Event) -> None:
        for subscriber in list(self._subscribers):
            try:
                subscriber(event)
            except Exception:
                # A listener never undoes a committed mutation
                log.exception(
                    "event_subscriber_failed",
                    event_type=event.event_type.value,
                    version=event.version,
                )

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        self._subscribers.append(subscriber)

        def unsubscribe() -> None:
            if subscriber in self._subscribers:
                self._subscribers.remove(subscriber)

        return unsubscribe

    def query(self, event_type: EventType | None = None, task_id: int | None = None) -> list[Event]:
        return [
            e
            for e in self._events
            if (event_type is None or e.event_type == event_type)
            and (task_id is None or e.task_id == task_id)
        ]

    def load_persisted(self) -> list[dict]:
        if self.db_path is None:
            return []
        return db.load_events(self.db_path, self.stream_id)
