import threading
import time

import structlog

from task_registry.auth import OPERATION_ROLES, PAUSE_GATED
from task_registry.capability_resolver import resolve_roles
from task_registry.contracts import (
    EventType,
    RegistryStatePayload,
    TaskColumns,
    TaskCompletedPayload,
    TaskCreatedPayload,
    TaskDeletedPayload,
    TaskReassignedPayload,
    TaskUpdatedPayload,
)
from task_registry.domain import (
    STATE_TRANSITIONS,
    ZERO_ADDRESS,
    ZERO_TASK,
    Priority,
    RegistryState,
    Task,
)
from task_registry.errors import (
    AlreadyCompleted,
    InvalidID,
    InvalidStateTransition,
    Paused,
    RegistryError,
    Unauthorized,
)
from task_registry.events import EventLog

log = structlog.get_logger()


def _unix_now() -> int:
    return int(time.time())


class TaskRegistry:
    """
    In-memory task registry with one fixed administrator and a pause switch.

    Every public method runs under a single re-entrant lock, so calls are
    applied one at a time and readers never see a half-applied mutation.
    Failed calls change nothing and emit no event.
    """

    def __init__(self, owner: str, *, clock=None, event_log: EventLog | None = None) -> None:
        if not owner:
            raise ValueError("owner identity is required")

        self._owner = owner
        self._clock = clock or _unix_now
        self.events = event_log if event_log is not None else EventLog()

        self._tasks: dict[int, Task] = {}
        self._live: set[int] = set()
        self._task_count = 0
        self._state = RegistryState.ACTIVE
        self._lock = threading.RLock()

    # ---- accessors ----

    @property
    def owner(self) -> str:
        return self._owner

    @property
    def highest_id(self) -> int:
        with self._lock:
            return self._task_count

    @property
    def state(self) -> RegistryState:
        with self._lock:
            return self._state

    def is_contract_paused(self) -> bool:
        with self._lock:
            return self._state == RegistryState.PAUSED

    def get_task_count(self) -> int:
        """Live tasks only. Deleted IDs stay allocated but are not counted."""
        with self._lock:
            return len(self._live)

    # ---- guards ----

    def _reject(self, error: RegistryError) -> RegistryError:
        log.info("registry_call_rejected", code=error.code, **error.context)
        return error

    def _check_id(self, task_id: int) -> Task:
        if not 1 <= task_id <= self._task_count:
            raise self._reject(InvalidID(task_id, self._task_count))
        return self._tasks.get(task_id, ZERO_TASK)

    def _authorize(self, caller: str, operation: str, task: Task | None = None, task_id: int | None = None):
        required = OPERATION_ROLES.get(operation)
        if required is None:
            return
        if required not in resolve_roles(caller, self._owner, task):
            raise self._reject(Unauthorized(caller, operation, task_id))

    def _check_not_paused(self, operation: str):
        if operation in PAUSE_GATED and self._state == RegistryState.PAUSED:
            raise self._reject(Paused(operation))

    def _guard(self, caller: str, operation: str, task_id: int) -> Task:
        # id, then role, then pause
        task = self._check_id(task_id)
        self._authorize(caller, operation, task, task_id)
        self._check_not_paused(operation)
        return task

    # ---- writes ----

    def _store(self, task_id: int, task: Task, event_type: EventType, payload, caller: str):
        # The event is persisted first; a sink failure leaves the registry untouched.
        event = self.events.append(
            event_type, payload, actor=caller, occurred_at=self._clock()
        )
        self._tasks[task_id] = task
        return event

    def create_task(self, caller: str, description: str, due_date: int, priority: Priority) -> int:
        with self._lock:
            if caller == ZERO_ADDRESS:
                raise self._reject(Unauthorized(caller, "create_task"))
            self._check_not_paused("create_task")

            task_id = self._task_count + 1
            task = Task(
                description=description,
                assigned_to=caller,
                completed=False,
                due_date=due_date,
                priority=Priority(priority),
                created_at=self._clock(),
            )
            payload = TaskCreatedPayload(
                id=task_id,
                description=task.description,
                assigned_to=task.assigned_to,
                due_date=task.due_date,
                priority=task.priority,
            )
            event = self._store(task_id, task, EventType.TASK_CREATED, payload, caller)
            self._task_count = task_id
            self._live.add(task_id)
            self.events.publish(event)

        log.info("task_created", task_id=task_id, assignee=caller, priority=task.priority.name)
        return task_id

    def complete_task(self, caller: str, task_id: int) -> None:
        with self._lock:
            task = self._guard(caller, "complete_task", task_id)
            if task.completed:
                raise self._reject(AlreadyCompleted(task_id))

            event = self._store(
                task_id,
                task.model_copy(update={"completed": True}),
                EventType.TASK_COMPLETED,
                TaskCompletedPayload(id=task_id),
                caller,
            )
            self.events.publish(event)

        log.info("task_completed", task_id=task_id, assignee=caller)

    def _delete(self, caller: str, task_id: int, operation: str) -> None:
        with self._lock:
            self._guard(caller, operation, task_id)
            event = self._store(
                task_id, ZERO_TASK, EventType.TASK_DELETED, TaskDeletedPayload(id=task_id), caller
            )
            self._live.discard(task_id)
            self.events.publish(event)

        log.info("task_deleted", task_id=task_id, actor=caller, via=operation)

    def delete_task(self, caller: str, task_id: int) -> None:
        self._delete(caller, task_id, "delete_task")

    def owner_delete_task(self, caller: str, task_id: int) -> None:
        self._delete(caller, task_id, "owner_delete_task")

    def reassign_task(self, caller: str, task_id: int, new_assignee: str) -> None:
        with self._lock:
            task = self._guard(caller, "reassign_task", task_id)
            payload = TaskReassignedPayload(
                id=task_id, old_assignee=task.assigned_to, new_assignee=new_assignee
            )
            event = self._store(
                task_id,
                task.model_copy(update={"assigned_to": new_assignee}),
                EventType.TASK_REASSIGNED,
                payload,
                caller,
            )
            self.events.publish(event)

        log.info(
            "task_reassigned",
            task_id=task_id,
            old_assignee=payload.old_assignee,
            new_assignee=new_assignee,
        )

    def _update(self, caller: str, task_id: int, operation: str, **changes) -> None:
        with self._lock:
            task = self._guard(caller, operation, task_id)
            # model_copy skips validation
            updated = Task.model_validate({**task.model_dump(), **changes})
            payload = TaskUpdatedPayload(
                id=task_id,
                description=updated.description,
                due_date=updated.due_date,
                priority=updated.priority,
            )
            event = self._store(task_id, updated, EventType.TASK_UPDATED, payload, caller)
            self.events.publish(event)

        log.info("task_updated", task_id=task_id, fields=sorted(changes))

    def update_task_description(self, caller: str, task_id: int, description: str) -> None:
        self._update(caller, task_id, "update_task_description", description=description)

    def update_task_due_date(self, caller: str, task_id: int, due_date: int) -> None:
        self._update(caller, task_id, "update_task_due_date", due_date=due_date)

    def update_task_priority(self, caller: str, task_id: int, priority: Priority) -> None:
        self._update(caller, task_id, "update_task_priority", priority=Priority(priority))

    # ---- pause switch ----

    def _transition(self, caller: str, operation: str) -> None:
        with self._lock:
            self._authorize(caller, operation)

            allowed = STATE_TRANSITIONS[self._state]
            if operation not in allowed:
                raise self._reject(InvalidStateTransition(self._state.value, operation))

            event_type = (
                EventType.CONTRACT_PAUSED
                if operation == "pause_contract"
                else EventType.CONTRACT_RESUMED
            )
            event = self.events.append(
                event_type,
                RegistryStatePayload(account=caller),
                actor=caller,
                occurred_at=self._clock(),
            )
            self._state = allowed[operation]
            self.events.publish(event)

        log.info(
            "registry_paused" if event_type == EventType.CONTRACT_PAUSED else "registry_resumed",
            account=caller,
        )

    def pause_contract(self, caller: str) -> None:
        self._transition(caller, "pause_contract")

    def resume_contract(self, caller: str) -> None:
        self._transition(caller, "resume_contract")

    # ---- reads ----

    def _slots(self):
        # Every allocated id, deleted ones included, in ascending order
        for task_id in range(1, self._task_count + 1):
            yield task_id, self._tasks.get(task_id, ZERO_TASK)

    def get_task(self, task_id: int) -> Task:
        with self._lock:
            return self._check_id(task_id)

    def see_tasks(self, caller: str, page: int, page_size: int) -> list[Task]:
        """
        One page of the caller's own tasks, ordered by due date.
        Ties keep id order. Pages past the end come back empty.
        """
        if page < 0 or page_size < 0:
            raise ValueError("page and page_size must be non-negative")

        with self._lock:
            mine = [task for _, task in self._slots() if task.assigned_to == caller]

        mine.sort(key=lambda task: task.due_date)
        start = page * page_size
        if page_size == 0 or start >= len(mine):
            return []
        return mine[start:start + page_size]

    def get_tasks_by_priority(self, priority: Priority) -> list[int]:
        priority = Priority(priority)
        with self._lock:
            return [task_id for task_id, task in self._slots() if task.priority == priority]

    def get_tasks_by_completion(self, completed: bool) -> list[int]:
        with self._lock:
            return [task_id for task_id, task in self._slots() if task.completed == completed]

    def task_count_by_assignee(self, assignee: str) -> int:
        with self._lock:
            return sum(1 for _, task in self._slots() if task.assigned_to == assignee)

    def get_all_tasks(self) -> TaskColumns:
        columns = TaskColumns()
        with self._lock:
            for task_id, task in self._slots():
                columns.ids.append(task_id)
                columns.descriptions.append(task.description)
                columns.assignees.append(task.assigned_to)
                columns.completions.append(task.completed)
                columns.due_dates.append(task.due_date)
                columns.priorities.append(task.priority)
                columns.created_ats.append(task.created_at)
        return columns
