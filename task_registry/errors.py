class RegistryError(Exception):
    """Base for every rejected registry call. `code` is stable; callers branch on it."""

    code = "registry_error"

    def __init__(self, message: str, **context) -> None:
        super().__init__(message)
        self.context = context


class Unauthorized(RegistryError):
    code = "unauthorized"

    def __init__(self, caller: str, operation: str, task_id: int | None = None) -> None:
        if task_id is None:
            message = f"{caller!r} may not call {operation}"
        else:
            message = f"{caller!r} may not call {operation} on task {task_id}"
        super().__init__(message, caller=caller, operation=operation, task_id=task_id)
        self.caller = caller
        self.operation = operation
        self.task_id = task_id


class InvalidID(RegistryError):
    code = "invalid_id"

    def __init__(self, task_id: int, highest_id: int) -> None:
        super().__init__(
            f"task id {task_id} outside 1..{highest_id}",
            task_id=task_id,
            highest_id=highest_id,
        )
        self.task_id = task_id
        self.highest_id = highest_id


class AlreadyCompleted(RegistryError):
    code = "already_completed"

    def __init__(self, task_id: int) -> None:
        super().__init__(f"task {task_id} is already completed", task_id=task_id)
        self.task_id = task_id


class InvalidStateTransition(RegistryError):
    code = "invalid_state_transition"

    def __init__(self, state: str, operation: str) -> None:
        super().__init__(
            f"{operation} not allowed from state {state}",
            state=state,
            operation=operation,
        )
        self.state = state
        self.operation = operation


class Paused(RegistryError):
    code = "paused"

    def __init__(self, operation: str) -> None:
        super().__init__(f"{operation} rejected: registry is paused", operation=operation)
        self.operation = operation
