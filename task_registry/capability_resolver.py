from task_registry.auth import ADMIN, ASSIGNEE
from task_registry.domain import ZERO_ADDRESS, Task


def resolve_roles(caller: str, owner: str, task: Task | None = None) -> set[str]:
    """
    Roles the caller holds, optionally with respect to one task.
    The zero identity holds nothing, even on a task reassigned to it.
    """

    if caller == ZERO_ADDRESS:
        return set()

    roles = set()
    if caller == owner:
        roles.add(ADMIN)

    if task is not None and task.assigned_to == caller:
        roles.add(ASSIGNEE)

    return roles
