# Canonical role names
ADMIN = "admin"
ASSIGNEE = "assignee"


# Role registry (single source of truth). Operations missing here need no role.
OPERATION_ROLES = {
    "complete_task": ASSIGNEE,
    "delete_task": ASSIGNEE,
    "reassign_task": ASSIGNEE,
    "update_task_description": ASSIGNEE,
    "update_task_due_date": ASSIGNEE,
    "update_task_priority": ASSIGNEE,
    "owner_delete_task": ADMIN,
    "pause_contract": ADMIN,
    "resume_contract": ADMIN,
}

# Operations rejected while the registry is paused
PAUSE_GATED = {
    "create_task",
    "complete_task",
    "delete_task",
    "owner_delete_task",
    "reassign_task",
    "update_task_description",
    "update_task_due_date",
    "update_task_priority",
}
