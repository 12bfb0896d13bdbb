from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from task_registry.domain import Priority


class EventType(StrEnum):
    TASK_CREATED = "TaskCreated"
    TASK_COMPLETED = "TaskCompleted"
    TASK_DELETED = "TaskDeleted"
    TASK_REASSIGNED = "TaskReassigned"
    TASK_UPDATED = "TaskUpdated"
    CONTRACT_PAUSED = "ContractPaused"
    CONTRACT_RESUMED = "ContractResumed"


# Event payloads

class TaskCreatedPayload(BaseModel):
    id: int
    description: str
    assigned_to: str
    due_date: int
    priority: Priority


class TaskCompletedPayload(BaseModel):
    id: int


class TaskDeletedPayload(BaseModel):
    id: int


class TaskReassignedPayload(BaseModel):
    id: int
    old_assignee: str
    new_assignee: str


class TaskUpdatedPayload(BaseModel):
    id: int
    description: str
    due_date: int
    priority: Priority


class RegistryStatePayload(BaseModel):
    """Payload of both ContractPaused and ContractResumed."""
    account: str


class Event(BaseModel):
    version: int = Field(ge=1)
    event_type: EventType
    payload: dict[str, Any]
    metadata: dict[str, Any] = Field(default_factory=dict)
    occurred_at: int

    @property
    def task_id(self) -> int | None:
        return self.payload.get("id")


class TaskColumns(BaseModel):
    """Every allocated slot 1..highest_id as parallel columns."""

    ids: list[int] = Field(default_factory=list)
    descriptions: list[str] = Field(default_factory=list)
    assignees: list[str] = Field(default_factory=list)
    completions: list[bool] = Field(default_factory=list)
    due_dates: list[int] = Field(default_factory=list)
    priorities: list[Priority] = Field(default_factory=list)
    created_ats: list[int] = Field(default_factory=list)

    def as_tuple(self):
        return (
            self.ids,
            self.descriptions,
            self.assignees,
            self.completions,
            self.due_dates,
            self.priorities,
            self.created_ats,
        )
