from enum import IntEnum, StrEnum

from pydantic import BaseModel, ConfigDict

# Identity that owns nothing. Deleted records carry it as their assignee.
ZERO_ADDRESS = ""


class Priority(IntEnum):
    LOW = 0
    MEDIUM = 1
    HIGH = 2


class RegistryState(StrEnum):
    ACTIVE = "ACTIVE"
    PAUSED = "PAUSED"


# Active -> Paused via pause_contract, Paused -> Active via resume_contract
STATE_TRANSITIONS = {
    RegistryState.ACTIVE: {
        "pause_contract": RegistryState.PAUSED
    },
    RegistryState.PAUSED: {
        "resume_contract": RegistryState.ACTIVE
    },
}


class Task(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str = ""
    assigned_to: str = ZERO_ADDRESS
    completed: bool = False
    due_date: int = 0
    priority: Priority = Priority.LOW
    created_at: int = 0

    def is_zero(self) -> bool:
        return self == ZERO_TASK


ZERO_TASK = Task()
