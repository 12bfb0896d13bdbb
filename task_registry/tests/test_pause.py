import pytest

from task_registry.contracts import EventType
from task_registry.domain import Priority, RegistryState
from task_registry.errors import InvalidStateTransition, Paused, Unauthorized

from conftest import BOB, OWNER


def test_registry_starts_active(registry):
    assert registry.is_contract_paused() is False
    assert registry.state == RegistryState.ACTIVE


def test_only_owner_can_pause_and_resume(registry):
    with pytest.raises(Unauthorized):
        registry.pause_contract(BOB)

    registry.pause_contract(OWNER)

    with pytest.raises(Unauthorized):
        registry.resume_contract(BOB)
    assert registry.is_contract_paused() is True


def test_double_pause_is_invalid(registry):
    registry.pause_contract(OWNER)

    with pytest.raises(InvalidStateTransition) as exc:
        registry.pause_contract(OWNER)

    assert exc.value.state == "PAUSED"
    assert registry.is_contract_paused() is True


def test_resume_while_active_is_invalid(registry):
    with pytest.raises(InvalidStateTransition):
        registry.resume_contract(OWNER)


def test_pause_resume_cycle(registry):
    registry.pause_contract(OWNER)
    registry.resume_contract(OWNER)
    registry.pause_contract(OWNER)

    assert [e.event_type for e in registry.events] == [
        EventType.CONTRACT_PAUSED,
        EventType.CONTRACT_RESUMED,
        EventType.CONTRACT_PAUSED,
    ]
    assert registry.events.query()[0].payload == {"account": OWNER}


def test_paused_registry_rejects_every_gated_mutation(registry):
    registry.create_task(BOB, "a", 1, Priority.LOW)
    registry.pause_contract(OWNER)

    calls = [
        lambda: registry.create_task(BOB, "b", 1, Priority.LOW),
        lambda: registry.complete_task(BOB, 1),
        lambda: registry.delete_task(BOB, 1),
        lambda: registry.owner_delete_task(OWNER, 1),
        lambda: registry.reassign_task(BOB, 1, OWNER),
        lambda: registry.update_task_description(BOB, 1, "c"),
        lambda: registry.update_task_due_date(BOB, 1, 2),
        lambda: registry.update_task_priority(BOB, 1, Priority.HIGH),
    ]
    for call in calls:
        with pytest.raises(Paused):
            call()

    assert registry.highest_id == 1
    assert registry.get_task(1).description == "a"
    assert len(registry.events.query(event_type=EventType.TASK_UPDATED)) == 0


def test_reads_work_while_paused(registry):
    registry.create_task(BOB, "a", 1, Priority.LOW)
    registry.pause_contract(OWNER)

    assert registry.get_task(1).description == "a"
    assert registry.see_tasks(BOB, 0, 10)[0].description == "a"
    assert registry.get_all_tasks().ids == [1]
    assert registry.get_task_count() == 1


def test_resume_reopens_mutations(registry):
    registry.pause_contract(OWNER)
    registry.resume_contract(OWNER)

    assert registry.create_task(BOB, "a", 1, Priority.LOW) == 1
