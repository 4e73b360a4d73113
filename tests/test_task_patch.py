import pytest
from datetime import date, datetime, timezone

from tasktracker.domain.enums import TaskPriority, TaskStatus
from tasktracker.domain.errors import TaskValidationError
from tasktracker.domain.patch import UNSET, TaskPatch
from tasktracker.domain.task import Task, TaskId, UserId

TASK = Task(
    task_id=TaskId("t1"),
    title="A",
    description="B",
    due_date=date(2025, 1, 1),
    assigned_to=UserId("u2"),
    created_by=UserId("u1"),
    created_at=datetime(2025, 1, 1, tzinfo=timezone.utc),
)


def test_unset_is_distinct_from_empty_string():
    patch = TaskPatch(description="")

    assert patch.present_fields() == {"description"}
    assert TaskPatch().description is UNSET
    assert not UNSET


def test_from_raw_treats_none_and_blank_as_absent():
    patch = TaskPatch.from_raw(title=None, description="  ", status="completed")

    assert patch.present_fields() == {"status"}
    assert patch.status is TaskStatus.COMPLETED


def test_from_raw_parses_values():
    patch = TaskPatch.from_raw(due_date="2025-05-06", priority="LOW", assigned_to=" u3 ")

    assert patch.due_date == date(2025, 5, 6)
    assert patch.priority is TaskPriority.LOW
    assert patch.assigned_to == "u3"


def test_from_raw_keeps_unparsable_values_for_validate():
    patch = TaskPatch.from_raw(due_date="soon", priority="urgent", status="done")

    assert patch.priority == "urgent"
    with pytest.raises(TaskValidationError) as exc:
        patch.validate()

    assert exc.value.fields == ["due_date", "priority", "status"]


def test_apply_only_touches_present_fields():
    updated = TaskPatch(title="new", status=TaskStatus.COMPLETED).apply_to(TASK)

    assert updated.title == "new"
    assert updated.status is TaskStatus.COMPLETED
    assert updated.description == TASK.description
    assert updated.created_by == TASK.created_by
    assert updated.created_at == TASK.created_at


def test_empty_patch_returns_same_task():
    assert TaskPatch().apply_to(TASK) is TASK
    assert TaskPatch().present_fields() == frozenset()


def test_validate_rejects_explicit_empty_text_and_raw_enums():
    with pytest.raises(TaskValidationError) as exc:
        TaskPatch(title=" ", description="", priority="high").validate()

    assert exc.value.fields == ["title", "description", "priority"]


def test_validate_rejects_none_and_blank_assignee():
    with pytest.raises(TaskValidationError) as exc:
        TaskPatch(title=None, assigned_to=" ", status=None).validate()

    assert exc.value.fields == ["title", "assigned_to", "status"]


def test_validate_accepts_parsed_values():
    TaskPatch(
        title="t",
        description="d",
        due_date=date(2025, 1, 2),
        priority=TaskPriority.LOW,
        assigned_to=UserId("u3"),
        status=TaskStatus.PENDING,
    ).validate()
