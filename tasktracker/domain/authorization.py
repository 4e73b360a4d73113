from __future__ import annotations

from enum import Enum

from tasktracker.domain.errors import TaskForbiddenError
from tasktracker.domain.patch import TaskPatch
from tasktracker.domain.task import Principal, Task


### COMMENTS
# ==========================================================
# Field-group authorization (domain/authorization.py)
# ==========================================================
# Status group  {status}                                         -> assignee or creator
# Detail group  {title, description, due_date, priority, assigned_to} -> creator only
# Delete                                                         -> creator only
#
# - Always evaluated against the stored task, before the patch is applied.
# - Every touched group must pass; a patch touching no group is allowed.


class FieldGroup(str, Enum):
    STATUS = "status"
    DETAIL = "detail"


FIELD_GROUPS: dict[FieldGroup, frozenset[str]] = {
    FieldGroup.STATUS: frozenset({"status"}),
    FieldGroup.DETAIL: frozenset({"title", "description", "due_date", "priority", "assigned_to"}),
}

_DENIAL_REASONS = {
    FieldGroup.STATUS: "Not authorized to update this task",
    FieldGroup.DETAIL: "Only the creator can edit task details",
}


def is_creator(principal: Principal, task: Task) -> bool:
    return principal.id == task.created_by


def is_assignee(principal: Principal, task: Task) -> bool:
    return principal.id == task.assigned_to


def touched_groups(patch: TaskPatch) -> list[FieldGroup]:
    """Groups hit by the patch, in a fixed order (status first)."""
    present = patch.present_fields()
    return [group for group, names in FIELD_GROUPS.items() if present & names]


def can_change(principal: Principal, task: Task, group: FieldGroup) -> bool:
    if group is FieldGroup.STATUS:
        return is_assignee(principal, task) or is_creator(principal, task)
    return is_creator(principal, task)


def authorize_update(principal: Principal, task: Task, patch: TaskPatch) -> list[FieldGroup]:
    """
    Checks every field group touched by `patch`.

    :param principal: Caller.
    :param task: Task as currently stored.
    :param patch: Requested changes.
    :raises TaskForbiddenError: On the first group the caller may not change.
    :return: The touched groups (empty for a no-op patch).
    """
    groups = touched_groups(patch)
    for group in groups:
        if not can_change(principal, task, group):
            raise TaskForbiddenError(task.task_id, _DENIAL_REASONS[group])
    return groups


def authorize_delete(principal: Principal, task: Task) -> None:
    """:raises TaskForbiddenError: When the caller did not create the task."""
    if not is_creator(principal, task):
        raise TaskForbiddenError(task.task_id, "Not authorized to delete this task")
