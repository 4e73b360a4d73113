from __future__ import annotations

from dataclasses import dataclass, fields, replace
from datetime import date
from typing import Any

from tasktracker.domain.enums import TaskPriority, TaskStatus
from tasktracker.domain.errors import TaskValidationError
from tasktracker.domain.parsing import allowed_values, is_supplied, parse_date, parse_enum
from tasktracker.domain.task import Task, UserId


### COMMENTS
# ==========================================================
# Partial update (domain/patch.py)
# ==========================================================
# - Every field of TaskPatch is either UNSET or an explicit new value.
# - UNSET != "" != None: UNSET means "leave unchanged"; an explicit empty
#   string or None is a value, and validate() rejects it.
# - from_raw() is the transport boundary: None / blank strings -> UNSET,
#   unparsable values pass through untouched for validate().
# - apply_to() never touches task_id, created_by or created_at.


class _Unset:
    _instance: _Unset | None = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class TaskPatch:
    """
    Explicit set of requested field changes for `TaskService.update_task`.

    :param title: New title or UNSET.
    :param description: New description or UNSET.
    :param due_date: New due date or UNSET.
    :param priority: New priority or UNSET.
    :param assigned_to: New assignee id or UNSET.
    :param status: New status or UNSET.
    """
    title: str = UNSET
    description: str = UNSET
    due_date: date = UNSET
    priority: TaskPriority = UNSET
    assigned_to: UserId = UNSET
    status: TaskStatus = UNSET

    def present_fields(self) -> frozenset[str]:
        return frozenset(f.name for f in fields(self) if getattr(self, f.name) is not UNSET)

    def validate(self) -> None:
        """
        Checks explicitly present values.

        - None is never a value: a present field must carry a real one.
        - title / description / assigned_to must not be blank.
        - due_date, priority and status must already be parsed.

        :raises TaskValidationError: With every offending field.
        """
        errors: list[tuple[str, str]] = []
        for name in ("title", "description", "assigned_to"):
            value = getattr(self, name)
            if value is UNSET:
                continue
            if value is None or not str(value).strip():
                errors.append((name, _BLANK[name]))
        if self.due_date is not UNSET and not isinstance(self.due_date, date):
            errors.append(("due_date", "Expected an ISO date (YYYY-MM-DD)"))
        if self.priority is not UNSET and not isinstance(self.priority, TaskPriority):
            errors.append(("priority", f"Expected one of: {allowed_values(TaskPriority)}"))
        if self.status is not UNSET and not isinstance(self.status, TaskStatus):
            errors.append(("status", f"Expected one of: {allowed_values(TaskStatus)}"))
        if errors:
            raise TaskValidationError(errors)

    def apply_to(self, task: Task) -> Task:
        """Returns a new Task with the present fields replaced."""
        changes = {name: getattr(self, name) for name in self.present_fields()}
        if not changes:
            return task
        return replace(task, **changes)

    @classmethod
    def from_raw(
        cls,
        *,
        title: str | None = None,
        description: str | None = None,
        due_date: str | date | None = None,
        priority: str | TaskPriority | None = None,
        assigned_to: str | None = None,
        status: str | TaskStatus | None = None,
    ) -> TaskPatch:
        """
        Builds a patch from loosely typed request values.

        - None / blank strings are treated as "not supplied".
        - Values that do not parse are kept as given, so `validate()` reports
          them only after the caller has been authorized.
        """
        values: dict[str, Any] = {}
        if is_supplied(title):
            values["title"] = title
        if is_supplied(description):
            values["description"] = description
        if is_supplied(assigned_to):
            values["assigned_to"] = UserId(str(assigned_to).strip())
        if is_supplied(due_date):
            values["due_date"] = _parsed(parse_date, due_date)
        if is_supplied(priority):
            values["priority"] = _parsed(lambda v: parse_enum(TaskPriority, v), priority)
        if is_supplied(status):
            values["status"] = _parsed(lambda v: parse_enum(TaskStatus, v), status)
        return cls(**values)


_BLANK = {
    "title": "Title cannot be empty",
    "description": "Description cannot be empty",
    "assigned_to": "Assignee cannot be empty",
}


def _parsed(parse, value):
    try:
        return parse(value)
    except ValueError:
        return value
