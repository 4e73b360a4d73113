from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from tasktracker.domain.enums import ListScope, SortMode, TaskPriority, TaskStatus
from tasktracker.domain.errors import TaskValidationError
from tasktracker.domain.parsing import (
    allowed_values,
    is_supplied,
    parse_date,
    parse_enum,
    parse_positive_int,
)
from tasktracker.domain.task import Principal, Task, UserId


### COMMENTS
# ==========================================================
# Query builder (domain/query.py)
# ==========================================================
# - Raw, optional request parameters -> validated QueryPlan.
# - A filter field left as None imposes no constraint.
# - from_date / to_date are inclusive; either may be given alone.
# - page / limit never fail the request: bad values fall back to 1 / 10.
# - Scope OWN pins assigned_to to the principal and always orders by created_at DESC.

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10

_SORT_BY = {
    "priority": SortMode.PRIORITY,
    "duedate": SortMode.DUE_DATE,
    "due_date": SortMode.DUE_DATE,
}


@dataclass(frozen=True)
class TaskFilter:
    """Conjunction of equality and due-date range predicates."""
    status: TaskStatus | None = None
    priority: TaskPriority | None = None
    assigned_to: UserId | None = None
    from_date: date | None = None
    to_date: date | None = None

    def matches(self, task: Task) -> bool:
        if self.status is not None and task.status != self.status:
            return False
        if self.priority is not None and task.priority != self.priority:
            return False
        if self.assigned_to is not None and task.assigned_to != self.assigned_to:
            return False
        if self.from_date is not None and task.due_date < self.from_date:
            return False
        if self.to_date is not None and task.due_date > self.to_date:
            return False
        return True


@dataclass(frozen=True)
class QueryPlan:
    predicate: TaskFilter
    sort: SortMode = SortMode.CREATED_AT_DESC
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def build_query_plan(
    principal: Principal,
    scope: ListScope | str = ListScope.ALL,
    *,
    status: str | TaskStatus | None = None,
    priority: str | TaskPriority | None = None,
    assigned_to: str | None = None,
    from_date: str | date | None = None,
    to_date: str | date | None = None,
    sort_by: str | SortMode | None = None,
    page: object = None,
    limit: object = None,
    default_limit: int = DEFAULT_LIMIT,
) -> QueryPlan:
    """
    Translates request parameters into a QueryPlan.

    :param principal: Caller; used for the OWN scope.
    :param scope: "own" (tasks assigned to the caller) or "all".
    :param sort_by: "priority", "dueDate" or None (created_at, newest first).
    :param page: Page number; non-numeric or < 1 falls back to 1.
    :param limit: Page size; non-numeric or < 1 falls back to `default_limit`.
    :raises TaskValidationError: Unknown status/priority/sort_by or unparsable dates,
        all reported together.
    :return: QueryPlan.
    """
    scope = ListScope(scope)
    errors: list[tuple[str, str]] = []

    status_value = None
    if is_supplied(status):
        try:
            status_value = parse_enum(TaskStatus, status)
        except ValueError:
            errors.append(("status", f"Expected one of: {allowed_values(TaskStatus)}"))

    priority_value = None
    if is_supplied(priority):
        try:
            priority_value = parse_enum(TaskPriority, priority)
        except ValueError:
            errors.append(("priority", f"Expected one of: {allowed_values(TaskPriority)}"))

    page_value = parse_positive_int(page, DEFAULT_PAGE)
    limit_value = parse_positive_int(limit, default_limit)

    if scope is ListScope.OWN:
        if errors:
            raise TaskValidationError(errors)
        return QueryPlan(
            predicate=TaskFilter(status=status_value, priority=priority_value, assigned_to=principal.id),
            sort=SortMode.CREATED_AT_DESC,
            page=page_value,
            limit=limit_value,
        )

    from_value = _date_param("from_date", from_date, errors)
    to_value = _date_param("to_date", to_date, errors)

    sort_value = SortMode.CREATED_AT_DESC
    if isinstance(sort_by, SortMode):
        sort_value = sort_by
    elif is_supplied(sort_by):
        sort_value = _SORT_BY.get(str(sort_by).strip().lower())
        if sort_value is None:
            errors.append(("sort_by", "Expected one of: priority, dueDate"))

    if errors:
        raise TaskValidationError(errors)

    return QueryPlan(
        predicate=TaskFilter(
            status=status_value,
            priority=priority_value,
            assigned_to=UserId(str(assigned_to).strip()) if is_supplied(assigned_to) else None,
            from_date=from_value,
            to_date=to_value,
        ),
        sort=sort_value,
        page=page_value,
        limit=limit_value,
    )


def _date_param(name: str, value: str | date | None, errors: list[tuple[str, str]]) -> date | None:
    if not is_supplied(value):
        return None
    try:
        return parse_date(value)
    except ValueError:
        errors.append((name, "Expected an ISO date (YYYY-MM-DD)"))
        return None
