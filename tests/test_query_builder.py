import pytest
from datetime import date

from tasktracker.domain.enums import ListScope, SortMode, TaskPriority, TaskStatus
from tasktracker.domain.errors import TaskValidationError
from tasktracker.domain.query import TaskFilter, build_query_plan
from tasktracker.domain.task import Principal, UserId

ME = Principal(id=UserId("me"))


def test_defaults_match_everything():
    plan = build_query_plan(ME)

    assert plan.predicate == TaskFilter()
    assert plan.sort is SortMode.CREATED_AT_DESC
    assert (plan.page, plan.limit, plan.offset) == (1, 10, 0)


def test_own_scope_pins_assignee_and_drops_other_params():
    plan = build_query_plan(
        ME,
        "own",
        status="completed",
        assigned_to="someone-else",
        from_date="2025-01-01",
        sort_by="priority",
    )

    assert plan.predicate == TaskFilter(status=TaskStatus.COMPLETED, assigned_to=UserId("me"))
    assert plan.sort is SortMode.CREATED_AT_DESC


def test_all_scope_builds_every_predicate():
    plan = build_query_plan(
        ME,
        ListScope.ALL,
        status="pending",
        priority="High",
        assigned_to=" u2 ",
        from_date="2025-01-01",
        to_date=date(2025, 1, 31),
        sort_by="dueDate",
        page="3",
        limit=5,
    )

    assert plan.predicate == TaskFilter(
        status=TaskStatus.PENDING,
        priority=TaskPriority.HIGH,
        assigned_to=UserId("u2"),
        from_date=date(2025, 1, 1),
        to_date=date(2025, 1, 31),
    )
    assert plan.sort is SortMode.DUE_DATE
    assert plan.offset == 10


def test_blank_strings_are_not_filters():
    plan = build_query_plan(ME, status="", priority=" ", assigned_to="", from_date="", sort_by="")

    assert plan.predicate == TaskFilter()
    assert plan.sort is SortMode.CREATED_AT_DESC


@pytest.mark.parametrize("raw", ["abc", "0", "-2", None, "", "1.5"])
def test_bad_paging_falls_back(raw):
    plan = build_query_plan(ME, page=raw, limit=raw)

    assert plan.page == 1
    assert plan.limit == 10


def test_custom_default_limit():
    assert build_query_plan(ME, limit="x", default_limit=25).limit == 25


def test_timestamp_dates_use_their_date_part():
    plan = build_query_plan(ME, from_date="2025-01-01T10:00:00Z")

    assert plan.predicate.from_date == date(2025, 1, 1)


def test_invalid_values_are_reported_together():
    with pytest.raises(TaskValidationError) as exc:
        build_query_plan(ME, status="open", priority="urgent", to_date="31/01/2025", sort_by="title")

    assert exc.value.fields == ["status", "priority", "to_date", "sort_by"]
