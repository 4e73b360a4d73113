import pytest
from datetime import date
from math import ceil

from tasktracker.domain.enums import TaskStatus
from tasktracker.domain.errors import TaskValidationError
from tasktracker.domain.patch import TaskPatch

from conftest import U1, U2, U3, as_principal

# (title, due, priority, assignee)
ROWS = [
    ("a", date(2025, 3, 1), "low", U2),
    ("b", date(2025, 1, 15), "high", U2),
    ("c", date(2025, 2, 10), "medium", U3),
    ("d", date(2025, 1, 1), "high", U1),
    ("e", date(2025, 2, 28), "low", U2),
    ("f", date(2025, 2, 1), "medium", U2),
    ("g", date(2025, 4, 1), "high", U3),
]


@pytest.fixture
def loaded(any_service, creator):
    for title, due, priority, who in ROWS:
        any_service.create_task(creator, title, "desc", due, priority=priority, assigned_to=who.user_id)
    # "b" and "c" are completed
    page = any_service.list_all(creator, limit=50)
    for t in page.tasks:
        if t.title in {"b", "c"}:
            any_service.update_task(creator, t.task_id, TaskPatch(status=TaskStatus.COMPLETED))
    return any_service


def titles(page):
    return [t.title for t in page.tasks]


def test_default_order_is_newest_first(loaded, creator):
    page = loaded.list_all(creator, limit=50)

    assert titles(page) == ["g", "f", "e", "d", "c", "b", "a"]


def test_list_own_only_returns_callers_tasks(loaded):
    jane = as_principal(U2)

    page = loaded.list_own(jane, limit=50)

    assert titles(page) == ["f", "e", "b", "a"]
    assert all(t.assigned_to.id == U2.user_id for t in page.tasks)


def test_list_own_ignores_assignee_and_filters_by_status(loaded):
    bob = as_principal(U3)

    page = loaded.list_own(bob, status="pending")

    assert titles(page) == ["g"]


def test_filters_are_conjunctive(loaded, creator):
    page = loaded.list_all(
        creator,
        status="pending",
        priority="low",
        assigned_to=U2.user_id,
        from_date="2025-02-01",
        to_date="2025-02-28",
    )

    assert titles(page) == ["e"]
    assert page.total == 1


def test_date_bounds_are_inclusive_and_independent(loaded, creator):
    only_from = loaded.list_all(creator, from_date=date(2025, 2, 28), limit=50)
    only_to = loaded.list_all(creator, to_date=date(2025, 1, 15), limit=50)
    closed = loaded.list_all(creator, from_date="2025-01-15", to_date="2025-02-10", limit=50)

    assert sorted(titles(only_from)) == ["a", "e", "g"]
    assert sorted(titles(only_to)) == ["b", "d"]
    assert sorted(titles(closed)) == ["b", "c", "f"]


def test_sort_by_due_date_is_ascending(loaded, creator):
    page = loaded.list_all(creator, sort_by="dueDate", limit=50)

    assert titles(page) == ["d", "b", "f", "c", "e", "a", "g"]


def test_sort_by_priority_orders_full_set(loaded, creator):
    page = loaded.list_all(creator, sort_by="priority", limit=50)

    ranks = [t.priority.rank for t in page.tasks]
    assert ranks == sorted(ranks)
    # ties keep the default (newest first) order
    assert titles(page) == ["g", "d", "b", "f", "c", "e", "a"]


def test_priority_sort_paginates_after_sorting(loaded, creator):
    first = loaded.list_all(creator, sort_by="priority", page=1, limit=3)
    second = loaded.list_all(creator, sort_by="priority", page=2, limit=3)
    third = loaded.list_all(creator, sort_by="priority", page=3, limit=3)

    assert titles(first) == ["g", "d", "b"]
    assert titles(second) == ["f", "c", "e"]
    assert titles(third) == ["a"]
    assert first.total == 7
    assert first.total_pages == 3


def test_priority_sort_honours_filters(loaded, creator):
    page = loaded.list_all(creator, sort_by="priority", assigned_to=U2.user_id, limit=50)

    assert titles(page) == ["b", "f", "e", "a"]
    assert page.total == 4


@pytest.mark.parametrize("sort_by", [None, "dueDate", "priority"])
@pytest.mark.parametrize("page_no,limit", [(1, 3), (2, 3), (3, 3), (4, 3), (1, 7), (2, 5), (9, 2)])
def test_pagination_arithmetic(loaded, creator, sort_by, page_no, limit):
    page = loaded.list_all(creator, sort_by=sort_by, page=page_no, limit=limit)

    assert page.total == 7
    assert page.total_pages == ceil(7 / limit)
    assert page.current_page == page_no
    assert len(page.tasks) == min(limit, max(0, 7 - (page_no - 1) * limit))


def test_bad_page_and_limit_fall_back_to_defaults(loaded, creator):
    page = loaded.list_all(creator, page="abc", limit="-5")

    assert page.current_page == 1
    assert page.limit == 10
    assert len(page.tasks) == 7
    assert page.total_pages == 1


def test_empty_result_has_zero_pages(any_service, creator):
    page = any_service.list_all(creator)

    assert page.tasks == []
    assert page.total == 0
    assert page.total_pages == 0


def test_unknown_filter_values_are_rejected(loaded, creator):
    with pytest.raises(TaskValidationError) as exc:
        loaded.list_all(creator, status="done", sort_by="title", from_date="yesterday")

    assert exc.value.fields == ["status", "from_date", "sort_by"]
