"""Tests for task list views, the dependency graph and shared helpers."""

from datetime import date
from types import SimpleNamespace

import pytest

from taskflow.domain.tasks.dependencies import find_cycle, topological_order
from taskflow.domain.tasks.views import due_date_group, filter_tasks, group_tasks, sort_tasks, timeline_group
from taskflow.shared.dates import month_bounds, month_day_label, week_end
from taskflow.shared.validators import validate_email, validate_time_of_day, validate_weekdays

TODAY = date(2026, 3, 18)  # a Wednesday


def task(title, due=TODAY, status="todo", client_id=1, minutes=60, description=""):
    return SimpleNamespace(
        title=title,
        due_date=due,
        status=status,
        client_id=client_id,
        estimated_duration=minutes,
        description=description,
    )


class TestFilterAndSort:

    def test_filters_combine(self):
        tasks = [
            task("Invoice Acme", client_id=1),
            task("Invoice Globex", client_id=2, status="done"),
            task("Call", client_id=1, description="about the invoice"),
        ]
        assert [t.title for t in filter_tasks(tasks, search="INVOICE")] == ["Invoice Acme", "Invoice Globex", "Call"]
        assert [t.title for t in filter_tasks(tasks, status="done")] == ["Invoice Globex"]
        assert [t.title for t in filter_tasks(tasks, search="invoice", client_id=1)] == ["Invoice Acme", "Call"]
        assert filter_tasks(tasks, search="   ") == tasks

    def test_sort_is_stable(self):
        tasks = [task("b", minutes=30), task("a", minutes=30), task("c", minutes=10)]
        assert [t.title for t in sort_tasks(tasks, "duration")] == ["c", "b", "a"]
        assert [t.title for t in sort_tasks(tasks, "duration", "desc")] == ["b", "a", "c"]

    def test_sort_by_client_name(self):
        tasks = [task("x", client_id=1), task("y", client_id=2), task("z", client_id=3)]
        names = {1: "globex", 2: "Acme"}
        assert [t.title for t in sort_tasks(tasks, "client", client_names=names)] == ["z", "y", "x"]


class TestGrouping:

    def test_due_date_labels(self):
        assert due_date_group(date(2026, 3, 18), TODAY) == "Today"
        assert due_date_group(date(2026, 3, 19), TODAY) == "Tomorrow"
        assert due_date_group(date(2026, 3, 1), TODAY) == "Overdue"
        assert due_date_group(date(2026, 4, 5), TODAY) == "April 5"

    @pytest.mark.parametrize(
        "due, label",
        [
            (date(2026, 3, 17), "Overdue"),
            (date(2026, 3, 18), "Today"),
            (date(2026, 3, 22), "This week"),
            (date(2026, 3, 23), "This month"),
            (date(2026, 4, 30), "Next month"),
            (date(2026, 5, 1), "Future"),
        ],
    )
    def test_timeline_labels(self, due, label):
        assert timeline_group(due, TODAY) == label

    def test_timeline_uses_fixed_order(self):
        tasks = [task("later", due=date(2026, 6, 1)), task("late", due=date(2026, 3, 1))]
        groups = group_tasks(tasks, "timeline", TODAY)
        assert [(label, [t.title for t in items]) for label, items in groups] == [
            ("Overdue", ["late"]),
            ("Future", ["later"]),
        ]

    def test_groups_follow_first_appearance(self):
        tasks = [task("a", status="done"), task("b", status="todo"), task("c", status="done")]
        groups = group_tasks(tasks, "status", TODAY)
        assert [(label, len(items)) for label, items in groups] == [("Done", 2), ("To Do", 1)]

    def test_missing_client_and_none(self):
        tasks = [task("a", client_id=9)]
        assert group_tasks(tasks, "client", TODAY, {1: "Acme"})[0][0] == "No Client"
        assert group_tasks(tasks, "none", TODAY) == [("All Tasks", tasks)]
        assert group_tasks([], "none", TODAY) == []


class TestDependencyGraph:

    def test_no_cycle(self):
        edges = {2: {1}, 3: {2}}
        assert find_cycle(edges, 4, [3]) is None

    def test_cycle_path(self):
        edges = {2: {1}, 3: {2}}
        assert find_cycle(edges, 1, [3]) == [1, 3, 2, 1]

    def test_replacing_edges_ignores_old_ones(self):
        edges = {1: {2}, 3: {1}}
        # 1 currently waits on 2; replacing that with 4 cannot loop through 3
        assert find_cycle(edges, 1, [4]) is None

    def test_topological_order(self):
        order = topological_order({3: {1, 2}, 2: {1}, 4: set()})
        assert order.index(1) < order.index(2) < order.index(3)
        assert sorted(order) == [1, 2, 3, 4]

    def test_topological_order_rejects_cycle(self):
        with pytest.raises(ValueError):
            topological_order({1: {2}, 2: {1}})


class TestSharedHelpers:

    def test_time_of_day(self):
        assert validate_time_of_day("7:05") == "07:05"
        assert validate_time_of_day("") is None
        with pytest.raises(ValueError):
            validate_time_of_day("24:00")

    def test_weekdays(self):
        assert validate_weekdays(["Sun", "Mon", "Sun"]) == ["Mon", "Sun"]
        with pytest.raises(ValueError):
            validate_weekdays([])

    def test_email(self):
        assert validate_email(" Jane@Example.COM ") == "jane@example.com"
        with pytest.raises(ValueError):
            validate_email("jane@")

    def test_dates(self):
        assert month_bounds(date(2026, 12, 15)) == (date(2026, 12, 1), date(2027, 1, 1))
        assert week_end(TODAY) == date(2026, 3, 22)
        assert week_end(date(2026, 3, 22)) == date(2026, 3, 22)
        assert month_day_label(date(2026, 3, 5)) == "March 5"
