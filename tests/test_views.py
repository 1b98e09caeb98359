from datetime import date, datetime, timedelta

import pytest

from taskmanager.constants import Priority, TaskFilter
from taskmanager.client.models import Task
from taskmanager.client.views import (
    completion_rate,
    filter_tasks,
    format_due_date,
    get_priority_distribution,
    get_task_statistics,
    is_task_overdue,
    sort_tasks_by_due_date,
    sort_tasks_by_priority,
)

TODAY = date(2025, 3, 12)  # a Wednesday


def make_task(tid, priority="medium", completed=False, due=None, ai_priority=None):
    return Task(
        id=tid,
        title=f"task {tid}",
        priority=priority,
        completed=completed,
        due_date=due,
        ai_priority=ai_priority,
    )


def at(day_offset, hour=9):
    d = TODAY + timedelta(days=day_offset)
    return datetime(d.year, d.month, d.day, hour, 0)


class TestOverdue:
    def test_due_today_is_not_overdue(self):
        assert not is_task_overdue(make_task("1", due=at(0, hour=0)), TODAY)

    def test_past_day_is_overdue(self):
        assert is_task_overdue(make_task("1", due=at(-1, hour=23)), TODAY)

    def test_completed_or_undated_never_overdue(self):
        assert not is_task_overdue(make_task("1", due=at(-5), completed=True), TODAY)
        assert not is_task_overdue(make_task("1"), TODAY)


class TestFilter:
    tasks = [
        make_task("past", due=at(-2)),
        make_task("today", due=at(0)),
        make_task("future", due=at(3)),
        make_task("done", completed=True, due=at(-1)),
        make_task("done-today", completed=True, due=at(0)),
        make_task("nodate"),
    ]

    def ids(self, task_filter):
        return [t.id for t in filter_tasks(self.tasks, task_filter, TODAY)]

    def test_all(self):
        assert self.ids(TaskFilter.ALL) == [t.id for t in self.tasks]

    def test_today(self):
        assert self.ids(TaskFilter.TODAY) == ["today"]

    def test_upcoming(self):
        assert self.ids(TaskFilter.UPCOMING) == ["future"]

    def test_completed(self):
        assert self.ids(TaskFilter.COMPLETED) == ["done", "done-today"]

    def test_overdue(self):
        assert self.ids(TaskFilter.OVERDUE) == ["past"]

    def test_accepts_plain_strings_and_unknown_means_all(self):
        assert self.ids("overdue") == ["past"]
        assert len(self.ids("whatever")) == len(self.tasks)

    def test_task_due_today_is_only_due_today(self):
        today_ids = {"today"}
        assert today_ids <= set(self.ids(TaskFilter.TODAY))
        assert not today_ids & set(self.ids(TaskFilter.OVERDUE))
        assert not today_ids & set(self.ids(TaskFilter.UPCOMING))


class TestSort:
    def test_priority_order_is_stable(self):
        tasks = [
            make_task("a", "low"),
            make_task("b", "urgent"),
            make_task("c", "medium"),
            make_task("d", "urgent"),
        ]
        assert [t.id for t in sort_tasks_by_priority(tasks)] == ["b", "d", "c", "a"]

    def test_ai_priority_overrides_for_sorting(self):
        tasks = [make_task("a", "high"), make_task("b", "low", ai_priority="urgent")]
        result = sort_tasks_by_priority(tasks)
        assert [t.id for t in result] == ["b", "a"]
        # Stored priority is left alone
        assert result[0].priority is Priority.LOW

    def test_sort_does_not_mutate_input(self):
        tasks = [make_task("a", "low"), make_task("b", "high")]
        sort_tasks_by_priority(tasks)
        assert [t.id for t in tasks] == ["a", "b"]

    def test_due_date_order_undated_last(self):
        tasks = [make_task("none"), make_task("late", due=at(5)), make_task("soon", due=at(1))]
        assert [t.id for t in sort_tasks_by_due_date(tasks)] == ["soon", "late", "none"]


class TestStatistics:
    def test_empty_list(self):
        stats = get_task_statistics([], TODAY)
        assert stats.total == 0
        assert stats.completion_rate == 0

    def test_counts(self):
        tasks = [
            make_task("1", completed=True),
            make_task("2", due=at(-1)),
            make_task("3", due=at(0)),
        ]
        stats = get_task_statistics(tasks, TODAY)
        assert stats.total == 3
        assert stats.completed == 1
        assert stats.active == 2
        assert stats.overdue == 1
        assert stats.today == 1
        assert stats.completion_rate == 33

    @pytest.mark.parametrize(
        "completed,total,expected",
        [(1, 2, 50), (2, 3, 67), (1, 8, 13), (1, 200, 1), (0, 5, 0), (5, 5, 100)],
    )
    def test_completion_rate_rounds_half_up(self, completed, total, expected):
        assert completion_rate(completed, total) == expected

    def test_priority_distribution_uses_stored_priority_of_open_tasks(self):
        tasks = [
            make_task("1", "urgent"),
            make_task("2", "low", ai_priority="urgent"),
            make_task("3", "high", completed=True),
            make_task("4", "low"),
        ]
        assert get_priority_distribution(tasks) == {
            Priority.URGENT: 1,
            Priority.HIGH: 0,
            Priority.MEDIUM: 0,
            Priority.LOW: 2,
        }


class TestFormatDueDate:
    now = datetime(2025, 3, 12, 15, 30)

    @pytest.mark.parametrize(
        "due,expected",
        [
            (None, "No due date"),
            (datetime(2025, 3, 12, 8, 0), "Today"),
            (datetime(2025, 3, 13), "Tomorrow"),
            (datetime(2025, 3, 11), "1 day overdue"),
            (datetime(2025, 3, 9), "3 days overdue"),
            (datetime(2025, 3, 15), "Saturday"),
            (datetime(2025, 4, 2), "Apr 2, 2025"),
        ],
    )
    def test_labels(self, due, expected):
        assert format_due_date(due, self.now) == expected
