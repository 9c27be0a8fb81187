"""Tests for the analytics calculations and endpoints."""

from datetime import date
from types import SimpleNamespace

from taskflow.domain.analytics.service import (
    client_analytics,
    client_summary,
    dashboard_stats,
    month_weeks,
    monthly_analytics,
    round_half_up,
    task_stats,
    weekly_analytics,
)

TODAY = date(2026, 3, 18)  # a Wednesday


def task_row(client_id=1, status="todo", due=date(2026, 3, 20), completed_at=None, minutes=60,
              tracked=0.0, revenue=0.0):
    return SimpleNamespace(
        client_id=client_id,
        status=status,
        due_date=due,
        completed_at=completed_at,
        estimated_duration=minutes,
        tracked_hours=tracked,
        revenue=revenue,
    )


def client_row(client_id, name, hourly_rate=None, monthly_wage=None):
    return SimpleNamespace(id=client_id, name=name, hourly_rate=hourly_rate, monthly_wage=monthly_wage)


class TestRounding:

    def test_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(1.25, 1) == 1.3


class TestDashboardStats:

    def test_counts(self):
        tasks = [
            task_row(status="todo", due=date(2026, 3, 25)),
            task_row(status="todo", due=date(2026, 4, 2)),
            task_row(status="in-progress", tracked=1.0),
            task_row(status="in-progress"),
            task_row(status="done", completed_at=date(2026, 3, 2), tracked=2.25, revenue=150.25),
            task_row(status="done", completed_at=date(2026, 3, 17), tracked=1.0, revenue=50),
            task_row(status="done", completed_at=date(2026, 2, 27), tracked=5.0, revenue=500),
        ]
        stats = dashboard_stats(tasks, TODAY)

        assert stats["openTasks"] == 1
        assert stats["notStartedTasks"] == {"count": 2, "latestDeadline": "2026-04-02"}
        assert stats["completedThisMonth"] == 2
        assert stats["hoursThisMonth"] == 3.3
        assert stats["revenueThisMonth"] == 200.25

    def test_completion_falls_back_to_due_date(self):
        tasks = [task_row(status="done", due=date(2026, 3, 1), revenue=10)]
        assert dashboard_stats(tasks, TODAY)["revenueThisMonth"] == 10

    def test_empty(self):
        stats = dashboard_stats([], TODAY)
        assert stats["notStartedTasks"] == {"count": 0, "latestDeadline": None}
        assert stats["revenueThisMonth"] == 0


class TestTaskStats:

    def test_percentages(self):
        tasks = [task_row(status="todo"), task_row(status="in-progress"), task_row(status="done")]
        stats = task_stats(tasks)
        assert stats["totalCount"] == 3
        assert stats["todoPercentage"] == 33
        assert stats["inProgressPercentage"] == 33
        assert stats["donePercentage"] == 33

    def test_half_rounds_up(self):
        tasks = [task_row(status="done")] + [task_row(status="todo")] * 7
        assert task_stats(tasks)["donePercentage"] == 13

    def test_no_tasks(self):
        stats = task_stats([])
        assert stats["totalCount"] == 0
        assert stats["donePercentage"] == 0


class TestClientViews:

    def test_summary_sorted_by_total(self):
        clients = [client_row(1, "Acme"), client_row(2, "Globex"), client_row(3, "Initech")]
        tasks = [
            task_row(client_id=2, status="done"),
            task_row(client_id=2),
            task_row(client_id=2),
            task_row(client_id=1, status="done"),
        ]
        summary = client_summary(clients, tasks)
        assert [s["name"] for s in summary] == ["Globex", "Acme", "Initech"]
        assert summary[0]["percentage"] == 33
        assert summary[1]["percentage"] == 100
        assert summary[2]["percentage"] == 0

    def test_earnings(self):
        clients = [
            client_row(1, "Hourly", hourly_rate=100),
            client_row(2, "Salaried", monthly_wage=9600),
            client_row(3, "Unpaid"),
            client_row(4, "Idle", hourly_rate=50),
        ]
        tasks = [
            task_row(client_id=1, status="done", minutes=90),
            task_row(client_id=2, status="done", minutes=150),
            task_row(client_id=3, status="done", minutes=30),
            task_row(client_id=4, status="todo", minutes=600),
        ]
        rows = {r["name"]: r for r in client_analytics(clients, tasks)}

        assert list(rows) == ["Salaried", "Hourly", "Unpaid"]
        assert rows["Hourly"]["earnings"] == 150
        assert (rows["Salaried"]["hours"], rows["Salaried"]["minutes"]) == (2, 30)
        assert rows["Salaried"]["earnings"] == 150
        assert rows["Unpaid"]["earnings"] == 0


class TestTimeSeries:

    def test_weekly(self):
        tasks = [
            task_row(status="done", completed_at=date(2026, 3, 18), minutes=90),
            task_row(status="done", completed_at=date(2026, 3, 12), minutes=30),
            task_row(status="done", completed_at=date(2026, 3, 11), minutes=30),
            task_row(status="todo", due=date(2026, 3, 18)),
        ]
        days = weekly_analytics(tasks, TODAY)

        assert [d["date"] for d in days] == [f"2026-03-{d}" for d in range(12, 19)]
        assert days[0] == {"date": "2026-03-12", "label": "Thu", "tasks": 1, "hours": 0.5}
        assert days[-1]["tasks"] == 1
        assert days[-1]["hours"] == 1.5

    def test_month_weeks(self):
        weeks = month_weeks(date(2026, 2, 10))
        assert [(n, s.day, e.day) for n, s, e in weeks] == [(1, 1, 7), (2, 8, 14), (3, 15, 21), (4, 22, 28)]

        weeks = month_weeks(TODAY)
        assert weeks[-1] == (5, date(2026, 3, 29), date(2026, 3, 31))

    def test_monthly(self):
        tasks = [
            task_row(status="done", completed_at=date(2026, 3, 7), minutes=60),
            task_row(status="done", completed_at=date(2026, 3, 8), minutes=45),
            task_row(status="done", completed_at=date(2026, 4, 1), minutes=60),
        ]
        weeks = monthly_analytics(tasks, TODAY)
        assert weeks[0] == {"name": "Week 1", "start": "2026-03-01", "end": "2026-03-07", "tasks": 1, "hours": 1.0}
        assert weeks[1]["tasks"] == 1
        assert weeks[1]["hours"] == 0.8
        assert sum(w["tasks"] for w in weeks) == 2


class TestAnalyticsEndpoints:

    def test_task_stats(self, api):
        acme = api.post("/clients", json={"name": "Acme", "email": "a@acme.com"}).json()
        api.post("/tasks", json={"clientId": acme["id"], "title": "A", "estimatedDuration": 30, "dueDate": "2026-03-10"})
        api.post(
            "/tasks",
            json={"clientId": acme["id"], "title": "B", "estimatedDuration": 30, "dueDate": "2026-03-10", "status": "done"},
        )
        stats = api.get("/analytics/tasks").json()
        assert stats["totalCount"] == 2
        assert stats["donePercentage"] == 50

    def test_dashboard_counts_today(self, api, make_client, make_task):
        acme = make_client(hourlyRate=100)
        task = make_task(acme["id"], estimatedDuration=30)
        api.post(f"/tasks/{task['id']}/complete")

        stats = api.get("/analytics/dashboard").json()
        assert stats["completedThisMonth"] == 1
        assert stats["hoursThisMonth"] == 0.5
        assert stats["revenueThisMonth"] == 50

    def test_endpoints_respond(self, api):
        for path in ("/analytics/clients", "/analytics/client-summary", "/analytics/weekly", "/analytics/monthly"):
            assert api.get(path).status_code == 200
