"""
Analytics - derived views over a user's tasks and clients

The calculations are plain functions over already-loaded rows (or any objects
with the same attributes); AnalyticsService only loads the data for them.
"""

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Client, Task, User
from ...shared.dates import month_bounds

# Monthly wages are pro-rated over a 160 hour working month
MONTHLY_WORK_MINUTES = 160 * 60


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a spreadsheet (0.5 -> 1), not banker's rounding"""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def completion_date(task) -> date:
    """Day a done task counts for; tasks completed before completion dates were stored use their due date"""
    return task.completed_at or task.due_date


def _done(tasks: list) -> list:
    return [t for t in tasks if t.status == "done"]


def _hours(minutes: int) -> float:
    return round_half_up(minutes / 60, 1)


def dashboard_stats(tasks: list, today: date) -> dict:
    start, end = month_bounds(today)
    not_started = [t for t in tasks if t.status == "todo"]
    completed_this_month = [t for t in _done(tasks) if start <= completion_date(t) < end]

    latest_deadline = max((t.due_date for t in not_started), default=None)

    return {
        "openTasks": sum(1 for t in tasks if t.status != "done" and (t.tracked_hours or 0) > 0),
        "notStartedTasks": {
            "count": len(not_started),
            "latestDeadline": latest_deadline.isoformat() if latest_deadline else None,
        },
        "completedThisMonth": len(completed_this_month),
        "hoursThisMonth": round_half_up(sum(t.tracked_hours or 0 for t in completed_this_month), 1),
        "revenueThisMonth": round_half_up(sum(t.revenue or 0 for t in completed_this_month), 2),
    }


def task_stats(tasks: list) -> dict:
    counts = {
        "todo": sum(1 for t in tasks if t.status == "todo"),
        "in-progress": sum(1 for t in tasks if t.status == "in-progress"),
        "done": sum(1 for t in tasks if t.status == "done"),
    }
    total = len(tasks)

    def percentage(count: int) -> int:
        return int(round_half_up(count / total * 100)) if total else 0

    return {
        "todoCount": counts["todo"],
        "inProgressCount": counts["in-progress"],
        "doneCount": counts["done"],
        "totalCount": total,
        "todoPercentage": percentage(counts["todo"]),
        "inProgressPercentage": percentage(counts["in-progress"]),
        "donePercentage": percentage(counts["done"]),
    }


def client_summary(clients: list, tasks: list) -> list[dict]:
    """Task completion per client, most tasks first"""
    summary = []
    for client in clients:
        client_tasks = [t for t in tasks if t.client_id == client.id]
        completed = len(_done(client_tasks))
        total = len(client_tasks)
        summary.append(
            {
                "clientId": client.id,
                "name": client.name,
                "totalTasks": total,
                "completedTasks": completed,
                "percentage": int(round_half_up(completed / total * 100)) if total else 0,
            }
        )
    # sorted() is stable, so ties keep the incoming client order
    return sorted(summary, key=lambda s: s["totalTasks"], reverse=True)


def client_earnings(client, minutes: int) -> float:
    if client.hourly_rate:
        earnings = minutes / 60 * client.hourly_rate
    elif client.monthly_wage:
        earnings = minutes / MONTHLY_WORK_MINUTES * client.monthly_wage
    else:
        earnings = 0.0
    return round_half_up(earnings, 2)


def client_analytics(clients: list, tasks: list) -> list[dict]:
    """Minutes of finished work and earnings per client; clients without finished work are left out"""
    result = []
    for client in clients:
        total_minutes = sum(
            t.estimated_duration for t in _done(tasks) if t.client_id == client.id
        )
        if total_minutes <= 0:
            continue
        result.append(
            {
                "clientId": client.id,
                "name": client.name,
                "value": total_minutes,
                "hours": total_minutes // 60,
                "minutes": total_minutes % 60,
                "earnings": client_earnings(client, total_minutes),
            }
        )
    return sorted(result, key=lambda r: r["value"], reverse=True)


def weekly_analytics(tasks: list, today: date) -> list[dict]:
    """Finished tasks and hours for each of the last seven days, oldest first"""
    done = _done(tasks)
    result = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        day_tasks = [t for t in done if completion_date(t) == day]
        result.append(
            {
                "date": day.isoformat(),
                "label": day.strftime("%a"),
                "tasks": len(day_tasks),
                "hours": _hours(sum(t.estimated_duration for t in day_tasks)),
            }
        )
    return result


def month_weeks(today: date) -> list[tuple[int, date, date]]:
    """7-day buckets from the 1st of the month; the last one ends on the last day"""
    start, end = month_bounds(today)
    last_day = end - timedelta(days=1)
    weeks = []
    week_start, week_num = start, 1
    while week_start <= last_day:
        weeks.append((week_num, week_start, min(week_start + timedelta(days=6), last_day)))
        week_start += timedelta(days=7)
        week_num += 1
    return weeks


def monthly_analytics(tasks: list, today: date) -> list[dict]:
    done = _done(tasks)
    result = []
    for week_num, week_start, week_end in month_weeks(today):
        week_tasks = [t for t in done if week_start <= completion_date(t) <= week_end]
        result.append(
            {
                "name": f"Week {week_num}",
                "start": week_start.isoformat(),
                "end": week_end.isoformat(),
                "tasks": len(week_tasks),
                "hours": _hours(sum(t.estimated_duration for t in week_tasks)),
            }
        )
    return result


class AnalyticsService:
    """Loads a user's tasks and clients for the analytics functions"""

    def __init__(self, db: Session):
        self.db = db

    def _tasks(self, user: User) -> list[Task]:
        return self.db.query(Task).filter(Task.user_id == user.id).order_by(Task.id).all()

    def _clients(self, user: User) -> list[Client]:
        return (
            self.db.query(Client)
            .filter(Client.user_id == user.id)
            .order_by(Client.created_at.desc(), Client.id.desc())
            .all()
        )

    def dashboard(self, user: User, today: Optional[date] = None) -> dict:
        return dashboard_stats(self._tasks(user), today or date.today())

    def task_stats(self, user: User) -> dict:
        return task_stats(self._tasks(user))

    def client_summary(self, user: User) -> list[dict]:
        return client_summary(self._clients(user), self._tasks(user))

    def client_analytics(self, user: User) -> list[dict]:
        return client_analytics(self._clients(user), self._tasks(user))

    def weekly(self, user: User, today: Optional[date] = None) -> list[dict]:
        return weekly_analytics(self._tasks(user), today or date.today())

    def monthly(self, user: User, today: Optional[date] = None) -> list[dict]:
        return monthly_analytics(self._tasks(user), today or date.today())
