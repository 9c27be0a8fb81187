"""
Task list views - filtering, sorting and grouping of already-loaded tasks

Works on any objects exposing the Task column attributes, so the same code
serves ORM rows and test doubles.
"""

from datetime import date, timedelta
from typing import Optional

from ...shared.dates import month_day_label, next_month_start, week_end

STATUS_FILTERS = ("all", "todo", "in-progress", "done")
SORT_FIELDS = ("title", "due-date", "duration", "client")
SORT_DIRECTIONS = ("asc", "desc")
GROUP_BY = ("client", "status", "due-date", "timeline", "none")

STATUS_LABELS = {"todo": "To Do", "in-progress": "In Progress", "done": "Done"}

TIMELINE_GROUPS = ["Overdue", "Today", "This week", "This month", "Next month", "Future"]


def filter_tasks(
    tasks: list,
    status: str = "all",
    search: Optional[str] = None,
    client_id: Optional[int] = None,
) -> list:
    """Status filter, case-insensitive search over title and description, client filter"""
    needle = search.strip().lower() if search else ""
    result = []
    for task in tasks:
        if status != "all" and task.status != status:
            continue
        if client_id is not None and task.client_id != client_id:
            continue
        if needle and needle not in task.title.lower() and needle not in (task.description or "").lower():
            continue
        result.append(task)
    return result


def sort_tasks(
    tasks: list,
    sort_by: str = "due-date",
    direction: str = "asc",
    client_names: Optional[dict[int, str]] = None,
) -> list:
    """Stable sort; ties keep their incoming order in both directions"""
    client_names = client_names or {}

    if sort_by == "title":
        key = lambda t: t.title.lower()  # noqa: E731
    elif sort_by == "duration":
        key = lambda t: t.estimated_duration  # noqa: E731
    elif sort_by == "client":
        key = lambda t: client_names.get(t.client_id, "").lower()  # noqa: E731
    else:
        key = lambda t: t.due_date  # noqa: E731

    return sorted(tasks, key=key, reverse=direction == "desc")


def due_date_group(due: date, today: date) -> str:
    if due == today:
        return "Today"
    if due == today + timedelta(days=1):
        return "Tomorrow"
    if due < today:
        return "Overdue"
    return month_day_label(due)


def timeline_group(due: date, today: date) -> str:
    """Bucket a due date relative to today; weeks run Monday to Sunday"""
    if due < today:
        return "Overdue"
    if due == today:
        return "Today"
    if due <= week_end(today):
        return "This week"
    next_month = next_month_start(today)
    if due < next_month:
        return "This month"
    if due < next_month_start(next_month):
        return "Next month"
    return "Future"


def group_tasks(
    tasks: list,
    group_by: str = "client",
    today: Optional[date] = None,
    client_names: Optional[dict[int, str]] = None,
) -> list[tuple[str, list]]:
    """
    Group already-sorted tasks into (label, tasks) pairs.

    Groups appear in the order their first task appears, except the timeline
    grouping which always uses the fixed Overdue..Future order. Empty groups are
    never returned.
    """
    today = today or date.today()
    client_names = client_names or {}

    if group_by == "none":
        return [("All Tasks", list(tasks))] if tasks else []

    if group_by == "timeline":
        buckets: dict[str, list] = {label: [] for label in TIMELINE_GROUPS}
        for task in tasks:
            buckets[timeline_group(task.due_date, today)].append(task)
        return [(label, items) for label, items in buckets.items() if items]

    groups: dict[str, list] = {}
    for task in tasks:
        if group_by == "status":
            label = STATUS_LABELS.get(task.status, task.status)
        elif group_by == "due-date":
            label = due_date_group(task.due_date, today)
        else:
            label = client_names.get(task.client_id, "No Client")
        groups.setdefault(label, []).append(task)
    return list(groups.items())
