"""Task repository - Database operations for tasks"""

from datetime import date
from typing import Optional

from sqlalchemy import case
from sqlalchemy.orm import Session, selectinload

from ...models import Client, Task, task_dependencies


def _floored(column, delta):
    """column + delta, never below zero"""
    return case((column + delta < 0, 0), else_=column + delta)


class TaskRepository:
    """Repository for task database operations"""

    @staticmethod
    def _base_query(db: Session, user_id: int):
        return (
            db.query(Task)
            .options(selectinload(Task.blocked_by), selectinload(Task.schedules))
            .filter(Task.user_id == user_id)
        )

    @staticmethod
    def get_tasks(db: Session, user_id: int) -> list[Task]:
        """Get all tasks for a user, newest first"""
        return (
            TaskRepository._base_query(db, user_id)
            .order_by(Task.created_at.desc(), Task.id.desc())
            .all()
        )

    @staticmethod
    def get_task_by_id(db: Session, task_id: int, user_id: int) -> Optional[Task]:
        return TaskRepository._base_query(db, user_id).filter(Task.id == task_id).first()

    @staticmethod
    def get_tasks_by_ids(db: Session, task_ids: list[int], user_id: int) -> list[Task]:
        if not task_ids:
            return []
        return db.query(Task).filter(Task.id.in_(task_ids), Task.user_id == user_id).all()

    @staticmethod
    def get_incomplete_tasks(db: Session, user_id: int) -> list[Task]:
        return (
            TaskRepository._base_query(db, user_id)
            .filter(Task.status != "done")
            .order_by(Task.due_date.asc(), Task.id.asc())
            .all()
        )

    @staticmethod
    def get_upcoming_tasks(db: Session, user_id: int, limit: int = 5) -> list[Task]:
        """Non-done tasks by due date, most recently created first on equal dates"""
        return (
            TaskRepository._base_query(db, user_id)
            .filter(Task.status != "done")
            .order_by(Task.due_date.asc(), Task.created_at.desc(), Task.id.desc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def get_overdue_tasks(db: Session, user_id: int, today: date) -> list[Task]:
        return (
            TaskRepository._base_query(db, user_id)
            .filter(Task.status != "done", Task.due_date < today)
            .order_by(Task.due_date.asc(), Task.id.asc())
            .all()
        )

    @staticmethod
    def get_tasks_by_date(db: Session, user_id: int, start: date, end: date) -> list[Task]:
        """Tasks due within [start, end], both inclusive"""
        return (
            TaskRepository._base_query(db, user_id)
            .filter(Task.due_date >= start, Task.due_date <= end)
            .order_by(Task.due_date.asc(), Task.id.asc())
            .all()
        )

    @staticmethod
    def get_dependency_edges(db: Session, user_id: int) -> dict[int, set[int]]:
        """Current blocked-by edges of all the user's tasks"""
        rows = (
            db.query(task_dependencies.c.task_id, task_dependencies.c.blocked_by_id)
            .join(Task, Task.id == task_dependencies.c.task_id)
            .filter(Task.user_id == user_id)
            .all()
        )
        edges: dict[int, set[int]] = {}
        for task_id, blocked_by_id in rows:
            edges.setdefault(task_id, set()).add(blocked_by_id)
        return edges

    @staticmethod
    def get_client_names(db: Session, user_id: int) -> dict[int, str]:
        rows = db.query(Client.id, Client.name).filter(Client.user_id == user_id).all()
        return {client_id: name for client_id, name in rows}

    @staticmethod
    def adjust_client_counters(
        db: Session,
        client_id: int,
        active: int = 0,
        completed: int = 0,
        revenue: float = 0.0,
    ) -> None:
        """
        Apply counter deltas with a single UPDATE so concurrent task writes
        cannot lose increments. Does not commit.
        """
        values = {}
        if active:
            values[Client.active_tasks] = _floored(Client.active_tasks, active)
        if completed:
            values[Client.completed_tasks] = _floored(Client.completed_tasks, completed)
        if revenue:
            values[Client.total_revenue] = _floored(Client.total_revenue, revenue)
        if not values:
            return
        db.query(Client).filter(Client.id == client_id).update(values, synchronize_session=False)
