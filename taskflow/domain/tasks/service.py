"""Task service - Business logic for tasks, status transitions and client rollups"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Client, Task, User
from ...realtime import CLIENTS, TASKS, publish_change
from ..clients.repository import ClientRepository
from ..settings.repository import SettingsRepository
from . import views
from .dependencies import find_cycle, topological_order
from .repository import TaskRepository
from .schemas import TASK_FIELDS, TaskCreate, TaskScheduleUpdate, TaskUpdate

logger = logging.getLogger(__name__)


@dataclass
class Contribution:
    """What a task adds to its client's denormalized counters"""

    client_id: int
    active: int = 0
    completed: int = 0
    revenue: float = 0.0


def contribution_of(task: Task) -> Contribution:
    if task.status == "done":
        return Contribution(task.client_id, completed=1, revenue=task.revenue or 0.0)
    return Contribution(task.client_id, active=1)


def task_revenue(client: Client, tracked_hours: float) -> float:
    """hourly rate x tracked hours; clients without an hourly rate earn nothing per task"""
    if not client.hourly_rate:
        return 0.0
    return round(client.hourly_rate * (tracked_hours or 0.0), 2)


class TaskService:
    """Service layer for task business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TaskRepository()
        self.clients = ClientRepository()

    # Lookups

    def get_tasks(
        self,
        user: User,
        status: str = "all",
        search: Optional[str] = None,
        client_id: Optional[int] = None,
        sort_by: str = "due-date",
        direction: str = "asc",
    ) -> list[Task]:
        """Filtered and sorted task list"""
        self._check_choice("status", status, views.STATUS_FILTERS)
        self._check_choice("sort_by", sort_by, views.SORT_FIELDS)
        self._check_choice("direction", direction, views.SORT_DIRECTIONS)

        tasks = views.filter_tasks(self.repo.get_tasks(self.db, user.id), status, search, client_id)
        client_names = self.repo.get_client_names(self.db, user.id) if sort_by == "client" else None
        return views.sort_tasks(tasks, sort_by, direction, client_names)

    def get_grouped_tasks(
        self,
        user: User,
        group_by: str = "client",
        today: Optional[date] = None,
        **list_options,
    ) -> list[tuple[str, list[Task]]]:
        self._check_choice("group_by", group_by, views.GROUP_BY)
        tasks = self.get_tasks(user, **list_options)
        client_names = self.repo.get_client_names(self.db, user.id)
        return views.group_tasks(tasks, group_by, today or date.today(), client_names)

    def get_task(self, task_id: int, user: User) -> Task:
        task = self.repo.get_task_by_id(self.db, task_id, user.id)
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")
        return task

    def get_incomplete_tasks(self, user: User) -> list[Task]:
        return self.repo.get_incomplete_tasks(self.db, user.id)

    def get_upcoming_tasks(self, user: User, limit: int = 5) -> list[Task]:
        return self.repo.get_upcoming_tasks(self.db, user.id, limit)

    def get_overdue_tasks(self, user: User, today: Optional[date] = None) -> list[Task]:
        return self.repo.get_overdue_tasks(self.db, user.id, today or date.today())

    def get_tasks_by_date(self, user: User, start: date, end: date) -> list[Task]:
        if end < start:
            raise HTTPException(status_code=422, detail="end cannot be before start")
        return self.repo.get_tasks_by_date(self.db, user.id, start, end)

    def get_dependency_order(self, user: User) -> list[int]:
        """All task ids, blockers first"""
        edges = self.repo.get_dependency_edges(self.db, user.id)
        for task in self.repo.get_tasks(self.db, user.id):
            edges.setdefault(task.id, set())
        try:
            return topological_order(edges)
        except ValueError as e:
            # Cycles are rejected on write; reaching this means data was edited out of band
            logger.error(f"❌ Dependency cycle found for user {user.id}")
            raise HTTPException(status_code=409, detail=str(e)) from e

    # Writes

    def create_task(self, data: TaskCreate, user: User) -> Task:
        """Create a task and count it on its client"""
        logger.info(f"📥 Creating task for user_id: {user.id}")
        client = self._get_own_client(data.clientId, user)

        task = Task(
            user_id=user.id,
            status=data.status,
            revenue=0.0,
            **{column: getattr(data, field) for field, column in TASK_FIELDS.items()},
        )
        if data.status == "done":
            task.revenue = task_revenue(client, task.tracked_hours)
            task.completed_at = date.today()

        if data.schedules:
            task.schedules = self._get_own_windows(data.schedules, user)
        if data.blockedBy:
            # New tasks have no dependents yet so their edges cannot close a cycle
            task.blocked_by = self._get_own_blockers(data.blockedBy, user, task_id=None)

        self.db.add(task)
        self.db.flush()
        self._apply_contribution(contribution_of(task), sign=1)
        self._commit("create task")
        self.db.refresh(task)

        logger.info(f"✅ Task {task.id} created for client {client.id}: {task.title}")
        publish_change(user.id, TASKS, CLIENTS)
        return task

    def update_task(self, task_id: int, data: TaskUpdate, user: User) -> Task:
        """Partial update; status and client changes move the client counters"""
        task = self.get_task(task_id, user)
        provided = data.model_dump(exclude_unset=True)
        if not provided:
            return task

        before = contribution_of(task)
        previous_status = task.status

        if "clientId" in provided and provided["clientId"] != task.client_id:
            self._get_own_client(provided["clientId"], user)

        if "blockedBy" in provided:
            task.blocked_by = self._get_own_blockers(provided["blockedBy"], user, task_id=task.id)
        if "schedules" in provided:
            task.schedules = self._get_own_windows(provided["schedules"], user)

        for field, column in TASK_FIELDS.items():
            if field in provided:
                setattr(task, column, provided[field])

        if task.start_date and task.end_date and task.end_date < task.start_date:
            raise HTTPException(status_code=422, detail="endDate cannot be before startDate")

        new_status = provided.get("status", previous_status)
        self._transition(task, previous_status, new_status)

        self._move_contribution(before, contribution_of(task))
        self._commit("update task")
        self.db.refresh(task)

        logger.info(f"✅ Task {task.id} updated: {', '.join(provided)}")
        publish_change(user.id, TASKS, CLIENTS)
        return task

    def complete_task(self, task_id: int, user: User) -> Task:
        """Mark done, topping tracked hours up to the estimate. Done tasks are left as they are"""
        task = self.get_task(task_id, user)
        if task.status == "done":
            return task

        before = contribution_of(task)
        task.tracked_hours = max(task.tracked_hours or 0.0, task.estimated_duration / 60)
        self._transition(task, task.status, "done")
        self._move_contribution(before, contribution_of(task))
        self._commit("complete task")
        self.db.refresh(task)

        logger.info(f"✅ Task {task.id} completed ({task.tracked_hours:.2f}h, revenue {task.revenue})")
        publish_change(user.id, TASKS, CLIENTS)
        return task

    def update_schedule(self, task_id: int, data: TaskScheduleUpdate, user: User) -> Task:
        """Set start/end date and time"""
        return self.update_task(
            task_id, TaskUpdate(**data.model_dump(exclude_unset=True)), user
        )

    def delete_task(self, task_id: int, user: User) -> dict:
        """Delete a task, its planner items and dependency edges, and uncount it"""
        task = self.get_task(task_id, user)
        self._apply_contribution(contribution_of(task), sign=-1)
        self.db.delete(task)
        self._commit("delete task")

        logger.info(f"🗑️ Task {task_id} deleted")
        publish_change(user.id, TASKS, CLIENTS)
        return {"message": "Task deleted"}

    # Helpers

    @staticmethod
    def _check_choice(name: str, value: str, choices: tuple) -> None:
        if value not in choices:
            raise HTTPException(
                status_code=422, detail=f"{name} must be one of: {', '.join(choices)}"
            )

    def _get_own_client(self, client_id: int, user: User) -> Client:
        client = self.clients.get_client_by_id(self.db, client_id, user.id)
        if not client:
            raise HTTPException(status_code=404, detail="Client not found")
        return client

    def _get_own_windows(self, window_ids: list[int], user: User) -> list:
        unique_ids = set(window_ids)
        windows = SettingsRepository.get_windows_by_ids(self.db, list(unique_ids), user.id)
        if len(windows) != len(unique_ids):
            missing = unique_ids - {w.id for w in windows}
            raise HTTPException(status_code=422, detail=f"Unknown schedule(s): {sorted(missing)}")
        return windows

    def _get_own_blockers(self, blocker_ids: list[int], user: User, task_id: Optional[int]) -> list[Task]:
        unique_ids = set(blocker_ids)
        if task_id is not None and task_id in unique_ids:
            raise HTTPException(status_code=422, detail="A task cannot be blocked by itself")

        blockers = self.repo.get_tasks_by_ids(self.db, list(unique_ids), user.id)
        if len(blockers) != len(unique_ids):
            missing = unique_ids - {t.id for t in blockers}
            raise HTTPException(status_code=422, detail=f"Unknown blocking task(s): {sorted(missing)}")

        if task_id is not None:
            edges = self.repo.get_dependency_edges(self.db, user.id)
            cycle = find_cycle(edges, task_id, unique_ids)
            if cycle:
                path = " -> ".join(str(t) for t in cycle)
                logger.warning(f"⚠️ Rejected dependency cycle for task {task_id}: {path}")
                raise HTTPException(status_code=409, detail=f"Dependency cycle: {path}")

        return blockers

    def _transition(self, task: Task, previous_status: str, new_status: str) -> None:
        """Revenue and completion date follow the done / not-done boundary"""
        task.status = new_status
        was_done = previous_status == "done"
        is_done = new_status == "done"

        if is_done and not was_done:
            client = self.db.get(Client, task.client_id)
            task.revenue = task_revenue(client, task.tracked_hours)
            if not task.completed_at:
                task.completed_at = date.today()
        elif was_done and not is_done:
            task.revenue = 0.0
            task.completed_at = None

    def _apply_contribution(self, contribution: Contribution, sign: int) -> None:
        self.repo.adjust_client_counters(
            self.db,
            contribution.client_id,
            active=sign * contribution.active,
            completed=sign * contribution.completed,
            revenue=sign * contribution.revenue,
        )

    def _move_contribution(self, before: Contribution, after: Contribution) -> None:
        if before.client_id == after.client_id:
            self.repo.adjust_client_counters(
                self.db,
                after.client_id,
                active=after.active - before.active,
                completed=after.completed - before.completed,
                revenue=after.revenue - before.revenue,
            )
        else:
            self._apply_contribution(before, sign=-1)
            self._apply_contribution(after, sign=1)

    def _commit(self, action: str) -> None:
        try:
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to {action}: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Failed to {action}") from e
