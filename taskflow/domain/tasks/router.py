"""Task router - FastAPI endpoints for task operations"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import (
    DependencyOrderResponse,
    TaskCreate,
    TaskGroupResponse,
    TaskResponse,
    TaskScheduleUpdate,
    TaskUpdate,
)
from .service import TaskService

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    """Dependency injection for TaskService"""
    return TaskService(db)


def _responses(tasks) -> list[TaskResponse]:
    return [TaskResponse.from_task(t) for t in tasks]


# ============================================================================
# LIST VIEWS
# ============================================================================


@router.get("", response_model=list[TaskResponse])
def get_tasks(
    status: str = Query("all"),
    search: Optional[str] = Query(None),
    client_id: Optional[int] = Query(None),
    sort_by: str = Query("due-date"),
    direction: str = Query("asc"),
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Tasks filtered by status/search/client and sorted"""
    return _responses(
        service.get_tasks(current_user, status, search, client_id, sort_by, direction)
    )


@router.get("/grouped", response_model=list[TaskGroupResponse])
def get_grouped_tasks(
    group_by: str = Query("client"),
    status: str = Query("all"),
    search: Optional[str] = Query(None),
    client_id: Optional[int] = Query(None),
    sort_by: str = Query("due-date"),
    direction: str = Query("asc"),
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Filtered, sorted tasks grouped by client, status, due date or timeline"""
    groups = service.get_grouped_tasks(
        current_user,
        group_by,
        status=status,
        search=search,
        client_id=client_id,
        sort_by=sort_by,
        direction=direction,
    )
    return [
        TaskGroupResponse(label=label, count=len(tasks), tasks=_responses(tasks))
        for label, tasks in groups
    ]


@router.get("/incomplete", response_model=list[TaskResponse])
def get_incomplete_tasks(
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return _responses(service.get_incomplete_tasks(current_user))


@router.get("/upcoming", response_model=list[TaskResponse])
def get_upcoming_tasks(
    limit: int = Query(5, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Next non-done tasks by due date"""
    return _responses(service.get_upcoming_tasks(current_user, limit))


@router.get("/overdue", response_model=list[TaskResponse])
def get_overdue_tasks(
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return _responses(service.get_overdue_tasks(current_user))


@router.get("/by-date", response_model=list[TaskResponse])
def get_tasks_by_date(
    start: date = Query(...),
    end: date = Query(...),
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Tasks due between start and end (inclusive)"""
    return _responses(service.get_tasks_by_date(current_user, start, end))


@router.get("/dependency-order", response_model=DependencyOrderResponse)
def get_dependency_order(
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return DependencyOrderResponse(order=service.get_dependency_order(current_user))


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return TaskResponse.from_task(service.get_task(task_id, current_user))


@router.post("", response_model=TaskResponse, status_code=201)
def create_task(
    data: TaskCreate,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Create a new task"""
    return TaskResponse.from_task(service.create_task(data, current_user))


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    data: TaskUpdate,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Update a task"""
    return TaskResponse.from_task(service.update_task(task_id, data, current_user))


@router.post("/{task_id}/complete", response_model=TaskResponse)
def complete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Mark a task as done"""
    return TaskResponse.from_task(service.complete_task(task_id, current_user))


@router.patch("/{task_id}/schedule", response_model=TaskResponse)
def update_task_schedule(
    task_id: int,
    data: TaskScheduleUpdate,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    """Set the start/end date and time of a task"""
    return TaskResponse.from_task(service.update_schedule(task_id, data, current_user))


@router.delete("/{task_id}")
def delete_task(
    task_id: int,
    current_user: User = Depends(get_current_user),
    service: TaskService = Depends(get_task_service),
):
    return service.delete_task(task_id, current_user)
