"""Task domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import validate_time_of_day

TASK_STATUSES = ("todo", "in-progress", "done")
TASK_PRIORITIES = ("low", "medium", "high")

# Wire name -> column name for plain columns (blockedBy/schedules/status handled separately)
TASK_FIELDS = {
    "clientId": "client_id",
    "title": "title",
    "description": "description",
    "estimatedDuration": "estimated_duration",
    "dueDate": "due_date",
    "priority": "priority",
    "startDate": "start_date",
    "startTime": "start_time",
    "endDate": "end_date",
    "endTime": "end_time",
    "trackedHours": "tracked_hours",
}

SCHEDULE_FIELDS = ("startDate", "startTime", "endDate", "endTime")


def _validate_title(v: Optional[str]) -> str:
    if v is None or not v.strip():
        raise ValueError("Title is required")
    return v.strip()


def _validate_status(v: Optional[str]) -> str:
    if v not in TASK_STATUSES:
        raise ValueError(f"Status must be one of: {', '.join(TASK_STATUSES)}")
    return v


def _validate_priority(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in TASK_PRIORITIES:
        raise ValueError(f"Priority must be one of: {', '.join(TASK_PRIORITIES)}")
    return v


def _check_date_range(start: Optional[date], end: Optional[date]) -> None:
    if start and end and end < start:
        raise ValueError("endDate cannot be before startDate")


class TaskCreate(BaseModel):
    """Schema for creating a new task"""

    clientId: int
    title: str
    description: str = ""
    estimatedDuration: int = Field(..., gt=0)  # minutes
    dueDate: date
    status: str = "todo"
    priority: Optional[str] = None
    startDate: Optional[date] = None
    startTime: Optional[str] = None
    endDate: Optional[date] = None
    endTime: Optional[str] = None
    blockedBy: list[int] = []
    schedules: list[int] = []
    trackedHours: float = Field(0.0, ge=0)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _validate_title(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v):
        return _validate_priority(v)

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, v):
        return validate_time_of_day(v)

    @model_validator(mode="after")
    def validate_range(self):
        _check_date_range(self.startDate, self.endDate)
        return self


class TaskUpdate(BaseModel):
    """Partial update; only fields present in the request are applied"""

    clientId: Optional[int] = None
    title: Optional[str] = None
    description: Optional[str] = None
    estimatedDuration: Optional[int] = Field(None, gt=0)
    dueDate: Optional[date] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    startDate: Optional[date] = None
    startTime: Optional[str] = None
    endDate: Optional[date] = None
    endTime: Optional[str] = None
    blockedBy: Optional[list[int]] = None
    schedules: Optional[list[int]] = None
    trackedHours: Optional[float] = Field(None, ge=0)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return _validate_title(v)

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        return _validate_status(v)

    @field_validator("priority")
    @classmethod
    def validate_priority(cls, v):
        return _validate_priority(v)

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, v):
        return validate_time_of_day(v)

    @field_validator(
        "clientId", "dueDate", "estimatedDuration", "description", "trackedHours", "blockedBy", "schedules"
    )
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @model_validator(mode="after")
    def validate_range(self):
        _check_date_range(self.startDate, self.endDate)
        return self


class TaskScheduleUpdate(BaseModel):
    """Start/end date and time of a task"""

    startDate: Optional[date] = None
    startTime: Optional[str] = None
    endDate: Optional[date] = None
    endTime: Optional[str] = None

    @field_validator("startTime", "endTime")
    @classmethod
    def validate_time(cls, v):
        return validate_time_of_day(v)

    @model_validator(mode="after")
    def validate_range(self):
        _check_date_range(self.startDate, self.endDate)
        return self


class TaskResponse(BaseModel):
    """Schema for task response"""

    id: int
    clientId: int
    title: str
    description: str
    estimatedDuration: int
    dueDate: date
    status: str
    priority: Optional[str] = None
    startDate: Optional[date] = None
    startTime: Optional[str] = None
    endDate: Optional[date] = None
    endTime: Optional[str] = None
    blockedBy: list[int] = []
    schedules: list[int] = []
    trackedHours: float
    revenue: float
    completedAt: Optional[date] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_task(cls, task) -> "TaskResponse":
        return cls(
            id=task.id,
            clientId=task.client_id,
            title=task.title,
            description=task.description or "",
            estimatedDuration=task.estimated_duration,
            dueDate=task.due_date,
            status=task.status,
            priority=task.priority,
            startDate=task.start_date,
            startTime=task.start_time,
            endDate=task.end_date,
            endTime=task.end_time,
            blockedBy=sorted(t.id for t in task.blocked_by),
            schedules=sorted(w.id for w in task.schedules),
            trackedHours=task.tracked_hours or 0.0,
            revenue=round(task.revenue or 0.0, 2),
            completedAt=task.completed_at,
            createdAt=task.created_at,
            updatedAt=task.updated_at,
        )


class TaskGroupResponse(BaseModel):
    label: str
    count: int
    tasks: list[TaskResponse]


class DependencyOrderResponse(BaseModel):
    """Task ids ordered so every blocker precedes the tasks it blocks"""

    order: list[int]
