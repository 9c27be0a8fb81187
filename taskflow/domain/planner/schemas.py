"""Planner domain schemas"""

import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_time_of_day
from .slots import DEFAULT_DURATION, DURATION_STEP, is_valid_slot


def _validate_slot(v: Optional[str]) -> str:
    normalized = validate_time_of_day(v)
    if normalized is None or not is_valid_slot(normalized):
        raise ValueError("timeSlot must be a planner slot between 08:00 and 17:30 on the half hour")
    return normalized


def _validate_duration(v: Optional[int]) -> int:
    if v is None:
        raise ValueError("duration cannot be null")
    if v % DURATION_STEP != 0:
        raise ValueError(f"duration must be a multiple of {DURATION_STEP} minutes")
    return v


class ScheduleItemCreate(BaseModel):
    date: datetime.date
    timeSlot: str
    taskId: int
    duration: int = Field(DEFAULT_DURATION, ge=DURATION_STEP)

    @field_validator("timeSlot")
    @classmethod
    def validate_slot(cls, v):
        return _validate_slot(v)

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v):
        return _validate_duration(v)


class ScheduleItemUpdate(BaseModel):
    locked: Optional[bool] = None
    duration: Optional[int] = Field(None, ge=DURATION_STEP)
    timeSlot: Optional[str] = None

    @field_validator("timeSlot")
    @classmethod
    def validate_slot(cls, v):
        return _validate_slot(v)

    @field_validator("duration")
    @classmethod
    def validate_duration(cls, v):
        return _validate_duration(v)


class ScheduleItemResponse(BaseModel):
    id: int
    taskId: int
    taskTitle: str
    clientId: int
    date: datetime.date
    timeSlot: str
    endTime: str
    duration: int
    locked: bool


class PlannerSlot(BaseModel):
    time: str
    item: Optional[ScheduleItemResponse] = None
    continued: bool = False  # slot covered by an item that started earlier


class PlannerDayResponse(BaseModel):
    date: datetime.date
    slots: list[PlannerSlot]
