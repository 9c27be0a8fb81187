"""Planner router - FastAPI endpoints for the daily planner"""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .schemas import PlannerDayResponse, ScheduleItemCreate, ScheduleItemResponse, ScheduleItemUpdate
from .service import PlannerService, item_to_response
from .slots import SLOTS

router = APIRouter(prefix="/planner", tags=["Planner"])


def get_planner_service(db: Session = Depends(get_db)) -> PlannerService:
    """Dependency injection for PlannerService"""
    return PlannerService(db)


@router.get("/slots", response_model=list[str])
def get_time_slots():
    """Planner slots of a day (08:00 to 17:30, every 30 minutes)"""
    return SLOTS


@router.get("/{day}", response_model=PlannerDayResponse)
def get_day(
    day: date,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return service.get_day(day, current_user)


@router.post("/items", response_model=ScheduleItemResponse, status_code=201)
def add_item(
    data: ScheduleItemCreate,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    """Place a task into a time slot"""
    return item_to_response(service.add_item(data, current_user))


@router.patch("/items/{item_id}", response_model=ScheduleItemResponse)
def update_item(
    item_id: int,
    data: ScheduleItemUpdate,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return item_to_response(service.update_item(item_id, data, current_user))


@router.post("/items/{item_id}/toggle-lock", response_model=ScheduleItemResponse)
def toggle_lock(
    item_id: int,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return item_to_response(service.toggle_lock(item_id, current_user))


@router.delete("/items/{item_id}")
def delete_item(
    item_id: int,
    current_user: User = Depends(get_current_user),
    service: PlannerService = Depends(get_planner_service),
):
    return service.delete_item(item_id, current_user)
