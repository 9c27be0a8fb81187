"""Planner service - placing tasks into daily time slots"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...models import ScheduleItem, User
from ..tasks.repository import TaskRepository
from . import slots
from .repository import PlannerRepository
from .schemas import (
    PlannerDayResponse,
    PlannerSlot,
    ScheduleItemCreate,
    ScheduleItemResponse,
    ScheduleItemUpdate,
)

logger = logging.getLogger(__name__)


def item_to_response(item: ScheduleItem) -> ScheduleItemResponse:
    return ScheduleItemResponse(
        id=item.id,
        taskId=item.task_id,
        taskTitle=item.task.title,
        clientId=item.task.client_id,
        date=item.date,
        timeSlot=item.time_slot,
        endTime=slots.end_time(item.time_slot, item.duration),
        duration=item.duration,
        locked=item.locked,
    )


class PlannerService:
    """Service layer for the daily planner"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PlannerRepository()

    def get_day(self, day: date, user: User) -> PlannerDayResponse:
        """Every slot of the day with the item covering it, if any"""
        items = self.repo.get_items_for_day(self.db, user.id, day)

        day_slots = []
        for slot in slots.SLOTS:
            slot_span = slots.span(slot, slots.SLOT_MINUTES)
            covering = next(
                (i for i in items if slots.overlaps(slots.span(i.time_slot, i.duration), slot_span)),
                None,
            )
            day_slots.append(
                PlannerSlot(
                    time=slot,
                    item=item_to_response(covering) if covering else None,
                    continued=bool(covering) and covering.time_slot != slot,
                )
            )
        return PlannerDayResponse(date=day, slots=day_slots)

    def get_item(self, item_id: int, user: User) -> ScheduleItem:
        item = self.repo.get_item_by_id(self.db, item_id, user.id)
        if not item:
            raise HTTPException(status_code=404, detail="Schedule item not found")
        return item

    def add_item(self, data: ScheduleItemCreate, user: User) -> ScheduleItem:
        """Place a task in a slot; the item's span may not overlap another item that day"""
        task = TaskRepository.get_task_by_id(self.db, data.taskId, user.id)
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")

        self._check_placement(user, data.date, data.timeSlot, data.duration)

        try:
            item = self.repo.create_item(
                self.db,
                user.id,
                task_id=task.id,
                date=data.date,
                time_slot=data.timeSlot,
                duration=data.duration,
                locked=False,
            )
        except IntegrityError as e:
            # Another request took the slot between the overlap check and the insert
            self.db.rollback()
            logger.warning(f"⚠️ Slot {data.date} {data.timeSlot} taken concurrently for user {user.id}")
            raise HTTPException(status_code=409, detail="Time slot is already taken") from e

        logger.info(f"📅 Task {task.id} planned on {data.date} at {data.timeSlot} ({data.duration} min)")
        return item

    def update_item(self, item_id: int, data: ScheduleItemUpdate, user: User) -> ScheduleItem:
        """Locked items keep their slot and duration until they are unlocked"""
        item = self.get_item(item_id, user)
        provided = data.model_dump(exclude_unset=True)

        new_slot = provided.get("timeSlot", item.time_slot)
        new_duration = provided.get("duration", item.duration)
        moves = new_slot != item.time_slot or new_duration != item.duration

        if moves:
            if item.locked and provided.get("locked") is not False:
                raise HTTPException(status_code=409, detail="Schedule item is locked")
            self._check_placement(user, item.date, new_slot, new_duration, exclude_id=item.id)

        updates = {}
        if "locked" in provided and provided["locked"] is not None:
            updates["locked"] = provided["locked"]
        if moves:
            updates["time_slot"] = new_slot
            updates["duration"] = new_duration
        if not updates:
            return item

        try:
            item = self.repo.update_item(self.db, item, **updates)
        except IntegrityError as e:
            self.db.rollback()
            raise HTTPException(status_code=409, detail="Time slot is already taken") from e

        logger.info(f"✅ Schedule item {item.id} updated: {', '.join(updates)}")
        return item

    def toggle_lock(self, item_id: int, user: User) -> ScheduleItem:
        item = self.get_item(item_id, user)
        item = self.repo.update_item(self.db, item, locked=not item.locked)
        logger.info(f"🔒 Schedule item {item.id} {'locked' if item.locked else 'unlocked'}")
        return item

    def delete_item(self, item_id: int, user: User) -> dict:
        item = self.get_item(item_id, user)
        if item.locked:
            raise HTTPException(status_code=409, detail="Unlock the schedule item before removing it")
        self.repo.delete_item(self.db, item)
        logger.info(f"🗑️ Schedule item {item_id} removed")
        return {"message": "Schedule item removed"}

    def _check_placement(
        self,
        user: User,
        day: date,
        slot: str,
        duration: int,
        exclude_id: Optional[int] = None,
    ) -> None:
        if not slots.fits_in_day(slot, duration):
            raise HTTPException(
                status_code=422,
                detail=f"Item would end after {slots.DAY_END_HOUR:02d}:00",
            )

        wanted = slots.span(slot, duration)
        for other in self.repo.get_items_for_day(self.db, user.id, day):
            if other.id == exclude_id:
                continue
            if slots.overlaps(wanted, slots.span(other.time_slot, other.duration)):
                raise HTTPException(
                    status_code=409,
                    detail=f"Overlaps '{other.task.title}' at {other.time_slot}",
                )
