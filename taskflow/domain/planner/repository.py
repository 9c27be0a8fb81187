"""Planner repository - Database operations for schedule items"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import ScheduleItem


class PlannerRepository:
    """Repository for schedule item database operations"""

    @staticmethod
    def get_items_for_day(db: Session, user_id: int, day: date) -> list[ScheduleItem]:
        return (
            db.query(ScheduleItem)
            .options(joinedload(ScheduleItem.task))
            .filter(ScheduleItem.user_id == user_id, ScheduleItem.date == day)
            .order_by(ScheduleItem.time_slot)
            .all()
        )

    @staticmethod
    def get_item_by_id(db: Session, item_id: int, user_id: int) -> Optional[ScheduleItem]:
        return (
            db.query(ScheduleItem)
            .filter(ScheduleItem.id == item_id, ScheduleItem.user_id == user_id)
            .first()
        )

    @staticmethod
    def create_item(db: Session, user_id: int, **item_data) -> ScheduleItem:
        """Add an item; commits, so a slot collision surfaces as IntegrityError"""
        item = ScheduleItem(user_id=user_id, **item_data)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def update_item(db: Session, item: ScheduleItem, **updates) -> ScheduleItem:
        for key, value in updates.items():
            setattr(item, key, value)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def delete_item(db: Session, item: ScheduleItem) -> None:
        db.delete(item)
        db.commit()
