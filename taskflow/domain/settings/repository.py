"""Settings repository - Database operations for settings and availability windows"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import AvailabilityWindow, UserSettings


class SettingsRepository:
    """Repository for settings database operations"""

    @staticmethod
    def get_by_user(db: Session, user_id: int) -> Optional[UserSettings]:
        return db.query(UserSettings).filter(UserSettings.user_id == user_id).first()

    @staticmethod
    def create_settings(db: Session, user_id: int, **settings_data) -> UserSettings:
        settings = UserSettings(user_id=user_id, **settings_data)
        db.add(settings)
        db.commit()
        db.refresh(settings)
        return settings

    @staticmethod
    def update_settings(db: Session, settings: UserSettings, **updates) -> UserSettings:
        for key, value in updates.items():
            setattr(settings, key, value)
        db.commit()
        db.refresh(settings)
        return settings

    @staticmethod
    def get_windows(db: Session, user_id: int) -> list[AvailabilityWindow]:
        return (
            db.query(AvailabilityWindow)
            .filter(AvailabilityWindow.user_id == user_id)
            .order_by(AvailabilityWindow.id)
            .all()
        )

    @staticmethod
    def get_window(db: Session, window_id: int, user_id: int) -> Optional[AvailabilityWindow]:
        return (
            db.query(AvailabilityWindow)
            .filter(AvailabilityWindow.id == window_id, AvailabilityWindow.user_id == user_id)
            .first()
        )

    @staticmethod
    def get_windows_by_ids(db: Session, window_ids: list[int], user_id: int) -> list[AvailabilityWindow]:
        if not window_ids:
            return []
        return (
            db.query(AvailabilityWindow)
            .filter(AvailabilityWindow.id.in_(window_ids), AvailabilityWindow.user_id == user_id)
            .all()
        )

    @staticmethod
    def create_window(db: Session, user_id: int, **window_data) -> AvailabilityWindow:
        window = AvailabilityWindow(user_id=user_id, **window_data)
        db.add(window)
        db.commit()
        db.refresh(window)
        return window

    @staticmethod
    def update_window(db: Session, window: AvailabilityWindow, **updates) -> AvailabilityWindow:
        for key, value in updates.items():
            setattr(window, key, value)
        db.commit()
        db.refresh(window)
        return window

    @staticmethod
    def delete_window(db: Session, window: AvailabilityWindow) -> None:
        db.delete(window)
        db.commit()
