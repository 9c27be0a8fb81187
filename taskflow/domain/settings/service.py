"""Settings service - Currency preference and weekly availability"""

import logging

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...cache import get_settings_cached, invalidate_settings_cache, set_settings_cached
from ...config import DEFAULT_CURRENCY
from ...models import AvailabilityWindow, User, UserSettings
from ...shared.validators import minutes_since_midnight
from .currency import DEFAULT_CURRENCY_CODE, DEFAULT_POSITION, currency_symbol, format_amount, is_supported
from .repository import SettingsRepository
from .schemas import AvailabilityWindowCreate, AvailabilityWindowUpdate, SettingsUpdate

logger = logging.getLogger(__name__)


def window_to_dict(window: AvailabilityWindow) -> dict:
    return {"id": window.id, "days": list(window.days), "from": window.from_time, "to": window.to_time}


class SettingsService:
    """Service layer for settings business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SettingsRepository()

    def _get_or_create(self, user: User) -> UserSettings:
        settings = self.repo.get_by_user(self.db, user.id)
        if settings:
            return settings

        code = DEFAULT_CURRENCY.upper() if is_supported(DEFAULT_CURRENCY) else DEFAULT_CURRENCY_CODE
        logger.info(f"🆕 Creating default settings for user {user.id} ({code})")
        return self.repo.create_settings(
            self.db,
            user.id,
            currency_code=code,
            currency_symbol=currency_symbol(code),
            currency_position=DEFAULT_POSITION,
        )

    def get_currency_code(self, user: User) -> str:
        """The user's preferred currency, used as the default for new clients"""
        settings = self.repo.get_by_user(self.db, user.id)
        return settings.currency_code if settings else DEFAULT_CURRENCY

    def get_settings(self, user: User) -> dict:
        """Get settings, created with defaults on first read"""
        cached = get_settings_cached(user.id)
        if cached:
            return cached

        settings = self._get_or_create(user)
        result = {
            "currency": {
                "code": settings.currency_code,
                "symbol": settings.currency_symbol,
                "position": settings.currency_position,
            },
            "schedules": [window_to_dict(w) for w in self.repo.get_windows(self.db, user.id)],
        }
        set_settings_cached(user.id, result)
        return result

    def update_settings(self, data: SettingsUpdate, user: User) -> dict:
        settings = self._get_or_create(user)
        currency = data.currency

        updates = {
            "currency_code": currency.code,
            "currency_symbol": currency.symbol or currency_symbol(currency.code),
        }
        if currency.position is not None:
            updates["currency_position"] = currency.position

        self.repo.update_settings(self.db, settings, **updates)
        invalidate_settings_cache(user.id)
        logger.info(f"✅ Currency for user {user.id} set to {currency.code}")
        return self.get_settings(user)

    def format_amount(self, amount: float, user: User) -> str:
        currency = self.get_settings(user)["currency"]
        return format_amount(amount, currency["symbol"], currency["position"])

    # Availability windows

    def get_windows(self, user: User) -> list[AvailabilityWindow]:
        return self.repo.get_windows(self.db, user.id)

    def get_window(self, window_id: int, user: User) -> AvailabilityWindow:
        window = self.repo.get_window(self.db, window_id, user.id)
        if not window:
            raise HTTPException(status_code=404, detail="Schedule not found")
        return window

    def add_window(self, data: AvailabilityWindowCreate, user: User) -> AvailabilityWindow:
        window = self.repo.create_window(
            self.db, user.id, days=data.days, from_time=data.from_, to_time=data.to
        )
        invalidate_settings_cache(user.id)
        logger.info(f"✅ Schedule {window.id} added for user {user.id}: {data.days} {data.from_}-{data.to}")
        return window

    def update_window(
        self, window_id: int, data: AvailabilityWindowUpdate, user: User
    ) -> AvailabilityWindow:
        window = self.get_window(window_id, user)

        updates = {}
        if data.days is not None:
            updates["days"] = data.days
        if data.from_ is not None:
            updates["from_time"] = data.from_
        if data.to is not None:
            updates["to_time"] = data.to

        from_time = updates.get("from_time", window.from_time)
        to_time = updates.get("to_time", window.to_time)
        if minutes_since_midnight(from_time) >= minutes_since_midnight(to_time):
            raise HTTPException(status_code=422, detail='"from" must be before "to"')

        window = self.repo.update_window(self.db, window, **updates)
        invalidate_settings_cache(user.id)
        logger.info(f"✅ Schedule {window.id} updated for user {user.id}")
        return window

    def delete_window(self, window_id: int, user: User) -> dict:
        window = self.get_window(window_id, user)
        self.repo.delete_window(self.db, window)
        invalidate_settings_cache(user.id)
        logger.info(f"🗑️ Schedule {window_id} deleted for user {user.id}")
        return {"message": "Schedule deleted"}
