"""Settings router - FastAPI endpoints for currency and availability settings"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...database import get_db
from ...models import User
from .currency import CURRENCIES
from .schemas import (
    AvailabilityWindowCreate,
    AvailabilityWindowResponse,
    AvailabilityWindowUpdate,
    FormatAmountResponse,
    SettingsResponse,
    SettingsUpdate,
)
from .service import SettingsService, window_to_dict

router = APIRouter(prefix="/settings", tags=["Settings"])


def get_settings_service(db: Session = Depends(get_db)) -> SettingsService:
    """Dependency injection for SettingsService"""
    return SettingsService(db)


@router.get("", response_model=SettingsResponse)
def get_settings(
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    """Get the current user's settings (created with defaults on first read)"""
    return service.get_settings(current_user)


@router.patch("", response_model=SettingsResponse)
def update_settings(
    data: SettingsUpdate,
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    """Update the currency preference"""
    return service.update_settings(data, current_user)


@router.get("/currencies")
def get_currencies():
    """Supported currency codes and their default symbols"""
    return [{"code": code, "symbol": symbol} for code, symbol in CURRENCIES.items()]


@router.get("/format", response_model=FormatAmountResponse)
def format_amount(
    amount: float = Query(...),
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    """Format an amount in the user's currency"""
    return FormatAmountResponse(amount=amount, formatted=service.format_amount(amount, current_user))


@router.get("/schedules", response_model=list[AvailabilityWindowResponse])
def get_schedules(
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    return [window_to_dict(w) for w in service.get_windows(current_user)]


@router.post("/schedules", response_model=AvailabilityWindowResponse, status_code=201)
def add_schedule(
    data: AvailabilityWindowCreate,
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    """Add a recurring weekly availability window"""
    return window_to_dict(service.add_window(data, current_user))


@router.patch("/schedules/{window_id}", response_model=AvailabilityWindowResponse)
def update_schedule(
    window_id: int,
    data: AvailabilityWindowUpdate,
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    return window_to_dict(service.update_window(window_id, data, current_user))


@router.delete("/schedules/{window_id}")
def delete_schedule(
    window_id: int,
    current_user: User = Depends(get_current_user),
    service: SettingsService = Depends(get_settings_service),
):
    return service.delete_window(window_id, current_user)
