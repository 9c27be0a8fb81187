"""Settings domain schemas - currency preference and availability windows"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import minutes_since_midnight, validate_time_of_day, validate_weekdays
from .currency import POSITIONS, normalize_code


def _validate_position(v: Optional[str]) -> Optional[str]:
    if v is not None and v not in POSITIONS:
        raise ValueError(f"Position must be one of: {', '.join(POSITIONS)}")
    return v


class CurrencySettings(BaseModel):
    code: str
    symbol: str
    position: str


class CurrencyUpdate(BaseModel):
    """Symbol is taken from the currency table when omitted"""

    code: str
    symbol: Optional[str] = Field(None, max_length=5)
    position: Optional[str] = None

    @field_validator("code")
    @classmethod
    def validate_code(cls, v):
        return normalize_code(v)

    @field_validator("position")
    @classmethod
    def validate_position(cls, v):
        return _validate_position(v)


class SettingsUpdate(BaseModel):
    currency: CurrencyUpdate


class AvailabilityWindowCreate(BaseModel):
    """Recurring weekly window; "from" must be before "to" """

    days: list[str]
    from_: str = Field(alias="from")
    to: str

    class Config:
        populate_by_name = True

    @field_validator("days")
    @classmethod
    def validate_days(cls, v):
        return validate_weekdays(v)

    @field_validator("from_", "to")
    @classmethod
    def validate_time(cls, v):
        normalized = validate_time_of_day(v)
        if normalized is None:
            raise ValueError("Time is required")
        return normalized

    @model_validator(mode="after")
    def validate_range(self):
        if minutes_since_midnight(self.from_) >= minutes_since_midnight(self.to):
            raise ValueError('"from" must be before "to"')
        return self


class AvailabilityWindowUpdate(BaseModel):
    days: Optional[list[str]] = None
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None

    class Config:
        populate_by_name = True

    @field_validator("days")
    @classmethod
    def validate_days(cls, v):
        if v is None:
            raise ValueError("days cannot be null")
        return validate_weekdays(v)

    @field_validator("from_", "to")
    @classmethod
    def validate_time(cls, v):
        normalized = validate_time_of_day(v)
        if normalized is None:
            raise ValueError("Time cannot be empty")
        return normalized


class AvailabilityWindowResponse(BaseModel):
    id: int
    days: list[str]
    from_: str = Field(alias="from")
    to: str

    class Config:
        populate_by_name = True


class SettingsResponse(BaseModel):
    currency: CurrencySettings
    schedules: list[AvailabilityWindowResponse]


class FormatAmountResponse(BaseModel):
    amount: float
    formatted: str
