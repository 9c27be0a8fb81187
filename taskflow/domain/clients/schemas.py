"""Client domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_email
from ..settings.currency import normalize_code

# Wire name -> column name
CLIENT_FIELDS = {
    "name": "name",
    "email": "email",
    "phone": "phone",
    "address": "address",
    "vatNumber": "vat_number",
    "currency": "currency",
    "hourlyRate": "hourly_rate",
    "monthlyWage": "monthly_wage",
}


def _validate_name(v: Optional[str]) -> str:
    if v is None:
        raise ValueError("Name is required")
    v = v.strip()
    if len(v) < 2:
        raise ValueError("Name must be at least 2 characters")
    return v


def _validate_currency(v: Optional[str]) -> Optional[str]:
    if not v:
        return None
    return normalize_code(v)


class ClientCreate(BaseModel):
    """Schema for creating a new client"""

    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    vatNumber: Optional[str] = None
    currency: Optional[str] = None
    hourlyRate: Optional[float] = Field(None, ge=0)
    monthlyWage: Optional[float] = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _validate_name(v)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        if not v:
            raise ValueError("Email is required")
        return validate_email(v)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return _validate_currency(v)


class ClientUpdate(BaseModel):
    """Schema for a partial client update; optional fields may be cleared with null"""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    vatNumber: Optional[str] = None
    currency: Optional[str] = None
    hourlyRate: Optional[float] = Field(None, ge=0)
    monthlyWage: Optional[float] = Field(None, ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        return _validate_name(v)

    @field_validator("email")
    @classmethod
    def validate_email_field(cls, v):
        if not v:
            raise ValueError("Email is required")
        return validate_email(v)

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v):
        return _validate_currency(v)


class ClientResponse(BaseModel):
    """Schema for client response"""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    vatNumber: Optional[str] = None
    currency: Optional[str] = None
    hourlyRate: Optional[float] = None
    monthlyWage: Optional[float] = None
    activeTasks: int
    completedTasks: int
    totalRevenue: float
    monthlyRevenue: float = 0.0
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    @classmethod
    def from_client(cls, client, monthly_revenue: float = 0.0) -> "ClientResponse":
        return cls(
            id=client.id,
            name=client.name,
            email=client.email,
            phone=client.phone,
            address=client.address,
            vatNumber=client.vat_number,
            currency=client.currency,
            hourlyRate=client.hourly_rate,
            monthlyWage=client.monthly_wage,
            activeTasks=client.active_tasks,
            completedTasks=client.completed_tasks,
            totalRevenue=round(client.total_revenue or 0.0, 2),
            monthlyRevenue=round(monthly_revenue, 2),
            createdAt=client.created_at,
            updatedAt=client.updated_at,
        )
