from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

USER_ROLES = ("admin", "user")


class SessionCreate(BaseModel):
    """Firebase ID token obtained by the frontend after sign-in"""

    idToken: str = Field(..., min_length=1)


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if v else v


class RoleUpdate(BaseModel):
    role: str

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        if v not in USER_ROLES:
            raise ValueError(f"Role must be one of: {', '.join(USER_ROLES)}")
        return v


class UserResponse(BaseModel):
    id: int
    firebase_uid: str
    email: str
    name: Optional[str]
    role: str
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    class Config:
        from_attributes = True


class MessageResponse(BaseModel):
    message: str
