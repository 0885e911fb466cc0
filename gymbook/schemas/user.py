from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, UUID4, field_validator
from datetime import datetime

from gymbook.models.user import UserRole


# Shared properties
class UserBase(BaseModel):
    email: EmailStr
    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return v.strip().lower()


# Properties to receive via API on creation (POST /auth/register)
class UserCreate(UserBase):
    password: str
    role: Literal["customer", "owner"] = "customer"


# Properties to receive via API on admin creation (POST /auth/admin/register)
class AdminCreate(UserBase):
    password: str
    admin_secret: str


# Properties to receive via API on update (PATCH /me)
class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    phone: Optional[str] = None
    upi_id: Optional[str] = None
    avatar_url: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def ten_digit_phone(cls, v):
        if v is not None and not (v.isdigit() and len(v) == 10):
            raise ValueError("phone must be a 10 digit number")
        return v

    @field_validator("upi_id")
    @classmethod
    def upi_has_handle(cls, v):
        if v is not None and "@" not in v:
            raise ValueError('UPI ID must contain "@"')
        return v


# Properties returned via API
class User(UserBase):
    id: UUID4
    role: UserRole
    upi_id: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# Compact user for nested responses (owner views)
class UserSummary(BaseModel):
    id: UUID4
    full_name: Optional[str] = None
    phone: Optional[str] = None
    email: str

    class Config:
        from_attributes = True


class Token(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str
    user: User
