"""
Schemas for authentication endpoints.

Request models only check types; field rules (lengths, formats, allowed
roles) are applied by ``newsroom.services.account_rules`` so that every
violated field is reported in one response.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """
    Request schema for account registration.

    Attributes:
        name: Display name (2-50 chars)
        email: Login email, stored lower-cased
        password: Plaintext password (min 6 chars), hashed before storage
        phone: Optional phone number
        role: user or admin (super_admin cannot self-register)
    """
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Asha Rao",
                "email": "asha@example.com",
                "password": "secret1",
            }
        }


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class SendOtpRequest(BaseModel):
    phone: Optional[str] = None


class PhoneLoginRequest(BaseModel):
    phone: Optional[str] = None
    otp: Optional[str] = None


class GuestRequest(BaseModel):
    """Guest session request; device info is echoed back, never stored."""
    device_info: Dict[str, Any] = Field(default_factory=dict, alias="deviceInfo")

    class Config:
        populate_by_name = True


class AccountView(BaseModel):
    """
    Redacted account view.

    Never includes the password hash or lockout internals.
    """
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    status: str
    avatar: Optional[str] = None
    preferences: Dict[str, Any] = Field(default_factory=dict)
    email_verified: bool = False
    phone_verified: bool = False
    last_login: Optional[datetime] = None
    last_active_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GuestView(BaseModel):
    id: str
    name: str
    role: str
    is_guest: bool = True
    preferences: Dict[str, Any] = Field(default_factory=dict)
    device_info: Dict[str, Any] = Field(default_factory=dict)


class AuthPayload(BaseModel):
    token: str
    user: AccountView
