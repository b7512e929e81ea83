"""
Authentication endpoints.

Registration, email/password login, phone OTP login, guest sessions and the
current-caller profile. Sensitive endpoints are throttled per client
address on top of the account lockout kept by ``AuthGuard``.
"""

import logging

from fastapi import APIRouter, Depends, status

from newsroom.api.dependencies import (
    CurrentCaller,
    Guard,
    limit_sensitive_attempts,
)
from newsroom.core.config import settings
from newsroom.schemas.auth import (
    AccountView,
    AuthPayload,
    GuestRequest,
    GuestView,
    LoginRequest,
    PhoneLoginRequest,
    RegisterRequest,
    SendOtpRequest,
)
from newsroom.schemas.common import success_response
from newsroom.services.auth_guard import AuthGuard

logger = logging.getLogger(__name__)

router = APIRouter()

throttled = [Depends(limit_sensitive_attempts)]


def _auth_payload(token: str, user) -> AuthPayload:
    return AuthPayload(token=token, user=AccountView.model_validate(user))


@router.post("/register", status_code=status.HTTP_201_CREATED, dependencies=throttled)
async def register(request: RegisterRequest, guard: Guard) -> dict:
    """
    Create an account and return a token for it.

    Errors:
        400 ValidationError (every bad field listed), 400 DuplicateAccount
    """
    token, user = await guard.register(request.model_dump())
    return success_response(_auth_payload(token, user), "User registered successfully")


@router.post("/login", dependencies=throttled)
async def login(request: LoginRequest, guard: Guard) -> dict:
    """
    Email/password login.

    Errors:
        400 ValidationError, 401 unknown account or wrong password,
        403 Inactive, 423 Locked
    """
    token, user = await guard.authenticate(request.email, request.password)
    return success_response(_auth_payload(token, user), "Login successful")


@router.post("/send-otp", dependencies=throttled)
async def send_otp(request: SendOtpRequest, guard: Guard) -> dict:
    """
    Issue a phone OTP.

    The code is only echoed back in development; elsewhere it would go out
    by SMS.
    """
    otp = guard.send_otp(request.phone)
    data = {"otp": otp} if settings.is_development else None
    return success_response(data, "OTP sent successfully")


@router.post("/phone-login", dependencies=throttled)
async def phone_login(request: PhoneLoginRequest, guard: Guard) -> dict:
    token, user = await guard.phone_login(request.phone, request.otp)
    return success_response(_auth_payload(token, user), "Login successful")


@router.post("/guest")
async def guest(request: GuestRequest) -> dict:
    """Start a guest session. Always succeeds; nothing is persisted."""
    token, guest_account = AuthGuard.guest_session(request.device_info)
    return success_response({"token": token, "user": GuestView(**guest_account)}, "Guest session created")


@router.get("/me")
async def me(caller: CurrentCaller, guard: Guard) -> dict:
    """Profile of the caller behind the bearer token."""
    if caller.is_guest:
        return success_response({"user": GuestView(id=caller.user_id, name="Guest User", role=caller.role)})

    await guard.users.touch_last_active(caller.user)
    return success_response({"user": AccountView.model_validate(caller.user)})


@router.post("/logout")
async def logout() -> dict:
    """Tokens are stateless; the client discards its copy."""
    return success_response(message="Logged out successfully")
