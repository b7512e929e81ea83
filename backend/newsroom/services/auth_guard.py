"""
Authentication and authorization guard.

Decides for each request whether the caller is anonymous, a guest, or an
authenticated account, and whether that caller may perform an operation.
Lockout counters live on the account row itself; see
``UserRepository.record_failed_login``.

Open review item: ``authenticate`` reports a locked account before checking
the password, so a caller can tell "locked" apart from "wrong password" for
a known email. Kept as-is pending a security review.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from newsroom.core.config import settings
from newsroom.core.errors import (
    DuplicateAccount,
    Forbidden,
    Inactive,
    InvalidCredential,
    Locked,
    NotFound,
    ValidationError,
)
from newsroom.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from newsroom.models.base import utc_now
from newsroom.models.user import (
    ADMIN_ROLES,
    ROLE_GUEST,
    ROLE_SUPER_ADMIN,
    ROLE_USER,
    STATUS_ACTIVE,
    User,
)
from newsroom.repositories.user import UserRepository
from newsroom.services import account_rules

logger = logging.getLogger(__name__)

REQUIRE_ADMIN = frozenset(ADMIN_ROLES)
REQUIRE_SUPER_ADMIN = frozenset({ROLE_SUPER_ADMIN})


class AccountNotFound(NotFound):
    """
    No account matches the credential or token subject.

    Reported as 401 at the auth boundary so the response does not confirm
    whether an email is registered.
    """

    status_code = 401
    default_message = "Invalid email or password"


@dataclass
class Caller:
    """
    Resolved identity of a request.

    Attributes:
        user_id: Account id, or the ephemeral guest id
        role: user, admin, super_admin or guest
        is_guest: True for guest sessions (never persisted)
        user: Loaded account row for non-guests
    """
    user_id: str
    role: str
    is_guest: bool = False
    user: Optional[User] = field(default=None, repr=False)

    @property
    def is_admin(self) -> bool:
        return authorize(self.role, REQUIRE_ADMIN)


def authorize(caller_role: Optional[str], required_roles: Iterable[str]) -> bool:
    """
    Role gate.

    ``REQUIRE_ADMIN`` is satisfied by admin and super_admin,
    ``REQUIRE_SUPER_ADMIN`` only by super_admin. Guests, plain users and
    anonymous callers satisfy neither.
    """
    if not caller_role or caller_role == ROLE_GUEST:
        return False
    return caller_role in frozenset(required_roles)


def authorize_ownership(
    caller_id: Optional[str],
    caller_role: Optional[str],
    resource_owner_id: Optional[str],
) -> bool:
    """
    Owner-or-admin gate.

    Returns:
        True when the caller is an admin or owns the resource

    Raises:
        Forbidden: Otherwise
    """
    if authorize(caller_role, REQUIRE_ADMIN):
        return True
    if caller_id is not None and resource_owner_id is not None and str(caller_id) == str(resource_owner_id):
        return True
    raise Forbidden("Access denied. You can only access your own resources.")


def issue_token(account_id: str, is_guest: bool = False, ttl: Optional[timedelta] = None) -> str:
    """
    Sign a bearer token for an account or guest.

    Guests get the short guest lifetime, accounts the regular one, unless
    ``ttl`` overrides it.
    """
    if ttl is None:
        minutes = settings.guest_token_expire_minutes if is_guest else settings.access_token_expire_minutes
        ttl = timedelta(minutes=minutes)
    return create_access_token(account_id, is_guest=is_guest, expires_delta=ttl)


def check_account_state(user: User, now: datetime) -> None:
    """Raise Inactive or Locked when the account may not act."""
    if user.status != STATUS_ACTIVE:
        raise Inactive()
    if user.is_locked(now):
        raise Locked("Account is temporarily locked.")


class AuthGuard:
    """
    Account authentication against the credential store.

    Attributes:
        users: UserRepository bound to the request session
        max_attempts: Failures that trigger a lock
        lock_duration: How long a lock lasts
        clock: Source of "now" (overridable in tests)
    """

    def __init__(
        self,
        session: AsyncSession,
        max_attempts: Optional[int] = None,
        lock_duration: Optional[timedelta] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.session = session
        self.users = UserRepository(session)
        self.max_attempts = max_attempts or settings.max_login_attempts
        self.lock_duration = lock_duration or timedelta(minutes=settings.lock_time_minutes)
        self.clock = clock

    async def authenticate(self, email: str, password: str) -> Tuple[str, User]:
        """
        Check an email/password pair.

        Returns:
            (fresh token, account)

        Raises:
            ValidationError: Malformed email or empty password
            AccountNotFound: No account with that email
            Locked: lock_until is in the future (checked before the password)
            Inactive: Account status is not active
            InvalidCredential: Wrong password; the failure is counted and the
                account locked on reaching the threshold, in which case
                Locked is raised instead
        """
        errors = account_rules.validate_login({"email": email, "password": password})
        if errors:
            raise ValidationError(errors=errors)

        now = self.clock()
        user = await self.users.get_by_email(account_rules.normalize_email(email))
        if user is None:
            logger.warning("Login failed: unknown account")
            raise AccountNotFound()

        if user.is_locked(now):
            logger.warning("Login refused: account locked", extra={"user_id": user.id})
            raise Locked()

        if user.status != STATUS_ACTIVE:
            logger.warning("Login refused: account not active", extra={"user_id": user.id, "status": user.status})
            raise Inactive()

        if not verify_password(password, user.hashed_password):
            user = await self.users.record_failed_login(user, self.max_attempts, self.lock_duration, now)
            # The failure must survive the rollback of the request that reports it
            await self.session.commit()
            if user.is_locked(now):
                logger.warning(
                    "Account locked after repeated failed logins",
                    extra={"user_id": user.id, "failed_attempts": user.login_attempts},
                )
                raise Locked()
            logger.warning(
                "Login failed: invalid credential",
                extra={"user_id": user.id, "failed_attempts": user.login_attempts},
            )
            raise InvalidCredential()

        user = await self.users.record_successful_login(user, now)
        logger.info("Login succeeded", extra={"user_id": user.id, "role": user.role})
        return issue_token(user.id), user

    async def verify_token(self, token: str) -> Caller:
        """
        Resolve a bearer token to a caller.

        Non-guest tokens are checked against the current account row, so a
        deactivated or locked account cannot keep using an old token.

        Raises:
            Expired, Malformed: Token problems
            AccountNotFound: Subject no longer exists
            Inactive, Locked: Account state forbids acting
        """
        data = decode_access_token(token)
        if data.is_guest:
            return Caller(user_id=data.user_id, role=ROLE_GUEST, is_guest=True)

        user = await self.users.get_by_id(data.user_id)
        if user is None:
            raise AccountNotFound("Token is not valid. User not found.")
        check_account_state(user, self.clock())
        return Caller(user_id=user.id, role=user.role, user=user)

    async def register(self, fields: Dict[str, Any]) -> Tuple[str, User]:
        """
        Create an account and sign it in.

        Raises:
            ValidationError: Every invalid field
            DuplicateAccount: Email already registered
        """
        errors = account_rules.validate_registration(fields)
        if errors:
            raise ValidationError(errors=errors)

        email = account_rules.normalize_email(fields["email"])
        if await self.users.email_exists(email):
            raise DuplicateAccount()

        now = self.clock()
        try:
            user = await self.users.create(
                name=fields["name"].strip(),
                email=email,
                hashed_password=get_password_hash(fields["password"]),
                phone=account_rules.normalize_phone(fields.get("phone")),
                role=fields.get("role") or ROLE_USER,
                last_login=now,
                last_active_at=now,
            )
        except IntegrityError as exc:
            # A concurrent registration took the email after the lookup
            raise DuplicateAccount() from exc
        logger.info("Account registered", extra={"user_id": user.id, "role": user.role})
        return issue_token(user.id), user

    def send_otp(self, phone: str) -> str:
        """
        Issue a one-time password for ``phone``.

        No SMS provider is wired in; the configured mock OTP is returned and
        logged at debug level.
        """
        errors = account_rules.validate_phone((phone or "").strip())
        if errors:
            raise ValidationError(errors=errors)
        logger.debug("OTP issued", extra={"phone_suffix": phone.strip()[-4:]})
        return settings.mock_otp

    async def _provision_phone_account(self, phone: str) -> User:
        digits = account_rules.phone_digits(phone)
        email = f"{digits}@temp.com"
        user = await self.users.get_by_email(email)
        if user is not None:
            return user
        try:
            user = await self.users.create(
                name=f"User {digits[-4:]}",
                email=email,
                hashed_password=get_password_hash(secrets.token_urlsafe(16)),
                phone=phone,
                phone_verified=True,
            )
        except IntegrityError:
            # Lost a race with a concurrent first login for the same number
            await self.users.session.rollback()
            user = await self.users.get_by_email(email)
            if user is None:
                raise
            return user
        logger.info("Account provisioned from phone login", extra={"user_id": user.id})
        return user

    async def phone_login(self, phone: str, otp: str) -> Tuple[str, User]:
        """
        Sign in with a phone OTP, provisioning an account on first use.

        The OTP does not count against the password lockout, but a locked
        account stays locked.

        Raises:
            ValidationError: Malformed phone or OTP
            InvalidCredential: OTP does not match
            Inactive: Existing account is not active
            Locked: Existing account is inside its lockout window
        """
        errors = account_rules.validate_phone_login({"phone": phone, "otp": otp})
        if errors:
            raise ValidationError(errors=errors)

        if not secrets.compare_digest(otp.encode(), settings.mock_otp.encode()):
            logger.warning("Phone login failed: invalid OTP")
            raise InvalidCredential("Invalid OTP")

        phone = account_rules.normalize_phone(phone)
        now = self.clock()
        user = await self.users.get_by_phone(phone)
        if user is None:
            user = await self._provision_phone_account(phone)

        if user.status != STATUS_ACTIVE:
            raise Inactive()
        if user.is_locked(now):
            logger.warning("Phone login refused: account locked", extra={"user_id": user.id})
            raise Locked()

        user = await self.users.record_phone_login(user, now)
        return issue_token(user.id), user

    @staticmethod
    def guest_session(device_info: Optional[Dict[str, Any]] = None) -> Tuple[str, Dict[str, Any]]:
        """Start an ephemeral, non-persisted guest session."""
        guest_id = f"guest_{uuid.uuid4().hex}"
        guest = {
            "id": guest_id,
            "name": "Guest User",
            "role": ROLE_GUEST,
            "is_guest": True,
            "preferences": {"language": "en", "theme": "auto", "font_size": "medium"},
            "device_info": device_info or {},
        }
        logger.info("Guest session created", extra={"user_id": guest_id})
        return issue_token(guest_id, is_guest=True), guest

    async def set_account_status(self, actor: Caller, user_id: str, status: str) -> User:
        """
        Change an account's status on behalf of an admin.

        Only a super_admin may change the status of another admin.
        """
        if not authorize(actor.role, REQUIRE_ADMIN):
            raise Forbidden("Access denied. Admin privileges required.")

        user = await self.users.get_by_id(user_id)
        if user is None:
            raise NotFound("User not found")
        if user.role in ADMIN_ROLES and not authorize(actor.role, REQUIRE_SUPER_ADMIN):
            raise Forbidden("Access denied. Super admin privileges required.")

        user = await self.users.set_status(user, status)
        logger.info(
            "Account status changed",
            extra={"user_id": user.id, "status": status, "actor_id": actor.user_id},
        )
        return user
