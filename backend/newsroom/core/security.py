"""
Security primitives for authentication.

Provides bcrypt password hashing and JWT token encoding/decoding using
industry-standard libraries (bcrypt, python-jose). Policy decisions
(lockout, role checks, ownership) live in ``newsroom.services.auth_guard``.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from jose import ExpiredSignatureError, JWTError, jwt
from pydantic import BaseModel

from newsroom.core.config import settings
from newsroom.core.errors import Expired, Malformed

# JWT Algorithm
ALGORITHM = "HS256"

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


class TokenData(BaseModel):
    """
    JWT token payload data model.

    Contains the claims stored in the JWT token.
    """
    user_id: str
    is_guest: bool = False
    exp: Optional[datetime] = None


def _password_bytes(password: str) -> bytes:
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > _BCRYPT_MAX_BYTES:
        password_bytes = password_bytes[:_BCRYPT_MAX_BYTES]
    return password_bytes


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """
    Verify a plain password against a bcrypt hash.

    Args:
        plain_password: The plain text password to verify
        hashed_password: The stored hash (missing hash never matches)

    Returns:
        True if password matches, False otherwise
    """
    if not hashed_password:
        return False

    if isinstance(hashed_password, str):
        hashed_bytes = hashed_password.encode("utf-8")
    else:
        hashed_bytes = hashed_password

    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_bytes)
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt with a fresh salt.

    Note:
        Bcrypt has a 72-byte password limit. Passwords are truncated
        if necessary (unlikely for typical passwords).
    """
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(_password_bytes(password), salt)
    return hashed.decode("utf-8")


def create_access_token(
    user_id: str,
    is_guest: bool = False,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed JWT access token.

    Args:
        user_id: Account identifier (or ephemeral guest identifier)
        is_guest: Whether the token belongs to a non-persisted guest
        expires_delta: Token lifetime; defaults to the account lifetime

    Returns:
        Encoded JWT token string

    Example:
        >>> token = create_access_token("3f0c...", expires_delta=timedelta(days=7))
        >>> # Use token in Authorization header: Bearer <token>
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)

    now = datetime.now(timezone.utc)
    to_encode = {
        "sub": user_id,
        "is_guest": is_guest,
        "iat": now,
        "exp": now + expires_delta,
    }

    return jwt.encode(to_encode, settings.secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str) -> TokenData:
    """
    Decode and validate a JWT access token.

    Args:
        token: JWT token string to decode

    Returns:
        TokenData with the subject and guest flag

    Raises:
        Expired: If the signature is valid but the token has expired
        Malformed: If the token cannot be decoded, the signature is
            wrong, or the subject claim is missing
    """
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except ExpiredSignatureError as exc:
        raise Expired() from exc
    except JWTError as exc:
        raise Malformed() from exc

    user_id = payload.get("sub")
    if not user_id or not isinstance(user_id, str):
        raise Malformed()

    exp = payload.get("exp")
    return TokenData(
        user_id=user_id,
        is_guest=bool(payload.get("is_guest", False)),
        exp=datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None,
    )
