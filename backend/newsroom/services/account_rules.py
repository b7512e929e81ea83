"""
Validation rules for account input.

Same shape as ``content_rules``: each validator returns the list of violated
fields so callers can raise a single ``ValidationError`` listing them all.
"""

import re
from typing import Any, Dict, List, Mapping, Optional

from newsroom.core.errors import field_error
from newsroom.models.content import NEWS_CATEGORIES
from newsroom.models.user import ROLE_ADMIN, ROLE_USER

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^\+?[0-9\s\-()]+$", re.ASCII)
OTP_RE = re.compile(r"^[0-9]{4,6}$")

NAME_MIN, NAME_MAX = 2, 50
PASSWORD_MIN = 6

# super_admin can only be granted out of band
SELF_ASSIGNABLE_ROLES = (ROLE_USER, ROLE_ADMIN)

LANGUAGES = ("en", "hi", "regional")
THEMES = ("light", "dark", "auto")
FONT_SIZES = ("small", "medium", "large")
NOTIFICATION_FLAGS = ("push", "email", "breaking_news", "category_updates")
HHMM_RE = re.compile(r"^([01][0-9]|2[0-3]):[0-5][0-9]$")


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def phone_digits(phone: str) -> str:
    return re.sub(r"[^0-9]", "", phone)


def normalize_phone(phone: Optional[str]) -> Optional[str]:
    """Canonical stored form: ``+`` followed by the digits only."""
    digits = phone_digits(phone or "")
    return f"+{digits}" if digits else None


def validate_email(email: Any) -> List[Dict[str, str]]:
    if not isinstance(email, str) or not EMAIL_RE.match(email):
        return [field_error("email", "Please provide a valid email")]
    return []


def validate_phone(phone: Any, field: str = "phone") -> List[Dict[str, str]]:
    if not isinstance(phone, str) or not PHONE_RE.match(phone) or len(phone_digits(phone)) < 7:
        return [field_error(field, "Please provide a valid phone number")]
    return []


def validate_registration(fields: Mapping[str, Any]) -> List[Dict[str, str]]:
    errors: List[Dict[str, str]] = []

    name = (fields.get("name") or "").strip()
    if not NAME_MIN <= len(name) <= NAME_MAX:
        errors.append(field_error("name", f"Name must be between {NAME_MIN} and {NAME_MAX} characters"))

    errors.extend(validate_email(normalize_email(fields.get("email"))))

    password = fields.get("password") or ""
    if len(password) < PASSWORD_MIN:
        errors.append(field_error("password", f"Password must be at least {PASSWORD_MIN} characters long"))

    phone = fields.get("phone")
    if phone:
        errors.extend(validate_phone(phone.strip()))

    role = fields.get("role")
    if role is not None and role not in SELF_ASSIGNABLE_ROLES:
        errors.append(field_error("role", "Invalid role specified"))

    return errors


def validate_login(fields: Mapping[str, Any]) -> List[Dict[str, str]]:
    errors = validate_email(normalize_email(fields.get("email")))
    if not fields.get("password"):
        errors.append(field_error("password", "Password is required"))
    return errors


def validate_phone_login(fields: Mapping[str, Any]) -> List[Dict[str, str]]:
    errors = validate_phone((fields.get("phone") or "").strip())
    otp = fields.get("otp")
    if not isinstance(otp, str) or not OTP_RE.match(otp):
        errors.append(field_error("otp", "Please provide a valid OTP"))
    return errors


def validate_preferences(fields: Mapping[str, Any]) -> List[Dict[str, str]]:
    """Validate a partial preferences update."""
    errors: List[Dict[str, str]] = []

    if "language" in fields and fields["language"] not in LANGUAGES:
        errors.append(field_error("language", f"Language must be one of: {', '.join(LANGUAGES)}"))
    if "theme" in fields and fields["theme"] not in THEMES:
        errors.append(field_error("theme", f"Theme must be one of: {', '.join(THEMES)}"))
    if "font_size" in fields and fields["font_size"] not in FONT_SIZES:
        errors.append(field_error("font_size", f"Font size must be one of: {', '.join(FONT_SIZES)}"))

    if "categories" in fields:
        categories = fields["categories"]
        if not isinstance(categories, list) or any(c not in NEWS_CATEGORIES for c in categories):
            errors.append(field_error("categories", "Invalid category"))

    notifications = fields.get("notifications")
    if notifications is not None:
        if not isinstance(notifications, dict):
            errors.append(field_error("notifications", "Notifications must be an object"))
        else:
            for flag in NOTIFICATION_FLAGS:
                if flag in notifications and not isinstance(notifications[flag], bool):
                    errors.append(field_error(f"notifications.{flag}", "Must be a boolean"))
            silent = notifications.get("silent_hours")
            if silent is not None:
                if not isinstance(silent, dict):
                    errors.append(field_error("notifications.silent_hours", "Must be an object"))
                else:
                    for bound in ("start", "end"):
                        if bound in silent and not HHMM_RE.match(str(silent[bound])):
                            errors.append(field_error(f"notifications.silent_hours.{bound}", "Must be HH:MM"))

    return errors
