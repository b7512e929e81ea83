"""Schemas for account self-service and admin user management."""

from typing import List, Literal, Optional

from pydantic import BaseModel


class SilentHours(BaseModel):
    enabled: Optional[bool] = None
    start: Optional[str] = None
    end: Optional[str] = None


class NotificationPreferences(BaseModel):
    push: Optional[bool] = None
    email: Optional[bool] = None
    breaking_news: Optional[bool] = None
    category_updates: Optional[bool] = None
    silent_hours: Optional[SilentHours] = None


class PreferencesUpdate(BaseModel):
    """Partial preferences update; omitted keys keep their stored value."""
    language: Optional[str] = None
    categories: Optional[List[str]] = None
    theme: Optional[str] = None
    font_size: Optional[str] = None
    notifications: Optional[NotificationPreferences] = None


class UserStatusUpdate(BaseModel):
    status: Literal["active", "inactive", "suspended"]
