"""
Validation and derived-field rules for content items.

Everything here is a pure function of its inputs: validators return a list
of ``{"field", "message"}`` pairs (empty when valid) and derivation helpers
compute the values that must be written together with a status change or a
new video reference. ``ContentLifecycle`` composes them before persisting.
"""

import re
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from newsroom.core.errors import field_error
from newsroom.models.content import (
    CONTENT_STATUSES,
    NEWS_CATEGORIES,
    STATUS_DRAFT,
    STATUS_PUBLISHED,
    VIDEO_CATEGORIES,
)

YOUTUBE_URL_RE = re.compile(
    r"^https?://(www\.)?(youtube\.com/(watch\?v=|embed/)|youtu\.be/)[\w-]+"
)
_YOUTUBE_ID_PATTERNS = (
    re.compile(r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([^&\n?#]+)"),
    re.compile(r"youtube\.com/watch\?.*v=([^&\n?#]+)"),
)
YOUTUBE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
DURATION_RE = re.compile(r"^([0-9]{1,2}:)?[0-9]{1,2}:[0-9]{2}$")
HTTP_URL_RE = re.compile(r"^https?://\S+$")

TITLE_MIN, TITLE_MAX = 5, 200
SUMMARY_MIN, SUMMARY_MAX = 10, 500
CONTENT_MIN = 50
DESCRIPTION_MAX = 1000
MAX_TAGS = 20
TAG_MAX = 50

NEWS_FIELDS = frozenset({
    "title", "summary", "content", "category", "image_url", "status",
    "tags", "featured", "author",
})
VIDEO_FIELDS = frozenset({
    "title", "description", "youtube_url", "category", "thumbnail_url",
    "status", "duration", "tags", "featured",
})
# Optional columns an update may reset by sending null
NEWS_CLEARABLE = frozenset({"image_url"})
VIDEO_CLEARABLE = frozenset({"description", "thumbnail_url", "duration"})


def normalize_fields(fields: Mapping[str, Any], clearable: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Trim string values and tags.

    Keys whose value is None are dropped, except those in ``clearable``,
    which are kept so the update writes NULL.
    """
    clearable = frozenset(clearable)
    cleaned: Dict[str, Any] = {}
    for key, value in fields.items():
        if value is None:
            if key in clearable:
                cleaned[key] = None
            continue
        if isinstance(value, str):
            value = value.strip()
        elif key == "tags" and isinstance(value, (list, tuple)):
            value = [t.strip() for t in value if isinstance(t, str) and t.strip()]
        cleaned[key] = value
    return cleaned


def extract_youtube_id(url: Optional[str]) -> Optional[str]:
    """
    Pull the video identifier out of a YouTube watch, embed or short URL.

    Returns None when no pattern matches.

    Example:
        >>> extract_youtube_id("https://youtu.be/dQw4w9WgXcQ?t=3")
        'dQw4w9WgXcQ'
    """
    if not url:
        return None
    for pattern in _YOUTUBE_ID_PATTERNS:
        match = pattern.search(url)
        if match:
            return match.group(1)
    return None


def default_thumbnail(youtube_id: str) -> str:
    return f"https://img.youtube.com/vi/{youtube_id}/maxresdefault.jpg"


def resolve_publish_timestamp(
    new_status: str,
    current_published_at: Optional[datetime],
    now: datetime,
) -> Optional[datetime]:
    """
    Publish timestamp that must be stored alongside ``new_status``.

    Entering (or staying in) published keeps an existing timestamp or stamps
    ``now``; anything else clears it.
    """
    if new_status == STATUS_PUBLISHED:
        return current_published_at or now
    return None


def _check_length(
    errors: List[Dict[str, str]],
    fields: Mapping[str, Any],
    name: str,
    label: str,
    min_len: Optional[int] = None,
    max_len: Optional[int] = None,
    required: bool = True,
) -> None:
    if name not in fields:
        if required:
            errors.append(field_error(name, f"{label} is required"))
        return

    value = fields[name]
    if value is None and not required:
        return
    if not isinstance(value, str):
        errors.append(field_error(name, f"{label} must be a string"))
        return

    if min_len is not None and max_len is not None and not (min_len <= len(value) <= max_len):
        errors.append(field_error(name, f"{label} must be between {min_len} and {max_len} characters"))
    elif min_len is not None and max_len is None and len(value) < min_len:
        errors.append(field_error(name, f"{label} must be at least {min_len} characters long"))
    elif max_len is not None and min_len is None and len(value) > max_len:
        errors.append(field_error(name, f"{label} cannot exceed {max_len} characters"))


def _check_choice(
    errors: List[Dict[str, str]],
    fields: Mapping[str, Any],
    name: str,
    choices,
    message: str,
    required: bool = True,
) -> None:
    if name not in fields:
        if required:
            errors.append(field_error(name, message))
        return
    if fields[name] not in choices:
        errors.append(field_error(name, message))


def _check_url(errors: List[Dict[str, str]], fields: Mapping[str, Any], name: str, label: str) -> None:
    value = fields.get(name)
    if value is None or value == "":
        return
    if not isinstance(value, str) or not HTTP_URL_RE.match(value):
        errors.append(field_error(name, f"{label} must be a valid HTTP/HTTPS URL"))


def _check_common_optional(errors: List[Dict[str, str]], fields: Mapping[str, Any]) -> None:
    _check_choice(
        errors, fields, "status", CONTENT_STATUSES,
        "Status must be either published or draft", required=False,
    )

    if "tags" in fields:
        tags = fields["tags"]
        if not isinstance(tags, list):
            errors.append(field_error("tags", "Tags must be an array"))
        elif len(tags) > MAX_TAGS or any(len(t) > TAG_MAX for t in tags):
            errors.append(field_error("tags", f"At most {MAX_TAGS} tags of up to {TAG_MAX} characters"))

    if "featured" in fields and not isinstance(fields["featured"], bool):
        errors.append(field_error("featured", "Featured must be a boolean"))


def _check_unknown(errors: List[Dict[str, str]], fields: Mapping[str, Any], allowed) -> None:
    for name in sorted(set(fields) - allowed):
        errors.append(field_error(name, "Unknown field"))


def validate_news(fields: Mapping[str, Any], partial: bool = False) -> List[Dict[str, str]]:
    """
    Validate article fields.

    Args:
        fields: Normalised field values
        partial: Only check supplied fields (updates)

    Returns:
        Every violated field, in a stable order
    """
    required = not partial
    errors: List[Dict[str, str]] = []

    _check_unknown(errors, fields, NEWS_FIELDS)
    _check_length(errors, fields, "title", "Title", TITLE_MIN, TITLE_MAX, required)
    _check_length(errors, fields, "summary", "Summary", SUMMARY_MIN, SUMMARY_MAX, required)
    _check_length(errors, fields, "content", "Content", min_len=CONTENT_MIN, required=required)
    _check_choice(errors, fields, "category", NEWS_CATEGORIES, "Invalid category", required)
    _check_url(errors, fields, "image_url", "Image URL")
    _check_length(errors, fields, "author", "Author", max_len=100, required=False)
    _check_common_optional(errors, fields)

    return errors


def validate_video(fields: Mapping[str, Any], partial: bool = False) -> List[Dict[str, str]]:
    """
    Validate video fields, including that an identifier can be derived
    from the YouTube URL.
    """
    required = not partial
    errors: List[Dict[str, str]] = []

    _check_unknown(errors, fields, VIDEO_FIELDS)
    _check_length(errors, fields, "title", "Title", TITLE_MIN, TITLE_MAX, required)
    _check_length(errors, fields, "description", "Description", max_len=DESCRIPTION_MAX, required=False)

    if "youtube_url" in fields:
        url = fields["youtube_url"]
        if not isinstance(url, str) or not YOUTUBE_URL_RE.match(url):
            errors.append(field_error("youtube_url", "Please provide a valid YouTube URL"))
        else:
            youtube_id = extract_youtube_id(url)
            if not youtube_id or not YOUTUBE_ID_RE.match(youtube_id):
                errors.append(field_error("youtube_url", "Invalid YouTube URL: no video ID found"))
    elif required:
        errors.append(field_error("youtube_url", "YouTube URL is required"))

    _check_choice(errors, fields, "category", VIDEO_CATEGORIES, "Invalid category", required)
    _check_url(errors, fields, "thumbnail_url", "Thumbnail URL")

    duration = fields.get("duration")
    if duration not in (None, "") and (not isinstance(duration, str) or not DURATION_RE.match(duration)):
        errors.append(field_error("duration", "Duration must be in format MM:SS or HH:MM:SS"))

    _check_common_optional(errors, fields)

    return errors


def initial_status(fields: Mapping[str, Any]) -> str:
    return fields.get("status") or STATUS_DRAFT
