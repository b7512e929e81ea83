"""
Unit tests for content validation and derived-field rules.

Tests cover:
- YouTube identifier extraction across URL shapes
- Publish timestamp resolution for every transition
- Article and video validation (every bad field reported)
- Partial validation for updates
"""

from datetime import datetime, timedelta, timezone

import pytest

from newsroom.services.content_rules import (
    default_thumbnail,
    extract_youtube_id,
    initial_status,
    normalize_fields,
    resolve_publish_timestamp,
    validate_news,
    validate_video,
)

NOW = datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)


def _fields(errors):
    return [e["field"] for e in errors]


class TestExtractYoutubeId:
    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/watch?v=dQw4w9WgXcQ",
            "https://youtube.com/watch?v=dQw4w9WgXcQ&t=42",
            "https://www.youtube.com/embed/dQw4w9WgXcQ",
            "https://youtu.be/dQw4w9WgXcQ",
            "http://youtu.be/dQw4w9WgXcQ?si=abc",
        ],
    )
    def test_known_url_shapes(self, url):
        assert extract_youtube_id(url) == "dQw4w9WgXcQ"

    def test_no_identifier(self):
        assert extract_youtube_id("https://vimeo.com/12345") is None
        assert extract_youtube_id("") is None
        assert extract_youtube_id(None) is None

    def test_default_thumbnail(self):
        assert default_thumbnail("dQw4w9WgXcQ") == "https://img.youtube.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"


class TestResolvePublishTimestamp:
    def test_draft_to_published_stamps_now(self):
        assert resolve_publish_timestamp("published", None, NOW) == NOW

    def test_published_to_published_keeps_existing(self):
        earlier = NOW - timedelta(days=3)
        assert resolve_publish_timestamp("published", earlier, NOW) == earlier

    def test_published_to_draft_clears(self):
        assert resolve_publish_timestamp("draft", NOW - timedelta(days=1), NOW) is None

    def test_round_trip_ends_cleared(self):
        published_at = resolve_publish_timestamp("published", None, NOW)
        assert resolve_publish_timestamp("draft", published_at, NOW) is None


class TestValidateNews:
    def test_valid_article(self, article_fields):
        assert validate_news(article_fields()) == []

    def test_missing_everything_lists_every_field(self):
        errors = validate_news({})
        assert set(_fields(errors)) == {"title", "summary", "content", "category"}

    def test_bounds(self, article_fields):
        errors = validate_news(article_fields(title="Shrt", summary="too short", content="x" * 49))
        assert set(_fields(errors)) == {"title", "summary", "content"}

    def test_exact_minimums_pass(self, article_fields):
        assert validate_news(article_fields(title="T" * 5, summary="S" * 10, content="C" * 50)) == []

    def test_invalid_category_and_image(self, article_fields):
        errors = validate_news(article_fields(category="Weather", image_url="ftp://host/img.png"))
        assert set(_fields(errors)) == {"category", "image_url"}

    def test_invalid_status(self, article_fields):
        assert _fields(validate_news(article_fields(status="archived"))) == ["status"]

    def test_unknown_field(self, article_fields):
        assert _fields(validate_news(article_fields(views=1000))) == ["views"]

    def test_partial_only_checks_supplied(self):
        assert validate_news({"status": "published"}, partial=True) == []
        assert _fields(validate_news({"title": "abc"}, partial=True)) == ["title"]


class TestValidateVideo:
    def test_valid_video(self, video_fields):
        assert validate_video(video_fields()) == []

    def test_required_fields(self):
        assert set(_fields(validate_video({}))) == {"title", "youtube_url", "category"}

    def test_non_youtube_url(self, video_fields):
        assert _fields(validate_video(video_fields(youtube_url="https://vimeo.com/1"))) == ["youtube_url"]

    def test_underivable_identifier(self, video_fields):
        errors = validate_video(video_fields(youtube_url="https://www.youtube.com/watch?v=short"))
        assert _fields(errors) == ["youtube_url"]

    @pytest.mark.parametrize("duration", ["4:12", "04:12", "1:04:12"])
    def test_duration_accepted(self, video_fields, duration):
        assert validate_video(video_fields(duration=duration)) == []

    @pytest.mark.parametrize("duration", ["412", "04-12", "1:2:3:4"])
    def test_duration_rejected(self, video_fields, duration):
        assert _fields(validate_video(video_fields(duration=duration))) == ["duration"]

    def test_description_limit(self, video_fields):
        assert _fields(validate_video(video_fields(description="d" * 1001))) == ["description"]


class TestNormalizeFields:
    def test_trims_and_drops_none(self):
        cleaned = normalize_fields({"title": "  Hello world  ", "image_url": None, "tags": [" a ", "", "b"]})
        assert cleaned == {"title": "Hello world", "tags": ["a", "b"]}

    def test_keeps_clearable_none(self):
        cleaned = normalize_fields({"image_url": None, "title": None}, clearable={"image_url"})
        assert cleaned == {"image_url": None}

    def test_partial_update_accepts_cleared_optionals(self):
        assert validate_video({"description": None, "duration": None, "thumbnail_url": None}, partial=True) == []

    def test_initial_status(self):
        assert initial_status({}) == "draft"
        assert initial_status({"status": "published"}) == "published"
