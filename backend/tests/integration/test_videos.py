"""
Integration tests for the video endpoints.

Tests follow AAA (Arrange, Act, Assert) pattern.
"""

import pytest

VIDEOS = "/api/v1/videos"


async def create_video(client, headers, fields):
    response = await client.post(VIDEOS, json=fields, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["video"]


@pytest.mark.asyncio
class TestVideoEndpoints:
    async def test_create_derives_youtube_fields(self, client, admin_headers, video_fields):
        video = await create_video(client, admin_headers, video_fields(youtube_url="https://youtu.be/dQw4w9WgXcQ"))

        assert video["youtube_id"] == "dQw4w9WgXcQ"
        assert video["thumbnail_url"] == "https://img.youtube.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"
        assert video["embed_url"] == "https://www.youtube.com/embed/dQw4w9WgXcQ"
        assert video["likes"] == 0

    async def test_duplicate_youtube_id(self, client, admin_headers, video_fields):
        await create_video(client, admin_headers, video_fields())

        response = await client.post(
            VIDEOS,
            json=video_fields(youtube_url="https://youtu.be/dQw4w9WgXcQ"),
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert response.json()["message"] == "Video with this YouTube ID already exists"

    async def test_invalid_video(self, client, admin_headers):
        response = await client.post(
            VIDEOS,
            json={"title": "Budget explained", "youtube_url": "https://vimeo.com/1", "category": "Analysis", "duration": "4m"},
            headers=admin_headers,
        )

        assert response.status_code == 400
        assert {e["field"] for e in response.json()["errors"]} == {"youtube_url", "duration"}

    async def test_like_and_share_published(self, client, admin_headers, video_fields):
        video = await create_video(client, admin_headers, video_fields(status="published"))

        liked = await client.post(f"{VIDEOS}/{video['id']}/like")
        shared = await client.post(f"{VIDEOS}/{video['id']}/share")

        assert liked.json()["data"] == {"likes": 1}
        assert shared.json()["data"] == {"shares": 1}

    async def test_like_draft_refused(self, client, admin_headers, video_fields):
        video = await create_video(client, admin_headers, video_fields())

        response = await client.post(f"{VIDEOS}/{video['id']}/like")

        assert response.status_code == 403

    async def test_like_unknown_video(self, client):
        response = await client.post(f"{VIDEOS}/missing/like")
        assert response.status_code == 404

    async def test_get_with_related(self, client, admin_headers, video_fields):
        first = await create_video(client, admin_headers, video_fields(status="published"))
        second = await create_video(
            client, admin_headers, video_fields(status="published", youtube_url="https://youtu.be/9bZkp7q19f0")
        )

        response = await client.get(f"{VIDEOS}/{first['id']}")

        data = response.json()["data"]
        assert data["video"]["views"] == 1
        assert [v["id"] for v in data["related_videos"]] == [second["id"]]

    async def test_update_url(self, client, admin_headers, video_fields):
        video = await create_video(client, admin_headers, video_fields())

        response = await client.put(
            f"{VIDEOS}/{video['id']}",
            json={"youtube_url": "https://www.youtube.com/embed/9bZkp7q19f0"},
            headers=admin_headers,
        )

        updated = response.json()["data"]["video"]
        assert updated["youtube_id"] == "9bZkp7q19f0"
        assert updated["thumbnail_url"] == "https://img.youtube.com/vi/9bZkp7q19f0/maxresdefault.jpg"

    async def test_update_clears_optional_fields(self, client, admin_headers, video_fields):
        video = await create_video(
            client, admin_headers, video_fields(description="Walkthrough", thumbnail_url="https://cdn.example.com/t.jpg")
        )

        response = await client.put(
            f"{VIDEOS}/{video['id']}",
            json={"description": None, "duration": None, "thumbnail_url": None},
            headers=admin_headers,
        )

        assert response.status_code == 200
        updated = response.json()["data"]["video"]
        assert updated["description"] is None
        assert updated["duration"] is None
        assert updated["thumbnail_url"] == "https://img.youtube.com/vi/dQw4w9WgXcQ/maxresdefault.jpg"

    async def test_unknown_field_rejected(self, client, admin_headers, video_fields):
        response = await client.post(VIDEOS, json=video_fields(likes=99), headers=admin_headers)

        assert response.status_code == 400
        assert [e["field"] for e in response.json()["errors"]] == ["likes"]

    async def test_listing_and_trending(self, client, admin_headers, video_fields):
        quiet = await create_video(client, admin_headers, video_fields(status="published"))
        liked = await create_video(
            client, admin_headers, video_fields(status="published", youtube_url="https://youtu.be/9bZkp7q19f0")
        )
        await client.post(f"{VIDEOS}/{liked['id']}/like")

        listing = await client.get(VIDEOS, params={"sort": "likes", "order": "desc"})
        trending = await client.get(f"{VIDEOS}/trending")

        assert [v["id"] for v in listing.json()["data"]["videos"]] == [liked["id"], quiet["id"]]
        assert [v["id"] for v in trending.json()["data"]["videos"]] == [liked["id"], quiet["id"]]

    async def test_reader_cannot_update(self, client, reader_headers):
        response = await client.put(f"{VIDEOS}/any", json={"title": "New title"}, headers=reader_headers)
        assert response.status_code == 403
