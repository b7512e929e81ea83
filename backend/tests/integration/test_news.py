"""
Integration tests for the news endpoints.

Covers the article lifecycle over HTTP: admin-only writes, draft
visibility, publishing, view counting, sharing, listings and search.

Tests follow AAA (Arrange, Act, Assert) pattern.
"""

import pytest

NEWS = "/api/v1/news"


async def create_article(client, headers, fields):
    response = await client.post(NEWS, json=fields, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["article"]


@pytest.mark.asyncio
class TestArticleLifecycle:
    async def test_create_publish_read_share(self, client, admin_headers, article_fields):
        """
        Draft is hidden from the public until published; a share counts once.
        """
        # Arrange
        article = await create_article(client, admin_headers, article_fields())
        assert article["status"] == "draft"
        assert article["published_at"] is None

        # Act / Assert: anonymous readers cannot see the draft
        response = await client.get(f"{NEWS}/{article['id']}")
        assert response.status_code == 403

        # Sharing a draft is refused
        response = await client.post(f"{NEWS}/{article['id']}/share")
        assert response.status_code == 403

        # Publish
        response = await client.put(f"{NEWS}/{article['id']}", json={"status": "published"}, headers=admin_headers)
        assert response.status_code == 200
        published = response.json()["data"]["article"]
        assert published["status"] == "published"
        assert published["published_at"] is not None

        # Anonymous read counts a view
        response = await client.get(f"{NEWS}/{article['id']}")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["article"]["views"] == 1
        assert data["related_articles"] == []

        # Share
        response = await client.post(f"{NEWS}/{article['id']}/share")
        assert response.status_code == 200
        assert response.json()["data"] == {"shares": 1}

    async def test_unpublish_clears_timestamp(self, client, admin_headers, article_fields):
        article = await create_article(client, admin_headers, article_fields(status="published"))

        response = await client.put(f"{NEWS}/{article['id']}", json={"status": "draft"}, headers=admin_headers)

        assert response.json()["data"]["article"]["published_at"] is None

    async def test_admin_reads_draft_without_counting(self, client, admin_headers, article_fields):
        article = await create_article(client, admin_headers, article_fields())

        response = await client.get(f"{NEWS}/{article['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["data"]["article"]["views"] == 0

    async def test_increment_view_can_be_disabled(self, client, admin_headers, article_fields):
        article = await create_article(client, admin_headers, article_fields(status="published"))

        response = await client.get(f"{NEWS}/{article['id']}", params={"increment_view": "false"})

        assert response.json()["data"]["article"]["views"] == 0

    async def test_reading_time_and_author(self, client, admin_headers, article_fields):
        body = " ".join(["word"] * 450)

        article = await create_article(client, admin_headers, article_fields(content=body, author="Desk"))

        assert article["reading_time"] == 3
        assert article["author"] == "Desk"

    async def test_delete(self, client, admin_headers, article_fields):
        article = await create_article(client, admin_headers, article_fields())

        response = await client.delete(f"{NEWS}/{article['id']}", headers=admin_headers)
        assert response.status_code == 200

        response = await client.get(f"{NEWS}/{article['id']}", headers=admin_headers)
        assert response.status_code == 404


@pytest.mark.asyncio
class TestWriteAuthorization:
    async def test_anonymous_cannot_create(self, client, article_fields):
        response = await client.post(NEWS, json=article_fields())
        assert response.status_code == 401

    async def test_reader_cannot_create(self, client, reader_headers, article_fields):
        response = await client.post(NEWS, json=article_fields(), headers=reader_headers)
        assert response.status_code == 403

    async def test_guest_cannot_delete(self, client, guest_headers):
        response = await client.delete(f"{NEWS}/anything", headers=guest_headers)
        assert response.status_code == 403

    async def test_invalid_article_lists_every_field(self, client, admin_headers):
        response = await client.post(NEWS, json={"title": "Hey", "category": "Weather"}, headers=admin_headers)

        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert fields == {"title", "summary", "content", "category"}

    async def test_unknown_field_rejected(self, client, admin_headers, article_fields):
        response = await client.post(NEWS, json=article_fields(views=500), headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "views", "message": "Unknown field"}]

    async def test_update_clears_image(self, client, admin_headers, article_fields):
        article = await create_article(
            client, admin_headers, article_fields(image_url="https://cdn.example.com/budget.jpg")
        )

        response = await client.put(f"{NEWS}/{article['id']}", json={"image_url": None}, headers=admin_headers)

        assert response.status_code == 200
        updated = response.json()["data"]["article"]
        assert updated["image_url"] is None
        assert updated["title"] == article["title"]

    async def test_update_unknown_article(self, client, admin_headers):
        response = await client.put(f"{NEWS}/missing", json={"title": "Another title"}, headers=admin_headers)
        assert response.status_code == 404


@pytest.mark.asyncio
class TestListings:
    @pytest.fixture
    async def seeded(self, client, admin_headers, article_fields):
        politics = await create_article(client, admin_headers, article_fields(status="published", featured=True))
        sports = await create_article(
            client, admin_headers, article_fields(status="published", category="Sports", title="Stadium opens downtown")
        )
        draft = await create_article(client, admin_headers, article_fields(title="Secret budget draft"))
        return {"politics": politics, "sports": sports, "draft": draft}

    async def test_public_listing_hides_drafts(self, client, seeded):
        response = await client.get(NEWS, params={"status": "draft"})

        data = response.json()["data"]
        assert {a["id"] for a in data["articles"]} == {seeded["politics"]["id"], seeded["sports"]["id"]}
        assert data["pagination"]["total"] == 2

    async def test_admin_listing_filters_drafts(self, client, admin_headers, seeded):
        response = await client.get(NEWS, params={"status": "draft"}, headers=admin_headers)

        assert [a["id"] for a in response.json()["data"]["articles"]] == [seeded["draft"]["id"]]

    async def test_invalid_token_treated_as_anonymous(self, client, seeded):
        response = await client.get(NEWS, headers={"Authorization": "Bearer junk"})

        assert response.status_code == 200
        assert response.json()["data"]["pagination"]["total"] == 2

    async def test_pagination_shape(self, client, seeded):
        response = await client.get(NEWS, params={"page": 1, "limit": 1})

        assert response.json()["data"]["pagination"] == {
            "current_page": 1,
            "total_pages": 2,
            "total": 2,
            "has_next_page": True,
            "has_prev_page": False,
            "limit": 1,
        }

    async def test_invalid_listing_parameters(self, client):
        response = await client.get(NEWS, params={"limit": 500, "sort": "likes"})

        assert response.status_code == 400
        assert {e["field"] for e in response.json()["errors"]} == {"limit", "sort"}

    async def test_featured(self, client, seeded):
        response = await client.get(f"{NEWS}/featured")

        assert [a["id"] for a in response.json()["data"]["articles"]] == [seeded["politics"]["id"]]

    async def test_trending(self, client, seeded):
        await client.get(f"{NEWS}/{seeded['sports']['id']}")

        response = await client.get(f"{NEWS}/trending", params={"limit": 1})

        assert [a["id"] for a in response.json()["data"]["articles"]] == [seeded["sports"]["id"]]

    async def test_search(self, client, seeded):
        response = await client.get(f"{NEWS}/search", params={"q": "stadium"})

        data = response.json()["data"]
        assert data["query"] == "stadium"
        assert [a["id"] for a in data["articles"]] == [seeded["sports"]["id"]]

    async def test_search_term_too_short(self, client):
        response = await client.get(f"{NEWS}/search", params={"q": "a"})
        assert response.status_code == 400

    async def test_category(self, client, seeded):
        response = await client.get(f"{NEWS}/category/Sports")

        data = response.json()["data"]
        assert data["category"] == "Sports"
        assert [a["id"] for a in data["articles"]] == [seeded["sports"]["id"]]

    async def test_unknown_category(self, client):
        response = await client.get(f"{NEWS}/category/Weather")
        assert response.status_code == 400
