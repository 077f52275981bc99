"""
API tests for blog and news endpoints.
"""
import pytest
from fastapi import status

POST = {
    "title": "Family Reunion 2024",
    "slug": "family-reunion-2024",
    "excerpt": "Highlights from the summer reunion",
    "content": "We gathered at the lake...",
}


@pytest.mark.parametrize("path", ["/api/blog", "/api/news"])
class TestArticles:
    @pytest.mark.asyncio
    async def test_published_entries_are_public(self, admin_client, path):
        response = await admin_client.post(path, json={**POST, "status": "published"})
        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["published_at"] is not None

        await admin_client.post("/api/auth/logout")
        response = await admin_client.get(path)
        assert response.status_code == status.HTTP_200_OK
        assert [entry["slug"] for entry in response.json()] == ["family-reunion-2024"]

        response = await admin_client.get(f"{path}/family-reunion-2024")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["title"] == "Family Reunion 2024"

    @pytest.mark.asyncio
    async def test_drafts_are_hidden(self, admin_client, path):
        response = await admin_client.post(path, json=POST)
        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["status"] == "draft"
        assert response.json()["published_at"] is None

        response = await admin_client.get(path)
        assert response.json() == []
        response = await admin_client.get(f"{path}/family-reunion-2024")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_publishing_a_draft_stamps_published_at(self, admin_client, path):
        article_id = (await admin_client.post(path, json=POST)).json()["id"]

        response = await admin_client.put(f"{path}/{article_id}", json={"status": "published"})
        assert response.status_code == status.HTTP_200_OK
        published_at = response.json()["published_at"]
        assert published_at is not None

        response = await admin_client.put(f"{path}/{article_id}", json={"title": "Renamed"})
        assert response.json()["published_at"] == published_at
        assert response.json()["title"] == "Renamed"

    @pytest.mark.asyncio
    async def test_duplicate_slug_is_refused(self, admin_client, path):
        await admin_client.post(path, json=POST)

        response = await admin_client.post(path, json=POST)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"].endswith("with this slug already exists")

    @pytest.mark.asyncio
    async def test_invalid_slug_is_refused(self, admin_client, path):
        response = await admin_client.post(path, json={**POST, "slug": "Not A Slug"})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Validation failed"

    @pytest.mark.asyncio
    async def test_required_field_cannot_be_cleared(self, admin_client, path):
        article_id = (await admin_client.post(path, json=POST)).json()["id"]

        response = await admin_client.put(f"{path}/{article_id}", json={"title": None})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "title cannot be empty"}

    @pytest.mark.asyncio
    async def test_delete(self, admin_client, path):
        article_id = (await admin_client.post(path, json=POST)).json()["id"]

        response = await admin_client.delete(f"{path}/{article_id}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["message"].endswith("deleted successfully")

        response = await admin_client.delete(f"{path}/{article_id}")
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_writes_require_admin(self, client, family_user, login, path):
        response = await client.post(path, json=POST)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

        await login("jane.doe", "jane.doe")
        response = await client.post(path, json=POST)
        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestArticleAudit:
    @pytest.mark.asyncio
    async def test_writes_are_audited(self, admin_client):
        blog_id = (await admin_client.post("/api/blog", json=POST)).json()["id"]
        await admin_client.put(f"/api/blog/{blog_id}", json={"excerpt": "Updated"})
        news_id = (await admin_client.post("/api/news", json=POST)).json()["id"]
        await admin_client.delete(f"/api/news/{news_id}")

        response = await admin_client.get("/api/admin/audit-log")
        entries = response.json()["entries"]
        assert [entry["action"] for entry in entries] == [
            "news_article_delete",
            "news_article_create",
            "blog_post_update",
            "blog_post_create",
        ]
        assert entries[-1]["targetType"] == "blog_post"
        assert entries[-1]["details"]["title"] == "Family Reunion 2024"

    @pytest.mark.asyncio
    async def test_author_name_comes_from_the_admin(self, admin_client, make_admin, login):
        await make_admin(email="writer@x.com", first_name="Wendy", last_name="Writer")
        await admin_client.post("/api/auth/logout")
        await login("writer@x.com", "secret123")

        response = await admin_client.post("/api/blog", json={**POST, "status": "published"})
        assert response.json()["author_name"] == "Wendy Writer"
