"""
API tests for archive endpoints.
"""
import pytest
import pytest_asyncio
from fastapi import status
from httpx import ASGITransport, AsyncClient

PHOTO = {
    "title": "Grandma's wedding",
    "description": "Black and white portrait",
    "file_url": "https://files.example.com/wedding.jpg",
    "file_type": "image/jpeg",
    "file_size": 2048,
    "category": "Photos",
    "tags": ["1950s", "wedding"],
    "date_taken": "1952-06-01",
}

LETTER = {
    "title": "Letter from Kumasi",
    "file_url": "https://files.example.com/letter.pdf",
    "file_type": "application/pdf",
    "category": "Documents",
    "tags": ["1970s"],
    "date_taken": "1971-02-10",
}


@pytest_asyncio.fixture
async def member_client(app, family_user):
    """A second client signed in as the family member."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        response = await ac.post("/api/auth/login", json={"username": "jane.doe", "password": "jane.doe"})
        assert response.status_code == status.HTTP_200_OK
        yield ac


class TestBrowsing:
    @pytest.mark.asyncio
    async def test_list_and_filters(self, member_client, client):
        await member_client.post("/api/archives", json=PHOTO)
        await member_client.post("/api/archives", json=LETTER)

        response = await client.get("/api/archives")
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        assert body["count"] == 2

        response = await client.get("/api/archives", params={"category": "Photos"})
        assert [item["title"] for item in response.json()["data"]] == ["Grandma's wedding"]

        response = await client.get("/api/archives", params={"type": "application"})
        assert [item["title"] for item in response.json()["data"]] == ["Letter from Kumasi"]

        response = await client.get("/api/archives", params={"search": "kumasi"})
        assert response.json()["count"] == 1

        response = await client.get("/api/archives", params={"decade": "1950s", "category": "All"})
        assert [item["title"] for item in response.json()["data"]] == ["Grandma's wedding"]

    @pytest.mark.asyncio
    async def test_get_shows_uploader(self, member_client, client):
        item = (await member_client.post("/api/archives", json=PHOTO)).json()

        response = await client.get(f"/api/archives/{item['id']}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["uploaded_by_name"] == "Jane Doe"

    @pytest.mark.asyncio
    async def test_missing_item(self, client):
        response = await client.get("/api/archives/999")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Archive not found"}

    @pytest.mark.asyncio
    async def test_draft_items_are_hidden(self, member_client, client):
        item = (await member_client.post("/api/archives", json=PHOTO)).json()
        await member_client.put(f"/api/archives/{item['id']}", json={"status": "draft"})

        response = await client.get(f"/api/archives/{item['id']}")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert (await client.get("/api/archives")).json()["count"] == 0

        response = await member_client.get("/api/archives/user/my-archives")
        assert [entry["status"] for entry in response.json()] == ["draft"]

    @pytest.mark.asyncio
    async def test_stats(self, member_client, client):
        await member_client.post("/api/archives", json=PHOTO)
        await member_client.post("/api/archives", json=LETTER)

        response = await client.get("/api/archives/stats")
        assert response.json() == {
            "documents": 1,
            "photos": 1,
            "videos": 0,
            "audio": 0,
            "total": 2,
            "earliest_date": "1952-06-01",
            "latest_date": "1971-02-10",
            "years_covered": 20,
        }


class TestWrites:
    @pytest.mark.asyncio
    async def test_create_requires_sign_in(self, client):
        response = await client.post("/api/archives", json=PHOTO)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_member_edits_own_item(self, member_client):
        item = (await member_client.post("/api/archives", json=PHOTO)).json()
        assert item["status"] == "published"

        response = await member_client.put(f"/api/archives/{item['id']}", json={"location": "Accra"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["location"] == "Accra"

        response = await member_client.delete(f"/api/archives/{item['id']}")
        assert response.json() == {"message": "Archive deleted successfully"}

    @pytest.mark.asyncio
    async def test_other_member_cannot_edit(self, member_client, app, make_member):
        item = (await member_client.post("/api/archives", json=PHOTO)).json()
        await make_member(first_name="Sam", last_name="Doe", username="sam.doe")

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as other:
            await other.post("/api/auth/login", json={"username": "sam.doe", "password": "sam.doe"})

            response = await other.put(f"/api/archives/{item['id']}", json={"title": "Mine now"})
            assert response.status_code == status.HTTP_404_NOT_FOUND
            assert response.json() == {
                "error": "Archive not found or you do not have permission to update it"
            }

            response = await other.delete(f"/api/archives/{item['id']}")
            assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_admin_may_edit_any_item(self, member_client, admin_client, admin_user):
        item = (await member_client.post("/api/archives", json=PHOTO)).json()

        response = await admin_client.put(f"/api/archives/{item['id']}", json={"category": "Weddings"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["category"] == "Weddings"

        response = await admin_client.delete(f"/api/archives/{item['id']}")
        assert response.status_code == status.HTTP_200_OK

        response = await admin_client.get("/api/admin/audit-log")
        entries = response.json()["entries"]
        assert [entry["action"] for entry in entries] == ["archive_delete", "archive_update", "archive_create"]
        assert [entry["adminId"] for entry in entries] == [admin_user.id, admin_user.id, None]

    @pytest.mark.asyncio
    async def test_title_cannot_be_cleared(self, member_client):
        item = (await member_client.post("/api/archives", json=PHOTO)).json()

        response = await member_client.put(f"/api/archives/{item['id']}", json={"title": None})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_my_archives(self, member_client, admin_client):
        await member_client.post("/api/archives", json=PHOTO)
        await admin_client.post("/api/archives", json=LETTER)

        response = await member_client.get("/api/archives/user/my-archives")
        assert [item["title"] for item in response.json()] == ["Grandma's wedding"]
