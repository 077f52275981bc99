"""
API tests for content submission endpoints.
"""
import pytest
import pytest_asyncio
from fastapi import status
from httpx import ASGITransport, AsyncClient

BLOG = {
    "type": "blog",
    "title": "Memories of Grandpa",
    "content": {"excerpt": "A few stories", "content": "He loved to fish."},
}

ARCHIVE = {
    "type": "archive",
    "title": "Old farm photo",
    "content": {
        "fileUrl": "https://files.example.com/farm.jpg",
        "fileType": "image/jpeg",
        "tags": ["1960s"],
        "dateTaken": "1963-08-01",
    },
}


@pytest_asyncio.fixture
async def member_client(app, family_user):
    """A second client signed in as the family member."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        response = await ac.post("/api/auth/login", json={"username": "jane.doe", "password": "jane.doe"})
        assert response.status_code == status.HTTP_200_OK
        yield ac


async def submit(client, body):
    response = await client.post("/api/submissions", json=body)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()["submission"]


class TestSubmitting:
    @pytest.mark.asyncio
    async def test_member_submits(self, member_client, family_user):
        response = await member_client.post("/api/submissions", json=BLOG)
        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["message"] == "Submission created successfully"
        submission = body["submission"]
        assert submission["status"] == "pending"
        assert submission["submitter_type"] == "family_member"
        assert submission["submitter_id"] == family_user.id
        assert submission["submitter_name"] == "Jane Doe"

    @pytest.mark.asyncio
    async def test_invalid_content_is_refused(self, member_client):
        response = await member_client.post(
            "/api/submissions", json={"type": "archive", "title": "Photo", "content": {"fileUrl": "x"}}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Invalid archive content: fileType"}

    @pytest.mark.asyncio
    async def test_unknown_type_is_refused(self, member_client):
        response = await member_client.post(
            "/api/submissions", json={**BLOG, "type": "poem"}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "Validation failed"

    @pytest.mark.asyncio
    async def test_requires_sign_in(self, client):
        response = await client.post("/api/submissions", json=BLOG)
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.asyncio
    async def test_my_submissions(self, member_client, admin_client):
        await submit(member_client, BLOG)
        await submit(admin_client, ARCHIVE)

        response = await member_client.get("/api/submissions/my-submissions")
        assert [submission["title"] for submission in response.json()] == ["Memories of Grandpa"]

    @pytest.mark.asyncio
    async def test_listing_requires_admin(self, member_client):
        response = await member_client.get("/api/submissions")
        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestReview:
    @pytest.mark.asyncio
    async def test_approving_a_blog_submission_publishes_it(self, member_client, admin_client, admin_user):
        submission = await submit(member_client, BLOG)

        response = await admin_client.patch(
            f"/api/submissions/{submission['id']}/review",
            json={"status": "approved", "reviewNotes": "Lovely"},
        )
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["message"] == "Submission approved successfully"
        reviewed = body["submission"]
        assert reviewed["status"] == "approved"
        assert reviewed["reviewed_by"] == admin_user.id
        assert reviewed["review_notes"] == "Lovely"
        assert reviewed["published_id"] is not None

        response = await admin_client.get("/api/blog/memories-of-grandpa")
        assert response.status_code == status.HTTP_200_OK
        post = response.json()
        assert post["id"] == reviewed["published_id"]
        assert post["author_name"] == "Jane Doe"
        assert post["excerpt"] == "A few stories"

    @pytest.mark.asyncio
    async def test_approving_an_archive_submission_publishes_it(self, member_client, admin_client):
        submission = await submit(member_client, ARCHIVE)

        response = await admin_client.patch(
            f"/api/submissions/{submission['id']}/review", json={"status": "approved"}
        )
        archive_id = response.json()["submission"]["published_id"]

        response = await admin_client.get(f"/api/archives/{archive_id}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["title"] == "Old farm photo"
        assert response.json()["uploaded_by_name"] == "Jane Doe"

        response = await member_client.get("/api/archives/user/my-archives")
        assert [item["id"] for item in response.json()] == [archive_id]

    @pytest.mark.asyncio
    async def test_approved_titles_get_unique_slugs(self, member_client, admin_client):
        first = await submit(member_client, BLOG)
        second = await submit(member_client, BLOG)
        for submission in (first, second):
            await admin_client.patch(f"/api/submissions/{submission['id']}/review", json={"status": "approved"})

        response = await admin_client.get("/api/blog")
        assert sorted(post["slug"] for post in response.json()) == [
            "memories-of-grandpa",
            "memories-of-grandpa-2",
        ]

    @pytest.mark.asyncio
    async def test_rejecting_publishes_nothing(self, member_client, admin_client):
        submission = await submit(member_client, BLOG)

        response = await admin_client.patch(
            f"/api/submissions/{submission['id']}/review", json={"status": "rejected"}
        )
        assert response.json()["message"] == "Submission rejected successfully"
        assert response.json()["submission"]["published_id"] is None
        assert (await admin_client.get("/api/blog")).json() == []

    @pytest.mark.asyncio
    async def test_review_happens_once(self, member_client, admin_client):
        submission = await submit(member_client, BLOG)
        await admin_client.patch(f"/api/submissions/{submission['id']}/review", json={"status": "rejected"})

        response = await admin_client.patch(
            f"/api/submissions/{submission['id']}/review", json={"status": "approved"}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Submission has already been reviewed"}

    @pytest.mark.asyncio
    async def test_pending_is_not_a_review(self, member_client, admin_client):
        submission = await submit(member_client, BLOG)

        response = await admin_client.patch(
            f"/api/submissions/{submission['id']}/review", json={"status": "pending"}
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Invalid status"}

    @pytest.mark.asyncio
    async def test_member_cannot_review(self, member_client):
        submission = await submit(member_client, BLOG)

        response = await member_client.patch(
            f"/api/submissions/{submission['id']}/review", json={"status": "approved"}
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_missing_submission(self, admin_client):
        response = await admin_client.get("/api/submissions/999")
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {"error": "Submission not found"}

    @pytest.mark.asyncio
    async def test_stats_and_audit(self, member_client, admin_client, admin_user):
        first = await submit(member_client, BLOG)
        await submit(member_client, ARCHIVE)
        await admin_client.patch(f"/api/submissions/{first['id']}/review", json={"status": "approved"})

        response = await admin_client.get("/api/submissions/stats/overview")
        assert response.json() == {"pending": 1, "approved": 1, "rejected": 0, "total": 2}

        response = await admin_client.get("/api/admin/audit-log")
        entries = response.json()["entries"]
        assert [entry["action"] for entry in entries] == [
            "submission_review",
            "submission_create",
            "submission_create",
        ]
        assert [entry["adminId"] for entry in entries] == [admin_user.id, None, None]


class TestDeleting:
    @pytest.mark.asyncio
    async def test_submitter_withdraws_pending(self, member_client):
        submission = await submit(member_client, BLOG)

        response = await member_client.delete(f"/api/submissions/{submission['id']}")
        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"message": "Submission deleted successfully"}
        assert (await member_client.get("/api/submissions/my-submissions")).json() == []

    @pytest.mark.asyncio
    async def test_reviewed_submission_cannot_be_deleted(self, member_client, admin_client):
        submission = await submit(member_client, BLOG)
        await admin_client.patch(f"/api/submissions/{submission['id']}/review", json={"status": "rejected"})

        response = await member_client.delete(f"/api/submissions/{submission['id']}")
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json() == {"error": "Can only delete pending submissions"}

    @pytest.mark.asyncio
    async def test_other_member_cannot_delete(self, member_client, app, make_member):
        submission = await submit(member_client, BLOG)
        await make_member(first_name="Sam", last_name="Doe", username="sam.doe")

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://testserver") as other:
            await other.post("/api/auth/login", json={"username": "sam.doe", "password": "sam.doe"})

            response = await other.delete(f"/api/submissions/{submission['id']}")
            assert response.status_code == status.HTTP_403_FORBIDDEN
            assert response.json() == {"error": "Not authorized to delete this submission"}

    @pytest.mark.asyncio
    async def test_admin_may_delete_any_pending(self, member_client, admin_client):
        submission = await submit(member_client, BLOG)

        response = await admin_client.delete(f"/api/submissions/{submission['id']}")
        assert response.status_code == status.HTTP_200_OK
