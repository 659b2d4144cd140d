"""
Admin listing tests (GET /api/waitlist/users).
"""
import pytest
from fastapi import status
from app.core.config import settings
from tests.conftest import make_entrant


class TestListUsers:
    """Test the token-protected user listing."""

    def test_list_users_success(self, client, db, admin_headers, sample_entrant):
        response = client.get("/api/waitlist/users", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["success"] is True
        users = body["data"]["users"]
        assert len(users) == 1
        assert users[0]["email"] == "ada@mail.com"
        assert users[0]["referralCode"] == "ONEADA001"
        assert users[0]["interest"] == "payments"
        assert users[0]["waitlistPosition"] == 1
        assert users[0]["earlyAccess"] is True
        assert users[0]["subscription"] == "free"
        assert body["data"]["pagination"] == {"current": 1, "pages": 1, "total": 1}

    def test_list_users_pagination(self, client, db, admin_headers):
        db.add_all([make_entrant(position) for position in range(1, 6)])
        db.commit()

        response = client.get("/api/waitlist/users?page=2&limit=2", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert [user["waitlistPosition"] for user in data["users"]] == [3, 2]
        assert data["pagination"] == {"current": 2, "pages": 3, "total": 5}

    def test_list_users_newest_first(self, client, admin_headers):
        for index in range(3):
            client.post(
                "/api/waitlist/join",
                json={"name": f"Person {index}", "email": f"person{index}@mail.com"}
            )

        response = client.get("/api/waitlist/users", headers=admin_headers)

        emails = [user["email"] for user in response.json()["data"]["users"]]
        assert emails == ["person2@mail.com", "person1@mail.com", "person0@mail.com"]

    def test_list_users_missing_token(self, client):
        response = client.get("/api/waitlist/users")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json() == {"success": False, "message": "Unauthorized"}

    def test_list_users_wrong_token(self, client):
        response = client.get(
            "/api/waitlist/users",
            headers={"Authorization": "Bearer not-the-token"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_list_users_wrong_scheme(self, client):
        response = client.get(
            "/api/waitlist/users",
            headers={"Authorization": f"Basic {settings.ADMIN_TOKEN}"}
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_list_users_denied_when_token_unset(self, client, admin_headers, monkeypatch):
        monkeypatch.setattr(settings, "ADMIN_TOKEN", "")

        response = client.get("/api/waitlist/users", headers=admin_headers)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    @pytest.mark.parametrize("query", ["page=0", "limit=0", "limit=101", "page=abc"])
    def test_list_users_invalid_query(self, client, admin_headers, query):
        response = client.get(f"/api/waitlist/users?{query}", headers=admin_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body["success"] is False
        assert body["errors"][0]["field"] in ("page", "limit")
