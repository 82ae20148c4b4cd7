"""
Tests for Admin Endpoints

Covers role enforcement and the cache management endpoints.
"""

from fastapi import status


class TestAdminAccess:
    """Admin endpoints need a bearer token AND the admin role."""

    def test_requires_token(self, client):
        response = client.get("/admin/users")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_regular_user_forbidden(self, client, auth_headers):
        response = client.get("/admin/users", headers=auth_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "Admin privileges required"


class TestListUsers:
    """Tests for GET /admin/users"""

    def test_list_users(self, client, admin_headers, sample_user):
        response = client.get("/admin/users", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        usernames = {user["username"] for user in response.json()}
        assert usernames == {"admin", "testuser"}
        assert all("hashed_password" not in user for user in response.json())


class TestCacheAdmin:
    """Tests for /admin/cache endpoints"""

    def test_cache_stats(self, client, admin_headers, fake_redis):
        fake_redis.store["book:1"] = "{}"

        response = client.get("/admin/cache/stats", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "connected"
        assert response.json()["keys"] == 1

    def test_flush_cache(self, client, admin_headers, fake_redis):
        fake_redis.store.update({
            "book:1": "{}",
            "book:2": "{}",
            "books:all": "[]",
            "books:search:go": "[]",
            "ratelimit:other": "1",
        })

        response = client.delete("/admin/cache", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {"deleted": 4}
        assert set(fake_redis.store) == {"ratelimit:other"}

    def test_flush_cache_forbidden(self, client, auth_headers):
        response = client.delete("/admin/cache", headers=auth_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN
