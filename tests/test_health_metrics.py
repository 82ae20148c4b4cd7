"""
Tests for operational endpoints: /health, /metrics and the error mapping.
"""

from unittest.mock import patch

from fastapi import status
from prometheus_client import REGISTRY
from redis.exceptions import RedisError

from booklib.dependencies import get_book_service
from booklib.exceptions import DependencyError
from booklib.main import app


class TestHealth:
    """Tests for GET /health"""

    def test_health_ok(self, client):
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == {"connected": True}
        assert data["cache"]["status"] == "connected"

    def test_health_degraded_when_database_down(self, client):
        with patch("booklib.main.check_database", return_value=False):
            response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "degraded"

    def test_health_reports_unreachable_cache(self, client, fake_redis):
        """A cache that stops answering does not degrade the service."""
        fake_redis.ping.side_effect = RedisError("refused")

        response = client.get("/health")

        data = response.json()
        assert data["status"] == "healthy"
        assert data["cache"] == {"status": "error"}

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["health"] == "/health"


class TestMetrics:
    """Tests for GET /metrics"""

    def test_metrics_exposition(self, client, multiple_books):
        client.get("/books")

        response = client.get("/metrics")

        assert response.status_code == status.HTTP_200_OK
        assert response.headers["content-type"].startswith("text/plain")
        body = response.text
        assert "http_requests_total" in body
        assert "cache_operations_total" in body
        assert "books_total 3.0" in body

    def test_route_template_label(self, client, sample_book):
        labels = {"method": "GET", "endpoint": "/books/{book_id}", "status_code": "200"}
        before = REGISTRY.get_sample_value("http_requests_total", labels) or 0.0

        client.get(f"/books/{sample_book.id}")

        assert REGISTRY.get_sample_value("http_requests_total", labels) == before + 1

    def test_auth_attempts_counted(self, client, sample_user):
        labels = {"type": "login", "status": "failure"}
        before = REGISTRY.get_sample_value("auth_attempts_total", labels) or 0.0

        client.post("/auth/login", json={"username": "testuser", "password": "wrong"})

        assert REGISTRY.get_sample_value("auth_attempts_total", labels) == before + 1


class TestErrorMapping:
    """Domain errors that reach the app boundary."""

    def test_dependency_error_is_500(self, client):
        class FailingBooks:
            def list(self, search=None):
                raise DependencyError("database")

        labels = {"type": "DependencyError", "component": "database"}
        before = REGISTRY.get_sample_value("errors_total", labels) or 0.0
        app.dependency_overrides[get_book_service] = lambda: FailingBooks()

        response = client.get("/books")

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json()["detail"] == "A database error occurred. Please try again later."
        assert REGISTRY.get_sample_value("errors_total", labels) == before + 1

    def test_malformed_json_is_400(self, client, auth_headers):
        response = client.post(
            "/books",
            content="{not json",
            headers={**auth_headers, "Content-Type": "application/json"},
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "errors" in response.json()
