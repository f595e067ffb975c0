"""Tests for API endpoints."""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from src.app.api.endpoints import health
from src.app.services import url_service


def shorten(client, url):
    return client.post("/api/shorten", json={"url": url})


class TestShorten:
    """Test POST /api/shorten."""

    def test_new_url(self, client):
        response = shorten(client, "https://example.com")

        assert response.status_code == 201
        data = response.json()
        assert len(data["shortCode"]) == 6
        assert data["shortUrl"] == f"http://testserver/{data['shortCode']}"

    def test_repeat_returns_same_code(self, client):
        first = shorten(client, "https://example.com")
        second = shorten(client, "https://example.com")

        assert second.status_code == 200
        assert second.json() == first.json()

    def test_invalid_url(self, client):
        response = shorten(client, "example.com")

        assert response.status_code == 400
        assert response.json() == {
            "error": "Valid URL required (must start with http/https)"
        }
        assert client.get("/api/urls").json() == {"urls": []}

    def test_missing_url(self, client):
        response = client.post("/api/shorten", json={})

        assert response.status_code == 400
        assert "error" in response.json()

    def test_malformed_body(self, client):
        response = client.post(
            "/api/shorten",
            content="not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert "error" in response.json()

    def test_code_generation_exhausted(self, client, make_url, monkeypatch):
        make_url("taken1", "https://taken.example")
        monkeypatch.setattr(url_service, "generate_short_code", lambda length=6: "taken1")

        response = shorten(client, "https://example.com")

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to generate unique code"}

    def test_insert_race(self, client, make_url, monkeypatch):
        make_url("raced1", "https://first.example")
        monkeypatch.setattr(url_service, "allocate_short_code", lambda session: "raced1")

        response = shorten(client, "https://second.example")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


class TestUrls:
    """Test the /api/urls endpoints."""

    def test_list(self, client):
        codes = [shorten(client, f"https://example.com/{i}").json()["shortCode"] for i in range(3)]

        response = client.get("/api/urls")

        assert response.status_code == 200
        urls = response.json()["urls"]
        assert [url["shortCode"] for url in urls] == list(reversed(codes))
        first = urls[0]
        assert first["longUrl"] == "https://example.com/2"
        assert first["clicks"] == 0
        assert first["shortUrl"] == f"http://testserver/{first['shortCode']}"
        assert "createdAt" in first and "id" in first

    def test_get(self, client):
        code = shorten(client, "https://example.com").json()["shortCode"]

        response = client.get(f"/api/urls/{code}")

        assert response.status_code == 200
        data = response.json()
        assert data["shortCode"] == code
        assert data["longUrl"] == "https://example.com"
        assert data["clicks"] == 0

    def test_get_missing(self, client):
        response = client.get("/api/urls/nope00")

        assert response.status_code == 404
        assert response.json() == {"error": "URL not found"}

    def test_update_keeps_clicks(self, client):
        code = shorten(client, "https://example.com").json()["shortCode"]
        client.get(f"/{code}", follow_redirects=False)

        response = client.put(f"/api/urls/{code}", json={"longUrl": "https://other.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["longUrl"] == "https://other.com"
        assert data["shortCode"] == code
        assert data["clicks"] == 1

    def test_update_invalid(self, client):
        code = shorten(client, "https://example.com").json()["shortCode"]

        response = client.put(f"/api/urls/{code}", json={"longUrl": "other.com"})

        assert response.status_code == 400
        assert client.get(f"/api/urls/{code}").json()["longUrl"] == "https://example.com"

    def test_update_missing(self, client):
        response = client.put("/api/urls/nope00", json={"longUrl": "https://other.com"})

        assert response.status_code == 404

    def test_delete(self, client):
        code = shorten(client, "https://example.com").json()["shortCode"]

        response = client.delete(f"/api/urls/{code}")

        assert response.status_code == 200
        assert response.json() == {"message": "URL deleted successfully", "shortCode": code}
        assert client.get(f"/api/urls/{code}").status_code == 404

    def test_delete_missing(self, client):
        assert client.delete("/api/urls/nope00").status_code == 404


class TestRedirect:
    """Test GET /{short_code}."""

    def test_redirects_and_counts(self, client):
        code = shorten(client, "https://example.com").json()["shortCode"]

        response = client.get(f"/{code}", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "https://example.com"
        assert client.get(f"/api/urls/{code}").json()["clicks"] == 1

    def test_each_redirect_counts_once(self, client):
        code = shorten(client, "https://example.com").json()["shortCode"]

        for _ in range(5):
            client.get(f"/{code}", follow_redirects=False)

        assert client.get(f"/api/urls/{code}").json()["clicks"] == 5

    def test_unknown_code(self, client):
        response = client.get("/nope00", follow_redirects=False)

        assert response.status_code == 404
        assert response.json() == {"error": "Short URL not found"}

    def test_api_is_not_a_short_code(self, client):
        response = client.get("/api", follow_redirects=False)

        assert response.status_code == 200
        assert "endpoints" in response.json()


class TestHealth:
    """Test GET /health."""

    def test_healthy(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert data["tier"] == "application"
        assert data["uptime"] >= 0

    def test_database_down(self, client, monkeypatch):
        def unreachable():
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        monkeypatch.setattr(health, "check_db_connection", unreachable)

        response = client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "unhealthy"
        assert data["database"] == "disconnected"
        assert data["error"] == "Database connection failed"


class TestStoreFailures:
    """Database faults surface as 500 with a generic error body."""

    @pytest.mark.parametrize(
        "method, path, body",
        [
            ("POST", "/api/shorten", {"url": "https://example.com"}),
            ("GET", "/api/urls", None),
            ("GET", "/api/urls/abc123", None),
            ("PUT", "/api/urls/abc123", {"longUrl": "https://other.com"}),
            ("DELETE", "/api/urls/abc123", None),
            ("GET", "/abc123", None),
        ],
    )
    def test_database_error(self, client, monkeypatch, method, path, body):
        def database_down(self, *args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

        monkeypatch.setattr(Session, "execute", database_down)
        monkeypatch.setattr(Session, "scalars", database_down)

        response = client.request(method, path, json=body, follow_redirects=False)

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
