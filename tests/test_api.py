"""Tests for HTTP endpoints."""

import asyncio
import gzip
import json
import time
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient

from config import Config
from shortener.exceptions import StorageError
from web_app import create_app
from web_app.middleware.auth import AUTH_COOKIE_NAME, UserIDSigner


def short_id_of(short_url: str) -> str:
    return short_url.rsplit("/", 1)[1]


@pytest.mark.asyncio
class TestPlainEndpoints:
    """Test the text endpoints at the root."""
    
    async def test_shorten_twice(self, client, sample_urls):
        """First POST creates (201), the repeat answers 409 with the same URL."""
        first = await client.post("/", content=sample_urls[0])
        second = await client.post("/", content=sample_urls[0])
        
        assert first.status_code == 201
        assert second.status_code == 409
        assert first.text == second.text
        assert first.text.startswith("http://localhost:8080/")
        assert len(short_id_of(first.text)) == 10
    
    async def test_shorten_sets_auth_cookie(self, client, sample_urls):
        response = await client.post("/", content=sample_urls[0])
        
        assert AUTH_COOKIE_NAME in response.cookies
    
    async def test_shorten_html_body(self, client):
        response = await client.post(
            "/",
            content='<a href="https://example.com/html">link</a>',
            headers={"Content-Type": "text/html"},
        )
        
        assert response.status_code == 201
        redirect = await client.get(f"/{short_id_of(response.text)}")
        assert redirect.headers["location"] == "https://example.com/html"
    
    async def test_shorten_json_body(self, client):
        response = await client.post("/", json={"url": "https://example.com/json"})
        
        assert response.status_code == 201
        redirect = await client.get(f"/{short_id_of(response.text)}")
        assert redirect.headers["location"] == "https://example.com/json"
    
    async def test_shorten_gzip_body(self, client):
        response = await client.post(
            "/",
            content=gzip.compress(b"https://example.com/gzipped"),
            headers={"Content-Encoding": "gzip"},
        )
        
        assert response.status_code == 201
        redirect = await client.get(f"/{short_id_of(response.text)}")
        assert redirect.headers["location"] == "https://example.com/gzipped"
    
    async def test_shorten_bad_gzip_body(self, client):
        response = await client.post(
            "/",
            content=b"definitely not gzip",
            headers={"Content-Encoding": "gzip"},
        )
        
        assert response.status_code == 400
    
    async def test_shorten_empty_body(self, client):
        response = await client.post("/", content="")
        assert response.status_code == 400
    
    async def test_shorten_storage_error(self, client, storage, monkeypatch):
        monkeypatch.setattr(storage, "update_data", AsyncMock(side_effect=StorageError("down")))
        
        response = await client.post("/", content="https://example.com")
        assert response.status_code == 500
    
    async def test_redirect(self, client, sample_urls):
        created = await client.post("/", content=sample_urls[1])
        
        response = await client.get(f"/{short_id_of(created.text)}")
        
        assert response.status_code == 307
        assert response.headers["location"] == sample_urls[1]
    
    async def test_redirect_unknown(self, client):
        response = await client.get("/doesnotexist")
        assert response.status_code == 400
    
    async def test_redirect_deleted(self, client, storage, sample_urls):
        created = await client.post("/", content=sample_urls[0])
        storage._links[short_id_of(created.text)].is_deleted = True
        
        response = await client.get(f"/{short_id_of(created.text)}")
        assert response.status_code == 410
    
    async def test_ping(self, client):
        response = await client.get("/ping")
        assert response.status_code == 200
    
    async def test_ping_failure(self, client, storage, monkeypatch):
        monkeypatch.setattr(storage, "ping", AsyncMock(side_effect=StorageError("down")))
        
        response = await client.get("/ping")
        assert response.status_code == 500
    
    async def test_bad_cookie_rejected(self, app):
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
            ac.cookies.set(AUTH_COOKIE_NAME, "forged.token")
            response = await ac.post("/", content="https://example.com")
        
        assert response.status_code == 401


@pytest.mark.asyncio
class TestAPIEndpoints:
    """Test the JSON API."""
    
    async def test_shorten_url(self, client, sample_urls):
        """Test POST /api/shorten."""
        first = await client.post("/api/shorten", json={"url": sample_urls[0]})
        second = await client.post("/api/shorten", json={"url": sample_urls[0]})
        
        assert first.status_code == 201
        assert second.status_code == 409
        assert first.json()["result"] == second.json()["result"]
        assert first.json()["result"].startswith("http://localhost:8080/")
    
    async def test_shorten_empty_url(self, client):
        response = await client.post("/api/shorten", json={"url": ""})
        assert response.status_code == 400
    
    async def test_shorten_malformed_json(self, client):
        response = await client.post(
            "/api/shorten",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        
        assert response.status_code == 400
        assert response.json() == {"detail": "Bad Request"}
    
    async def test_shorten_missing_field(self, client):
        response = await client.post("/api/shorten", json={"link": "https://example.com"})
        assert response.status_code == 400
    
    async def test_shorten_batch(self, client, sample_urls):
        body = [
            {"correlation_id": str(i), "original_url": url}
            for i, url in enumerate(sample_urls)
        ]
        
        response = await client.post("/api/shorten/batch", json=body)
        
        assert response.status_code == 201
        data = response.json()
        assert [item["correlation_id"] for item in data] == ["0", "1", "2"]
        for item, url in zip(data, sample_urls):
            redirect = await client.get(f"/{short_id_of(item['short_url'])}")
            assert redirect.headers["location"] == url
    
    async def test_shorten_batch_last_duplicate(self, client, sample_urls):
        await client.post("/api/shorten", json={"url": sample_urls[1]})
        
        response = await client.post("/api/shorten/batch", json=[
            {"correlation_id": "a", "original_url": sample_urls[0]},
            {"correlation_id": "b", "original_url": sample_urls[1]},
        ])
        
        assert response.status_code == 409
        assert len(response.json()) == 2
    
    async def test_shorten_batch_earlier_duplicate(self, client, sample_urls):
        await client.post("/api/shorten", json={"url": sample_urls[0]})
        
        response = await client.post("/api/shorten/batch", json=[
            {"correlation_id": "a", "original_url": sample_urls[0]},
            {"correlation_id": "b", "original_url": sample_urls[1]},
        ])
        
        assert response.status_code == 201
    
    async def test_user_urls_unknown_user(self, client):
        response = await client.get("/api/user/urls")
        assert response.status_code == 401
    
    async def test_user_urls(self, client, sample_urls):
        created = await client.post("/", content=sample_urls[0])
        
        response = await client.get("/api/user/urls")
        
        assert response.status_code == 200
        assert response.json() == [{"short_url": created.text, "original_url": sample_urls[0]}]
    
    async def test_user_urls_empty(self, client, config, registry):
        registry._urls["user-1"] = []
        client.cookies.set(AUTH_COOKIE_NAME, UserIDSigner(config.cookie_secret).encode("user-1"))
        
        response = await client.get("/api/user/urls")
        assert response.status_code == 204
    
    async def test_user_urls_gzip_response(self, client):
        for i in range(40):
            await client.post("/", content=f"https://example.com/page/{i}")
        
        response = await client.get("/api/user/urls", headers={"Accept-Encoding": "gzip"})
        
        assert response.status_code == 200
        assert response.headers["content-encoding"] == "gzip"
        assert len(response.json()) == 40
    
    async def test_delete_user_urls(self, client, service, sample_urls):
        created = await client.post("/", content=sample_urls[0])
        
        response = await client.request(
            "DELETE",
            "/api/user/urls",
            content=json.dumps([short_id_of(created.text)]),
        )
        
        assert response.status_code == 202
        await asyncio.wait_for(service.deletion.join(), timeout=1)
    
    async def test_delete_without_cookie(self, client):
        response = await client.request("DELETE", "/api/user/urls", content='["abc"]')
        assert response.status_code == 401
    
    async def test_delete_bad_body(self, client, sample_urls):
        await client.post("/", content=sample_urls[0])
        
        response = await client.request("DELETE", "/api/user/urls", content='{"ids": 1}')
        assert response.status_code == 400
    
    async def test_delete_answers_before_backend(self, client, service, storage, sample_urls, monkeypatch):
        """The 202 is sent while the backend call is still pending."""
        gate = asyncio.Event()
        calls = []
        
        async def slow_delete(user_id, short_ids):
            await gate.wait()
            calls.append(short_ids)
        
        monkeypatch.setattr(storage, "batch_delete_urls", slow_delete)
        created = await client.post("/", content=sample_urls[0])
        
        response = await client.request(
            "DELETE",
            "/api/user/urls",
            content=json.dumps([short_id_of(created.text)]),
        )
        
        assert response.status_code == 202
        assert calls == []
        assert service.deletion.pending > 0
        
        gate.set()
        await asyncio.wait_for(service.deletion.join(), timeout=1)
        assert calls == [[short_id_of(created.text)]]


@pytest.mark.asyncio
class TestInternalStats:
    """Test GET /api/internal/stats."""
    
    async def test_stats(self, client, sample_urls):
        await client.post("/", content=sample_urls[0])
        await client.post("/", content=sample_urls[1])
        
        response = await client.get("/api/internal/stats")
        
        assert response.status_code == 200
        assert response.json() == {"urls": 2, "users": 1}
    
    async def test_stats_real_ip_outside_subnet(self, client):
        response = await client.get("/api/internal/stats", headers={"X-Real-IP": "10.1.2.3"})
        assert response.status_code == 403
    
    async def test_stats_real_ip_inside_subnet(self, client):
        response = await client.get("/api/internal/stats", headers={"X-Real-IP": "127.0.0.5"})
        assert response.status_code == 200
    
    async def test_stats_empty_subnet(self, service):
        app = create_app(service, Config(base_url="http://localhost:8080", trusted_subnet=""))
        
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
            response = await ac.get("/api/internal/stats")
        
        assert response.status_code == 403


@pytest.mark.asyncio
class TestRequestTimeout:
    """Test the per-request timeout."""
    
    @pytest.fixture
    async def slow_client(self, storage, service, monkeypatch):
        async def slow_update(original_url, user_id):
            await asyncio.sleep(3)
            return "NeverStored"
        
        monkeypatch.setattr(storage, "update_data", slow_update)
        app = create_app(service, Config(base_url="http://localhost:8080", timeout=0.2))
        
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
            yield ac
    
    async def test_slow_handler_gets_504(self, slow_client, registry):
        started = time.perf_counter()
        response = await slow_client.post("/", content="https://example.com/slow")
        elapsed = time.perf_counter() - started
        
        assert response.status_code == 504
        assert elapsed < 2
        assert registry.url_count() == 0
    
    async def test_fast_handler_unaffected(self, slow_client):
        response = await slow_client.get("/ping")
        assert response.status_code == 200
