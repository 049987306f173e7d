"""Restaurant profile, logo upload and menu statistics."""

from pathlib import Path

import pytest
from httpx import AsyncClient

from menuboard.core.config import get_settings
from menuboard.main import app
from menuboard.services.storage import get_file_storage


async def _register(client: AsyncClient, slug: str) -> dict:
    resp = await client.post("/v1/auth/register", json={
        "name": f"{slug} Owner",
        "email": f"owner@{slug}.com",
        "password": "secret123",
        "restaurant_name": f"{slug} Trattoria",
        "restaurant_description": "Family run",
    })
    assert resp.status_code == 201, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.mark.asyncio
async def test_get_profile_defaults(client: AsyncClient):
    headers = await _register(client, "rest-get")

    resp = await client.get("/v1/restaurant/profile", headers=headers)
    assert resp.status_code == 200
    profile = resp.json()
    assert profile["name"] == "rest-get Trattoria"
    assert profile["description"] == "Family run"
    assert profile["cuisine"] == "Other"
    assert profile["settings"] == {"currency": "USD", "timezone": "UTC"}
    assert profile["owner"]["email"] == "owner@rest-get.com"


@pytest.mark.asyncio
async def test_update_profile(client: AsyncClient):
    headers = await _register(client, "rest-put")

    resp = await client.put("/v1/restaurant/profile", json={
        "name": "  Renamed Trattoria ",
        "cuisine": "Italian",
        "address": {"street": "1 Via Roma", "city": "Bologna", "country": "Italy"},
        "contact": {"phone": "+39 051 123456", "email": "Info@Trattoria.com"},
        "settings": {"currency": "EUR", "timezone": "Europe/Rome"},
    }, headers=headers)
    assert resp.status_code == 200, resp.text
    profile = resp.json()
    assert profile["name"] == "Renamed Trattoria"
    assert profile["cuisine"] == "Italian"
    assert profile["address"]["city"] == "Bologna"
    assert profile["contact"]["email"] == "info@trattoria.com"
    assert profile["settings"]["currency"] == "EUR"
    # Not sent, so kept
    assert profile["description"] == "Family run"


@pytest.mark.asyncio
async def test_update_profile_keeps_omitted_sections(client: AsyncClient):
    headers = await _register(client, "rest-partial")
    await client.put("/v1/restaurant/profile", json={
        "name": "Partial Place",
        "address": {"city": "Lyon"},
    }, headers=headers)

    resp = await client.put("/v1/restaurant/profile", json={"name": "Partial Place 2"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["address"]["city"] == "Lyon"


@pytest.mark.asyncio
async def test_update_profile_validation(client: AsyncClient):
    headers = await _register(client, "rest-invalid")

    resp = await client.put("/v1/restaurant/profile", json={
        "name": "Z",
        "contact": {"phone": "call me"},
        "cuisine": "Martian",
    }, headers=headers)
    assert resp.status_code == 422
    fields = {e["field"] for e in resp.json()["errors"]}
    assert {"name", "contact.phone", "cuisine"} <= fields


@pytest.mark.asyncio
async def test_upload_logo(client: AsyncClient, storage):
    headers = await _register(client, "rest-logo")

    resp = await client.post(
        "/v1/restaurant/upload-logo",
        files={"logo": ("logo.webp", b"RIFF fake webp", "image/webp")},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    url = resp.json()["logo_url"]
    assert url.endswith(".webp")
    assert (storage.root / url.removeprefix("/uploads/")).exists()

    resp = await client.get("/v1/restaurant/profile", headers=headers)
    assert resp.json()["logo"] == url


@pytest.mark.asyncio
async def test_upload_logo_rejects_empty_file(client: AsyncClient):
    headers = await _register(client, "rest-logo-empty")

    resp = await client.post(
        "/v1/restaurant/upload-logo",
        files={"logo": ("logo.png", b"", "image/png")},
        headers=headers,
    )
    assert resp.status_code == 422
    assert resp.json()["errors"][0]["message"] == "No file uploaded"


@pytest.mark.asyncio
async def test_stats(client: AsyncClient):
    headers = await _register(client, "rest-stats")
    items = [
        {"name": "Espresso", "price": 3, "category": "Beverages"},
        {"name": "Latte", "price": 5, "category": "Beverages"},
        {"name": "Cannoli", "price": 7, "category": "Desserts"},
    ]
    ids = []
    for payload in items:
        resp = await client.post("/v1/menu", json=payload, headers=headers)
        ids.append(resp.json()["id"])
    await client.patch(f"/v1/menu/{ids[2]}/toggle-availability", headers=headers)

    resp = await client.get("/v1/restaurant/stats", headers=headers)
    assert resp.status_code == 200
    stats = resp.json()
    assert stats["overview"] == {
        "total_items": 3,
        "available_items": 2,
        "avg_price": 5.0,
        "categories": ["Beverages", "Desserts"],
    }
    assert stats["category_breakdown"] == [
        {"category": "Beverages", "count": 2, "avg_price": 4.0},
        {"category": "Desserts", "count": 1, "avg_price": 7.0},
    ]


@pytest.mark.asyncio
async def test_stats_empty_menu(client: AsyncClient):
    headers = await _register(client, "rest-stats-empty")

    resp = await client.get("/v1/restaurant/stats", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {
        "overview": {"total_items": 0, "available_items": 0, "avg_price": 0.0, "categories": []},
        "category_breakdown": [],
    }


@pytest.mark.asyncio
async def test_uploaded_logo_is_served(client: AsyncClient):
    """With the default storage backend the returned URL is fetchable."""
    headers = await _register(client, "rest-logo-served")
    app.dependency_overrides.pop(get_file_storage, None)

    resp = await client.post(
        "/v1/restaurant/upload-logo",
        files={"logo": ("logo.png", b"\x89PNG served logo", "image/png")},
        headers=headers,
    )
    assert resp.status_code == 200, resp.text
    url = resp.json()["logo_url"]

    settings = get_settings()
    stored = Path(settings.upload_dir) / url.removeprefix(f"{settings.upload_url_prefix}/")
    try:
        resp = await client.get(url)
        assert resp.status_code == 200
        assert resp.content == b"\x89PNG served logo"
    finally:
        stored.unlink(missing_ok=True)
