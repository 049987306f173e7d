"""Error envelope: validation detail, unexpected failures, health."""

from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient

from menuboard.core.errors import Conflict, NotFound, ValidationFailed
from menuboard.main import app


def test_app_error_bodies():
    assert NotFound().to_body() == {"detail": "Resource not found"}
    assert Conflict("Taken").to_body() == {"detail": "Taken"}

    err = ValidationFailed.for_field("price", "Must be positive")
    assert err.status_code == 422
    assert err.to_body() == {
        "detail": "Validation failed",
        "errors": [{"field": "price", "message": "Must be positive", "type": "value_error"}],
    }


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_malformed_json_body(client: AsyncClient):
    resp = await client.post(
        "/v1/auth/login",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 422
    assert resp.json()["detail"] == "Validation failed"


@pytest.mark.asyncio
async def test_invalid_path_id(client: AsyncClient):
    resp = await client.post("/v1/auth/register", json={
        "name": "Path Owner",
        "email": "owner@err-path.com",
        "password": "secret123",
        "restaurant_name": "Path Place",
    })
    headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}

    resp = await client.get("/v1/menu/not-a-uuid", headers=headers)
    assert resp.status_code == 422
    assert resp.json()["errors"][0]["field"] == "item_id"


@pytest.mark.asyncio
async def test_unexpected_failure_returns_generic_500(client: AsyncClient):
    resp = await client.post("/v1/auth/register", json={
        "name": "Boom Owner",
        "email": "owner@err-boom.com",
        "password": "secret123",
        "restaurant_name": "Boom Bar",
    })
    headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as raw_client:
        with patch(
            "menuboard.api.v1.restaurant.compute_menu_stats",
            side_effect=RuntimeError("db exploded at 10.0.0.5"),
        ):
            resp = await raw_client.get("/v1/restaurant/stats", headers=headers)

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}
