"""Bearer token verification and principal resolution."""

import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient

from menuboard.api.deps import get_identity_service
from menuboard.core.config import get_settings
from menuboard.core.errors import InvalidToken, MissingToken, UnknownPrincipal
from menuboard.core.identity import IdentityService
from menuboard.core.security import TokenCodec
from menuboard.models.restaurant import Restaurant
from menuboard.models.user import User, UserRole


async def _register(client: AsyncClient, slug: str) -> dict:
    resp = await client.post("/v1/auth/register", json={
        "name": f"{slug} Owner",
        "email": f"owner@{slug}.com",
        "password": "secret123",
        "restaurant_name": f"{slug} Diner",
    })
    assert resp.status_code == 201, resp.text
    return resp.json()


def _codec(secret: str | None = None) -> TokenCodec:
    settings = get_settings()
    return TokenCodec(
        secret=secret or settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )


# ── TokenCodec ────────────────────────────────────────────────


def test_codec_round_trip():
    codec = TokenCodec("k" * 32)
    claims = codec.decode(codec.issue("abc"))
    assert claims.subject == "abc"
    assert claims.expires_at > claims.issued_at


def test_codec_rejects_expired_token():
    codec = TokenCodec("k" * 32)
    token = codec.issue("abc", expires_delta=timedelta(seconds=-5))
    with pytest.raises(InvalidToken):
        codec.decode(token)


def test_codec_rejects_foreign_signature():
    token = TokenCodec("one-secret").issue("abc")
    with pytest.raises(InvalidToken):
        TokenCodec("another-secret").decode(token)


def test_codec_rejects_garbage():
    with pytest.raises(InvalidToken):
        TokenCodec("k" * 32).decode("not-a-jwt")


# ── IdentityService ──────────────────────────────────────────


@pytest.mark.asyncio
async def test_resolve_missing_token(session):
    service = IdentityService(_codec())
    with pytest.raises(MissingToken):
        await service.resolve(None, session)


@pytest.mark.asyncio
async def test_resolve_non_uuid_subject(session):
    service = IdentityService(_codec())
    token = _codec().issue("not-a-uuid")
    with pytest.raises(InvalidToken):
        await service.resolve(token, session)


@pytest.mark.asyncio
async def test_resolve_unknown_user(session):
    service = IdentityService(_codec())
    with pytest.raises(UnknownPrincipal):
        await service.resolve(service.issue_token(uuid.uuid4()), session)


@pytest.mark.asyncio
async def test_resolve_bound_owner(client: AsyncClient, session):
    data = await _register(client, "ident-bound")
    principal = await get_identity_service().resolve(data["access_token"], session)

    assert str(principal.user_id) == data["user"]["id"]
    assert str(principal.tenant_id) == data["restaurant"]["id"]
    assert principal.role is UserRole.OWNER
    assert principal.tenant_name == "ident-bound Diner"


@pytest.mark.asyncio
async def test_inactive_restaurant_leaves_principal_unbound(client: AsyncClient, session):
    data = await _register(client, "ident-closed")
    restaurant = await session.get(Restaurant, uuid.UUID(data["restaurant"]["id"]))
    restaurant.is_active = False
    session.add(restaurant)
    await session.commit()

    principal = await get_identity_service().resolve(data["access_token"], session)
    assert principal.tenant_id is None


# ── Over HTTP: every failure is the same 401 ──────────────────


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [
    None,
    "Bearer",
    "Bearer not-a-jwt",
    "Basic dXNlcjpwYXNz",
])
async def test_bad_credentials_are_uniform_401(client: AsyncClient, header):
    headers = {"Authorization": header} if header else {}
    resp = await client.get("/v1/menu", headers=headers)
    assert resp.status_code == 401
    assert resp.json() == {"detail": "Could not validate credentials"}


@pytest.mark.asyncio
async def test_expired_token_rejected(client: AsyncClient):
    data = await _register(client, "ident-expired")
    token = _codec().issue(data["user"]["id"], expires_delta=timedelta(minutes=-1))

    resp = await client.get("/v1/menu", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_signed_with_other_key_rejected(client: AsyncClient):
    data = await _register(client, "ident-forged")
    token = _codec(secret="attacker-key").issue(data["user"]["id"])

    resp = await client.get("/v1/menu", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_for_deleted_user_rejected(client: AsyncClient, session):
    user = User(
        name="Ghost",
        email="ghost@ident-deleted.com",
        password_hash="x",
        role=UserRole.STAFF,
    )
    session.add(user)
    await session.commit()
    token = get_identity_service().issue_token(user.id)

    await session.delete(user)
    await session.commit()

    resp = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_for_deactivated_user_rejected(client: AsyncClient, session):
    data = await _register(client, "ident-deact")
    user = await session.get(User, uuid.UUID(data["user"]["id"]))
    user.is_active = False
    session.add(user)
    await session.commit()

    headers = {"Authorization": f"Bearer {data['access_token']}"}
    resp = await client.get("/v1/auth/me", headers=headers)
    assert resp.status_code == 401
