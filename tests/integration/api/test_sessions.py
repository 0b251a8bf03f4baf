from datetime import timedelta
from uuid import UUID, uuid4

import pytest
from sqlmodel import update

from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import Session


def session_id_of(cookie: str) -> str:
    return cookie.split(".", 1)[0]


@pytest.mark.asyncio
async def test_list_sessions_flags_current(client, flow):
    current = await flow.onboard("user@acme.com", "acme")
    other = await flow.sign_in("user@acme.com")

    response = await client.get("/auth/sessions", headers=flow.auth(current))

    assert response.status_code == 200
    sessions = {s["id"]: s["current"] for s in response.json()["sessions"]}
    assert sessions == {session_id_of(current): True, session_id_of(other): False}


@pytest.mark.asyncio
async def test_revoked_session_is_rejected_immediately(client, flow):
    # Arrange
    current = await flow.onboard("user@acme.com", "acme")
    other = await flow.sign_in("user@acme.com")
    assert (await client.get("/auth/me", headers=flow.auth(other))).status_code == 200

    # Act
    response = await client.delete(
        f"/auth/sessions/{session_id_of(other)}", headers=flow.auth(current)
    )

    # Assert
    assert response.status_code == 204
    me = await client.get("/auth/me", headers=flow.auth(other))
    assert me.status_code == 401
    assert me.json()["error"]["code"] == "SESSION_REVOKED"
    assert (await client.get("/auth/me", headers=flow.auth(current))).status_code == 200


@pytest.mark.asyncio
async def test_revoking_revoked_session_is_noop(client, flow):
    current = await flow.onboard("user@acme.com", "acme")
    other = await flow.sign_in("user@acme.com")
    url = f"/auth/sessions/{session_id_of(other)}"

    await client.delete(url, headers=flow.auth(current))
    response = await client.delete(url, headers=flow.auth(current))

    assert response.status_code == 204


@pytest.mark.asyncio
async def test_cannot_revoke_current_or_foreign_session(client, flow):
    current = await flow.onboard("user@acme.com", "acme")
    stranger = await flow.onboard("stranger@other.com", "other")

    own = await client.delete(
        f"/auth/sessions/{session_id_of(current)}", headers=flow.auth(current)
    )
    foreign = await client.delete(
        f"/auth/sessions/{session_id_of(stranger)}", headers=flow.auth(current)
    )
    missing = await client.delete(f"/auth/sessions/{uuid4()}", headers=flow.auth(current))

    for response in (own, foreign, missing):
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SESSION_NOT_FOUND"
    assert (await client.get("/auth/me", headers=flow.auth(stranger))).status_code == 200


@pytest.mark.asyncio
async def test_revoke_all_other_sessions(client, flow):
    current = await flow.onboard("user@acme.com", "acme")
    others = [await flow.sign_in("user@acme.com") for _ in range(2)]

    response = await client.delete("/auth/sessions", headers=flow.auth(current))

    assert response.status_code == 200
    assert response.json() == {"revoked_count": 2}
    for cookie in others:
        assert (await client.get("/auth/me", headers=flow.auth(cookie))).status_code == 401
    assert (await client.get("/auth/me", headers=flow.auth(current))).status_code == 200


@pytest.mark.asyncio
async def test_change_password_keeps_only_current_session(client, flow):
    # Arrange
    session_a = await flow.onboard("user@acme.com", "acme")
    session_b = await flow.sign_in("user@acme.com")
    session_c = await flow.sign_in("user@acme.com")

    # Act
    response = await client.post(
        "/auth/change-password",
        json={"current_password": flow.password, "new_password": "BrandNewPass1!"},
        headers=flow.auth(session_a),
    )

    # Assert
    assert response.status_code == 200
    assert (await client.get("/auth/me", headers=flow.auth(session_a))).status_code == 200
    for cookie in (session_b, session_c):
        me = await client.get("/auth/me", headers=flow.auth(cookie))
        assert me.status_code == 401
        assert me.json()["error"]["code"] == "SESSION_REVOKED"
    assert (await flow.login("user@acme.com", "BrandNewPass1!")).status_code == 200
    assert len(flow.emails("password_changed", "user@acme.com")) == 1


@pytest.mark.asyncio
async def test_change_password_requires_current_password(client, flow):
    cookie = await flow.onboard("user@acme.com", "acme")

    response = await client.post(
        "/auth/change-password",
        json={"current_password": "WrongPassword!", "new_password": "BrandNewPass1!"},
        headers=flow.auth(cookie),
    )

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "INVALID_CURRENT_PASSWORD"


@pytest.mark.asyncio
async def test_expired_session_is_rejected(client, flow, session_factory):
    cookie = await flow.onboard("user@acme.com", "acme")
    async with session_factory() as session:
        await session.execute(
            update(Session)
            .where(Session.id == UUID(session_id_of(cookie)))
            .values(expires_at=utcnow() - timedelta(seconds=1))
        )
        await session.commit()

    response = await client.get("/auth/me", headers=flow.auth(cookie))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "SESSION_EXPIRED"
