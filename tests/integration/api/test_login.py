import pytest

@pytest.mark.asyncio
async def test_successful_login(client, flow):
    # Arrange
    await flow.register("user@acme.com", "acme")
    await flow.verify("user@acme.com")

    # Act
    response = await flow.login("user@acme.com")

    # Assert
    assert response.status_code == 200
    data = response.json()
    assert data["user"]["email"] == "user@acme.com"
    assert data["user"]["organization"]["slug"] == "acme"
    assert data["user"]["role"]["name"] == "Admin"
    assert "roles:write" in data["permissions"]

    set_cookie = response.headers["set-cookie"].lower()
    assert set_cookie.startswith("sid=")
    assert "httponly" in set_cookie
    assert "max-age=86400" in set_cookie
    assert "samesite=lax" in set_cookie


@pytest.mark.asyncio
async def test_remember_me_cookie_lasts_thirty_days(client, flow):
    await flow.register("user@acme.com", "acme")
    await flow.verify("user@acme.com")

    response = await flow.login("user@acme.com", remember_me=True)

    assert response.status_code == 200
    assert "max-age=2592000" in response.headers["set-cookie"].lower()


@pytest.mark.asyncio
async def test_login_requires_verified_email(client, flow):
    await flow.register("user@acme.com", "acme")

    response = await flow.login("user@acme.com")

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "EMAIL_NOT_VERIFIED"


@pytest.mark.asyncio
async def test_wrong_password_and_unknown_email_look_the_same(client, flow):
    await flow.register("user@acme.com", "acme")
    await flow.verify("user@acme.com")

    wrong_password = await flow.login("user@acme.com", "WrongPassword!")
    unknown_email = await flow.login("ghost@acme.com")

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json() == unknown_email.json()
    assert wrong_password.json()["error"]["code"] == "INVALID_CREDENTIALS"


@pytest.mark.asyncio
async def test_account_locks_after_five_failures(client, flow):
    # Arrange
    await flow.register("user@acme.com", "acme")
    await flow.verify("user@acme.com")

    # Act
    for _ in range(5):
        response = await flow.login("user@acme.com", "WrongPassword!")
        assert response.status_code == 401
    locked = await flow.login("user@acme.com", flow.password)

    # Assert
    assert locked.status_code == 401
    assert locked.json()["error"]["code"] == "INVALID_CREDENTIALS"
    assert len(flow.emails("account_locked", "user@acme.com")) == 1


@pytest.mark.asyncio
async def test_successful_login_resets_failed_attempts(client, flow):
    await flow.register("user@acme.com", "acme")
    await flow.verify("user@acme.com")

    for _ in range(4):
        await flow.login("user@acme.com", "WrongPassword!")
    await flow.sign_in("user@acme.com")
    for _ in range(4):
        await flow.login("user@acme.com", "WrongPassword!")

    response = await flow.login("user@acme.com")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_me_requires_session(client, flow):
    response = await client.get("/auth/me")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_me_returns_current_user(client, flow):
    cookie = await flow.onboard("user@acme.com", "acme")

    response = await client.get("/auth/me", headers=flow.auth(cookie))

    assert response.status_code == 200
    assert response.json()["user"]["profile"] == {
        "first_name": "Ann",
        "last_name": "Lee",
        "phone": None,
    }


@pytest.mark.asyncio
async def test_tampered_cookie_is_rejected(client, flow):
    cookie = await flow.onboard("user@acme.com", "acme")
    session_id = cookie.split(".", 1)[0]

    response = await client.get("/auth/me", headers=flow.auth(f"{session_id}.forged"))

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_logout_revokes_session(client, flow):
    # Arrange
    cookie = await flow.onboard("user@acme.com", "acme")

    # Act
    response = await client.post("/auth/logout", headers=flow.auth(cookie))

    # Assert
    assert response.status_code == 204
    assert "max-age=0" in response.headers["set-cookie"].lower()
    me = await client.get("/auth/me", headers=flow.auth(cookie))
    assert me.status_code == 401
    assert me.json()["error"]["code"] == "SESSION_REVOKED"


@pytest.mark.asyncio
async def test_update_profile(client, flow):
    cookie = await flow.onboard("user@acme.com", "acme")

    response = await client.patch(
        "/auth/profile",
        json={"first_name": "Anna", "phone": "555-0100"},
        headers=flow.auth(cookie),
    )

    assert response.status_code == 200
    assert response.json()["profile"] == {
        "first_name": "Anna",
        "last_name": "Lee",
        "phone": "555-0100",
    }
