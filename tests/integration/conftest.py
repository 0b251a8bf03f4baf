from typing import Dict, Optional

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlmodel import SQLModel

from config import ApplicationConfig
from crm_auth.adapter.services.database import create_session_factory
from crm_auth.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from crm_auth.api.app import create_app
from crm_auth.app.use_cases.roles import SeedPermissionsUseCase
from crm_auth.depends import email_sender, get_session_factory

PASSWORD = "SecurePass123!"


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine):
    factory = create_session_factory(engine)
    async with factory() as session:
        await SeedPermissionsUseCase(SqlAlchemyUnitOfWork(session)).execute()
    return factory


@pytest_asyncio.fixture
async def client(session_factory):
    app = create_app(ApplicationConfig)

    async def override_get_session_factory():
        return session_factory

    app.dependency_overrides[get_session_factory] = override_get_session_factory
    email_sender.outbox.clear()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    email_sender.outbox.clear()


def auth(cookie: str) -> Dict[str, str]:
    return {"Cookie": f"{ApplicationConfig.SESSION_COOKIE_NAME}={cookie}"}


class AuthFlow:
    """Drives the public API the way a browser would"""

    password = PASSWORD
    auth = staticmethod(auth)

    def __init__(self, client: AsyncClient):
        self.client = client

    def emails(self, template: str, to: Optional[str] = None):
        return [
            message
            for message in email_sender.outbox
            if message.template == template and (to is None or message.to == to)
        ]

    def latest_token(self, template: str, to: str) -> str:
        message = self.emails(template, to)[-1]
        url = next(value for key, value in message.params.items() if key.endswith("_url"))
        return url.split("token=", 1)[1]

    async def register(self, email: str, slug: str, password: str = PASSWORD):
        return await self.client.post(
            "/auth/register",
            json={
                "organization": {"name": f"{slug.title()} Insurance", "slug": slug},
                "email": email,
                "password": password,
                "first_name": "Ann",
                "last_name": "Lee",
            },
        )

    async def verify(self, email: str):
        token = self.latest_token("email_verification", email)
        return await self.client.post("/auth/verify-email", json={"token": token})

    async def login(self, email: str, password: str = PASSWORD, remember_me: bool = False):
        response = await self.client.post(
            "/auth/login",
            json={"email": email, "password": password, "remember_me": remember_me},
        )
        # requests carry explicit cookies so several sessions can coexist
        self.client.cookies.clear()
        return response

    async def sign_in(self, email: str, password: str = PASSWORD) -> str:
        response = await self.login(email, password)
        assert response.status_code == 200, response.text
        return response.cookies[ApplicationConfig.SESSION_COOKIE_NAME]

    async def onboard(self, email: str, slug: str) -> str:
        """Register, verify and sign in; returns the session cookie"""
        response = await self.register(email, slug)
        assert response.status_code == 201, response.text
        response = await self.verify(email)
        assert response.status_code == 200, response.text
        return await self.sign_in(email)

    async def invite(self, cookie: str, email: str, role_id: str):
        return await self.client.post(
            "/auth/invite", json={"email": email, "role_id": role_id}, headers=auth(cookie)
        )

    async def create_role(self, cookie: str, name: str, permissions=()):
        catalogue = await self.client.get("/roles/permissions", headers=auth(cookie))
        ids = [p["id"] for p in catalogue.json()["permissions"] if p["name"] in permissions]
        response = await self.client.post(
            "/roles", json={"name": name, "permission_ids": ids}, headers=auth(cookie)
        )
        assert response.status_code == 201, response.text
        return response.json()

    async def onboard_invitee(self, admin_cookie: str, email: str, role_id: str) -> str:
        response = await self.invite(admin_cookie, email, role_id)
        assert response.status_code == 201, response.text
        response = await self.client.post(
            "/auth/accept-invitation",
            json={
                "token": self.latest_token("invitation", email),
                "password": PASSWORD,
                "first_name": "Bo",
                "last_name": "Ng",
            },
        )
        assert response.status_code == 200, response.text
        return await self.sign_in(email)


@pytest_asyncio.fixture
async def flow(client):
    return AuthFlow(client)
