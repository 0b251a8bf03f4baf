from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from crm_auth.app.services.rbac import AuthContext
from crm_auth.domain.base import utcnow
from crm_auth.domain.entities import Organization, Role, Session, User


@pytest.fixture
def mock_uow():
    uow = MagicMock()
    uow.__aenter__ = AsyncMock(return_value=uow)
    uow.__aexit__ = AsyncMock(return_value=False)  # Must return False to not suppress exceptions
    uow.commit = AsyncMock()
    uow.rollback = AsyncMock()
    return uow


@pytest.fixture
def mock_audit():
    return MagicMock()


@pytest.fixture
def mock_email_queue():
    return MagicMock()


@pytest.fixture
def auth_context():
    """Authenticated admin of a fresh organization"""
    organization = Organization(id=uuid4(), name="Acme Insurance", slug="acme")
    role = Role(id=uuid4(), organization_id=organization.id, name="Admin", is_default=True)
    user = User(
        id=uuid4(),
        organization_id=organization.id,
        role_id=role.id,
        email="admin@acme.com",
        email_verified_at=utcnow(),
    )
    now = utcnow()
    session = Session(
        id=uuid4(),
        user_id=user.id,
        organization_id=organization.id,
        secret_hash="0" * 64,
        created_at=now,
        last_accessed_at=now,
        expires_at=now,
    )
    return AuthContext(
        user=user,
        organization=organization,
        role=role,
        session=session,
        permissions=frozenset({"roles:read", "roles:write", "invitations:create"}),
    )
