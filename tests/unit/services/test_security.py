from unittest.mock import AsyncMock, MagicMock

import pytest

from config import ApplicationConfig
from crm_auth.app.services import security


@pytest.fixture
def fake_asyncio(monkeypatch):
    fake = MagicMock(sleep=AsyncMock())
    monkeypatch.setattr(security, "asyncio", fake)
    return fake


def test_hash_password_round_trip():
    password_hash = security.hash_password("SecurePass123!")

    assert security.verify_password("SecurePass123!", password_hash)
    assert not security.verify_password("WrongPass123!", password_hash)
    assert not security.verify_password("SecurePass123!", None)


def test_token_hash_is_not_the_token():
    raw = security.generate_token()

    assert security.hash_token(raw) != raw
    assert security.token_matches(raw, security.hash_token(raw))
    assert not security.token_matches(raw + "x", security.hash_token(raw))


@pytest.mark.asyncio
async def test_timing_safe_delay_sleeps_base_plus_bounded_jitter(fake_asyncio, monkeypatch):
    # Arrange
    monkeypatch.setattr(ApplicationConfig, "TIMING_SAFE_DELAY_MS", 100)
    monkeypatch.setattr(ApplicationConfig, "TIMING_SAFE_JITTER_MS", 50)

    # Act
    for _ in range(20):
        await security.timing_safe_delay()

    # Assert
    delays = [call.args[0] for call in fake_asyncio.sleep.await_args_list]
    assert len(delays) == 20
    assert all(0.1 <= delay <= 0.15 for delay in delays)
