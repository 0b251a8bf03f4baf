import pytest

from config import ApplicationConfig


@pytest.fixture(autouse=True, scope="session")
def fast_password_hashing():
    """bcrypt at production cost makes the suite crawl"""
    original = ApplicationConfig.BCRYPT_ROUNDS
    ApplicationConfig.BCRYPT_ROUNDS = 4
    yield
    ApplicationConfig.BCRYPT_ROUNDS = original


@pytest.fixture(autouse=True, scope="session")
def short_timing_padding():
    original = (ApplicationConfig.TIMING_SAFE_DELAY_MS, ApplicationConfig.TIMING_SAFE_JITTER_MS)
    ApplicationConfig.TIMING_SAFE_DELAY_MS = 1
    ApplicationConfig.TIMING_SAFE_JITTER_MS = 1
    yield
    ApplicationConfig.TIMING_SAFE_DELAY_MS, ApplicationConfig.TIMING_SAFE_JITTER_MS = original
