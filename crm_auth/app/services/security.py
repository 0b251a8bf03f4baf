"""
Password and token hashing helpers.

Passwords use bcrypt; single-use tokens and session secrets are random
strings whose SHA-256 hex digest is what gets persisted.
"""

import asyncio
import hashlib
import hmac
import secrets
from typing import Optional

import bcrypt

from config import ApplicationConfig

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72

_dummy_hash: Optional[bytes] = None


def _encode(password: str) -> bytes:
    return password.encode()[:_BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(ApplicationConfig.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_encode(password), salt).decode()


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode())
    except ValueError:
        return False


def burn_password_check(password: str) -> None:
    """Spend one bcrypt check so unknown accounts take as long as known ones."""
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = bcrypt.hashpw(b"dummy_password", bcrypt.gensalt(ApplicationConfig.BCRYPT_ROUNDS))
    bcrypt.checkpw(_encode(password), _dummy_hash)


async def timing_safe_delay() -> None:
    """Pad a negative branch so it is not measurably faster than a positive one."""
    delay_ms = ApplicationConfig.TIMING_SAFE_DELAY_MS
    jitter_ms = secrets.randbelow(ApplicationConfig.TIMING_SAFE_JITTER_MS + 1)
    await asyncio.sleep((delay_ms + jitter_ms) / 1000)


def generate_token() -> str:
    return secrets.token_urlsafe(32)


def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode()).hexdigest()


def token_matches(raw_token: str, expected_hash: str) -> bool:
    return hmac.compare_digest(hash_token(raw_token), expected_hash)
