"""
Session Use Cases

Listing and revoking the caller's own sessions.
"""

from .list_sessions_use_case import ListSessionsUseCase
from .revoke_sessions_use_case import RevokeSessionsUseCase

__all__ = ["ListSessionsUseCase", "RevokeSessionsUseCase"]
