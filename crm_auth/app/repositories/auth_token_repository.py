from abc import abstractmethod
from typing import List
from uuid import UUID

from crm_auth.app.repositories.token_store import TokenStore
from crm_auth.domain.entities import AuthToken, TokenKind


class IAuthTokenRepository(TokenStore):
    """AuthToken repository interface, bound to one token kind"""

    kind: TokenKind

    @abstractmethod
    async def get_by_user_id(self, user_id: UUID) -> List[AuthToken]:
        """Get all tokens of this kind for a user"""
        pass
