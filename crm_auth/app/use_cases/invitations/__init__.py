"""
Invitation Use Cases

Token-backed invitation workflow: create, list, revoke, accept.
"""

from .accept_invitation_use_case import AcceptInvitationUseCase
from .create_invitation_use_case import CreateInvitationUseCase
from .list_invitations_use_case import ListInvitationsUseCase
from .revoke_invitation_use_case import RevokeInvitationUseCase
from .dtos import (
    AcceptInvitationCommand,
    AcceptInvitationResponse,
    InvitationListResponse,
    InvitationResponse,
)

__all__ = [
    "AcceptInvitationUseCase",
    "CreateInvitationUseCase",
    "ListInvitationsUseCase",
    "RevokeInvitationUseCase",
    "AcceptInvitationCommand",
    "AcceptInvitationResponse",
    "InvitationListResponse",
    "InvitationResponse",
]
