"""
Invitation Use Case DTOs (Data Transfer Objects)

All Command and Response classes for the invitation workflow.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel

from crm_auth.app.use_cases.auth.dtos import RoleInfo


# ============================================================================
# Command DTOs
# ============================================================================


class AcceptInvitationCommand(BaseModel):
    token: str
    password: str
    first_name: str
    last_name: str


# ============================================================================
# Response DTOs
# ============================================================================


class InvitationResponse(BaseModel):
    """Response for create invitation use case"""

    id: str
    email: str
    role: RoleInfo
    expires_at: datetime


class InvitationListItem(BaseModel):
    id: str
    email: str
    role_id: str
    invited_by_id: str
    expires_at: datetime
    created_at: datetime


class InvitationListResponse(BaseModel):
    invitations: List[InvitationListItem]


class AcceptInvitationResponse(BaseModel):
    message: str
    user_id: str
    organization_id: str
