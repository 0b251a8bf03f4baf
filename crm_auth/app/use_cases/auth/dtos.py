"""
Authentication Use Case DTOs (Data Transfer Objects)

All Command and Response classes for auth domain.
Provides type safety and clear contracts between layers.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from crm_auth.domain.entities import Organization, Profile, Role, User


# ============================================================================
# Command DTOs
# ============================================================================


class RegisterCommand(BaseModel):
    """Register a new organization together with its first user"""

    organization_name: str
    organization_slug: str
    email: str
    password: str
    first_name: str
    last_name: str


class UpdateProfileCommand(BaseModel):
    """Partial profile update; unset fields are left unchanged"""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None


# ============================================================================
# Response DTOs
# ============================================================================


class MessageResponse(BaseModel):
    message: str


class RegisterResponse(BaseModel):
    message: str
    user_id: str
    organization_id: str


class ProfileInfo(BaseModel):
    first_name: str
    last_name: str
    phone: Optional[str] = None


class OrganizationInfo(BaseModel):
    id: str
    name: str
    slug: str


class RoleInfo(BaseModel):
    id: str
    name: str


class AuthUser(BaseModel):
    """User as seen by the frontend after login"""

    id: str
    email: str
    profile: ProfileInfo
    organization: OrganizationInfo
    role: RoleInfo


class LoginResponse(BaseModel):
    """Response for login and /me"""

    user: AuthUser
    permissions: List[str]


class LoginResult(BaseModel):
    """Login outcome: response body plus the cookie the router must set"""

    response: LoginResponse
    cookie_value: str
    max_age_seconds: int


class ProfileResponse(BaseModel):
    profile: ProfileInfo


class SessionInfo(BaseModel):
    id: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime
    last_accessed_at: datetime
    expires_at: datetime
    current: bool


class SessionListResponse(BaseModel):
    sessions: List[SessionInfo]


class RevokeSessionsResponse(BaseModel):
    revoked_count: int


def build_profile_info(profile: Optional[Profile]) -> ProfileInfo:
    if profile is None:
        return ProfileInfo(first_name="", last_name="", phone=None)
    return ProfileInfo(
        first_name=profile.first_name, last_name=profile.last_name, phone=profile.phone
    )


def build_auth_user(
    user: User, profile: Optional[Profile], organization: Organization, role: Role
) -> AuthUser:
    return AuthUser(
        id=str(user.id),
        email=user.email,
        profile=build_profile_info(profile),
        organization=OrganizationInfo(
            id=str(organization.id), name=organization.name, slug=organization.slug
        ),
        role=RoleInfo(id=str(role.id), name=role.name),
    )
