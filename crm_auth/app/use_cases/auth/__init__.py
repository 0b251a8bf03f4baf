"""
Authentication Use Cases

All authentication-related business logic.
"""

from .authenticate_use_case import AuthenticateUseCase
from .change_password_use_case import ChangePasswordUseCase
from .confirm_password_reset_use_case import ConfirmPasswordResetUseCase
from .get_me_use_case import GetMeUseCase
from .login_use_case import LoginUseCase
from .logout_use_case import LogoutUseCase
from .register_use_case import RegisterUseCase
from .request_password_reset_use_case import RequestPasswordResetUseCase
from .resend_verification_use_case import ResendVerificationUseCase
from .update_profile_use_case import UpdateProfileUseCase
from .verify_email_use_case import VerifyEmailUseCase
from .dtos import (
    AuthUser,
    LoginResponse,
    LoginResult,
    MessageResponse,
    ProfileResponse,
    RegisterCommand,
    RegisterResponse,
    RevokeSessionsResponse,
    SessionListResponse,
    UpdateProfileCommand,
)

__all__ = [
    # Use Cases
    "AuthenticateUseCase",
    "ChangePasswordUseCase",
    "ConfirmPasswordResetUseCase",
    "GetMeUseCase",
    "LoginUseCase",
    "LogoutUseCase",
    "RegisterUseCase",
    "RequestPasswordResetUseCase",
    "ResendVerificationUseCase",
    "UpdateProfileUseCase",
    "VerifyEmailUseCase",
    # DTOs - Commands
    "RegisterCommand",
    "UpdateProfileCommand",
    # DTOs - Responses
    "AuthUser",
    "LoginResponse",
    "LoginResult",
    "MessageResponse",
    "ProfileResponse",
    "RegisterResponse",
    "RevokeSessionsResponse",
    "SessionListResponse",
]
