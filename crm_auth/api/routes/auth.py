from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Response, status
from pydantic import BaseModel, EmailStr, Field

from crm_auth.api.cookies import clear_session_cookie, set_session_cookie
from crm_auth.api.error import to_http_error
from crm_auth.app.services.audit import AuditEmitter, RequestMeta
from crm_auth.app.services.email_queue import EmailQueue
from crm_auth.app.services.rbac import AuthContext
from crm_auth.app.services.unit_of_work import UnitOfWork
from crm_auth.app.use_cases.auth import (
    ChangePasswordUseCase,
    ConfirmPasswordResetUseCase,
    GetMeUseCase,
    LoginResponse,
    LoginUseCase,
    LogoutUseCase,
    MessageResponse,
    ProfileResponse,
    RegisterCommand,
    RegisterResponse,
    RegisterUseCase,
    RequestPasswordResetUseCase,
    ResendVerificationUseCase,
    UpdateProfileCommand,
    UpdateProfileUseCase,
    VerifyEmailUseCase,
)
from crm_auth.depends import (
    get_audit_emitter,
    get_auth_context,
    get_email_queue,
    get_request_meta,
    get_unit_of_work,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class OrganizationInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description="Organization name")
    slug: str = Field(
        ...,
        min_length=3,
        max_length=50,
        pattern=SLUG_PATTERN,
        description="Lowercase alphanumeric with hyphens",
    )


class RegisterRequest(BaseModel):
    """
    Register HTTP request payload

    Validates incoming HTTP request before converting to RegisterCommand.
    """

    organization: OrganizationInput
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=8, max_length=72, description="Password (8-72 chars)")
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=72)
    remember_me: bool = False


class TokenRequest(BaseModel):
    token: str = Field(..., min_length=1)


class EmailRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=8, max_length=72)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, max_length=72)


class UpdateProfileRequest(BaseModel):
    """Partial update; omitted fields are left unchanged"""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=50)


@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=RegisterResponse)
async def register(
    request: RegisterRequest,
    background_tasks: BackgroundTasks,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_queue: EmailQueue = Depends(get_email_queue),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Register an organization and its first (admin) user.

    Raises:
        - 409 Conflict: Email or organization slug already in use
        - 422 Unprocessable Entity: Invalid input
    """
    command = RegisterCommand(
        organization_name=request.organization.name,
        organization_slug=request.organization.slug,
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
    )

    result = await RegisterUseCase(uow, email_queue, audit).execute(command, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value


@router.post("/login", response_model=LoginResponse)
async def login(
    request: LoginRequest,
    response: Response,
    background_tasks: BackgroundTasks,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_queue: EmailQueue = Depends(get_email_queue),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Login with email and password; sets the session cookie.

    Raises:
        - 401 Unauthorized: Invalid email or password (always the same message)
        - 403 Forbidden: Email not verified, or account deactivated
    """
    use_case = LoginUseCase(uow, email_queue, audit)
    result = await use_case.execute(request.email, request.password, request.remember_me, meta)

    if result.is_err():
        # failed-login audit and lockout email still go out with the error
        raise to_http_error(result.error, background_tasks)

    outcome = result.value
    set_session_cookie(response, outcome.cookie_value, outcome.max_age_seconds)
    return outcome.response


@router.get("/me", response_model=LoginResponse)
async def me(
    ctx: AuthContext = Depends(get_auth_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
):
    result = await GetMeUseCase(uow).execute(ctx)
    if result.is_err():
        raise to_http_error(result.error)
    return result.value


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(
    background_tasks: BackgroundTasks,
    ctx: AuthContext = Depends(get_auth_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    result = await LogoutUseCase(uow, audit).execute(ctx, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)

    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_session_cookie(response)
    return response


@router.patch("/profile", response_model=ProfileResponse)
async def update_profile(
    request: UpdateProfileRequest,
    background_tasks: BackgroundTasks,
    ctx: AuthContext = Depends(get_auth_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    command = UpdateProfileCommand(**request.model_dump(exclude_unset=True))
    result = await UpdateProfileUseCase(uow, audit).execute(ctx, command, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value


@router.post("/verify-email", response_model=MessageResponse)
async def verify_email(
    request: TokenRequest,
    background_tasks: BackgroundTasks,
    uow: UnitOfWork = Depends(get_unit_of_work),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Verify email address with the token from the verification email.

    Raises:
        - 401 Unauthorized: Invalid, expired or already used token
    """
    result = await VerifyEmailUseCase(uow, audit).execute(request.token, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value


@router.post("/resend-verification", response_model=MessageResponse)
async def resend_verification(
    request: EmailRequest,
    background_tasks: BackgroundTasks,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_queue: EmailQueue = Depends(get_email_queue),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Always returns the same generic message (no email enumeration)"""
    use_case = ResendVerificationUseCase(uow, email_queue, audit)
    result = await use_case.execute(request.email, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    request: EmailRequest,
    background_tasks: BackgroundTasks,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_queue: EmailQueue = Depends(get_email_queue),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Always returns the same generic message (no email enumeration)"""
    use_case = RequestPasswordResetUseCase(uow, email_queue, audit)
    result = await use_case.execute(request.email, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    request: ResetPasswordRequest,
    background_tasks: BackgroundTasks,
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_queue: EmailQueue = Depends(get_email_queue),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Set a new password with a reset token. Signs out every session.

    Raises:
        - 401 Unauthorized: Invalid, expired or already used token
    """
    use_case = ConfirmPasswordResetUseCase(uow, email_queue, audit)
    result = await use_case.execute(request.token, request.password, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    request: ChangePasswordRequest,
    background_tasks: BackgroundTasks,
    ctx: AuthContext = Depends(get_auth_context),
    uow: UnitOfWork = Depends(get_unit_of_work),
    email_queue: EmailQueue = Depends(get_email_queue),
    audit: AuditEmitter = Depends(get_audit_emitter),
    meta: RequestMeta = Depends(get_request_meta),
):
    """
    Change password; every other session of the user is revoked.

    Raises:
        - 401 Unauthorized: Current password is incorrect
    """
    use_case = ChangePasswordUseCase(uow, email_queue, audit)
    result = await use_case.execute(ctx, request.current_password, request.new_password, meta)
    if result.is_err():
        raise to_http_error(result.error, background_tasks)
    return result.value
