from typing import Optional

from fastapi import status
from starlette.background import BackgroundTasks

from crm_auth.libs.result import Error

ERROR_STATUS = {
    "UNAUTHORIZED": status.HTTP_401_UNAUTHORIZED,
    "SESSION_EXPIRED": status.HTTP_401_UNAUTHORIZED,
    "SESSION_REVOKED": status.HTTP_401_UNAUTHORIZED,
    "INVALID_CREDENTIALS": status.HTTP_401_UNAUTHORIZED,
    "INVALID_TOKEN": status.HTTP_401_UNAUTHORIZED,
    "TOKEN_EXPIRED": status.HTTP_401_UNAUTHORIZED,
    "TOKEN_ALREADY_USED": status.HTTP_401_UNAUTHORIZED,
    "INVALID_CURRENT_PASSWORD": status.HTTP_401_UNAUTHORIZED,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "ACCOUNT_INACTIVE": status.HTTP_403_FORBIDDEN,
    "EMAIL_NOT_VERIFIED": status.HTTP_403_FORBIDDEN,
    "INSUFFICIENT_PERMISSIONS": status.HTTP_403_FORBIDDEN,
    "DEFAULT_ROLE_PROTECTED": status.HTTP_403_FORBIDDEN,
    "NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ROLE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "SESSION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVITATION_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "CONFLICT": status.HTTP_409_CONFLICT,
    "EMAIL_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "INVITATION_ALREADY_PENDING": status.HTTP_409_CONFLICT,
    "ROLE_NAME_EXISTS": status.HTTP_409_CONFLICT,
    "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
}


class ClientError(Exception):
    def __init__(
        self,
        base_error: Error,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        background: Optional[BackgroundTasks] = None,
    ):
        self.base_error = base_error
        self.status_code = status_code
        self.background = background
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)


def to_http_error(error: Error, background: Optional[BackgroundTasks] = None) -> Exception:
    """
    Map a use case error to the exception the app handlers render.

    ``background`` carries side effects (audit, email) queued before the
    failure so they still run with the error response.
    """
    status_code = ERROR_STATUS.get(error.code)
    if status_code is None:
        return ServerError(error)
    return ClientError(error, status_code=status_code, background=background)
