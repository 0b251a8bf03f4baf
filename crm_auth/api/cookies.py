from fastapi import Response

from config import ApplicationConfig


def set_session_cookie(response: Response, value: str, max_age: int) -> None:
    response.set_cookie(
        key=ApplicationConfig.SESSION_COOKIE_NAME,
        value=value,
        max_age=max_age,
        path="/",
        httponly=True,
        samesite=ApplicationConfig.SESSION_COOKIE_SAMESITE,
        secure=ApplicationConfig.ENVIRONMENT == "production",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=ApplicationConfig.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite=ApplicationConfig.SESSION_COOKIE_SAMESITE,
        secure=ApplicationConfig.ENVIRONMENT == "production",
    )
