from __future__ import annotations

"""Session cookie helpers (access + refresh), shared by the auth routes."""

from starlette.responses import Response

from app.core.config import Settings


def set_auth_cookies(response: Response, access_token: str, refresh_token: str, settings: Settings) -> None:
    secure = settings.is_production
    response.set_cookie(
        settings.ACCESS_TOKEN_COOKIE_NAME,
        access_token,
        max_age=settings.ACCESS_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=secure,
        samesite="lax",
    )
    response.set_cookie(
        settings.REFRESH_TOKEN_COOKIE_NAME,
        refresh_token,
        max_age=settings.REFRESH_COOKIE_MAX_AGE,
        path="/",
        httponly=True,
        secure=secure,
        samesite="lax",
    )


def clear_auth_cookies(response: Response, settings: Settings) -> None:
    """Expire both cookies (empty value, max-age 0)."""
    for name in (settings.ACCESS_TOKEN_COOKIE_NAME, settings.REFRESH_TOKEN_COOKIE_NAME):
        response.set_cookie(
            name,
            "",
            max_age=0,
            path="/",
            httponly=True,
            secure=settings.is_production,
            samesite="lax",
        )


__all__ = ["set_auth_cookies", "clear_auth_cookies"]
