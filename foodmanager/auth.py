"""Login check, auth cookie handling and the page gate."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Request, Response, status
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from .config import Settings, get_settings
from .models import SessionUser

logger = logging.getLogger(__name__)

TOKEN_COOKIE_NAME = "auth-token"
LOGIN_PATH = "/login"
HOME_PATH = "/"
EXEMPT_PREFIXES = ("/api/", "/static/", "/favicon.ico")


def authenticate(email: Optional[str], password: Optional[str], settings: Settings) -> Optional[SessionUser]:
    """Return the admin user when both fields match exactly, else ``None``."""

    if email != settings.admin_email or password != settings.admin_password:
        return None
    return SessionUser(id=settings.admin_id, email=settings.admin_email, name=settings.admin_name)


def set_auth_cookie(response: Response, settings: Settings) -> None:
    response.set_cookie(
        TOKEN_COOKIE_NAME,
        settings.auth_token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.token_max_age_seconds,
        path="/",
    )


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(TOKEN_COOKIE_NAME, path="/")


def get_token_from_request(request: Request) -> Optional[str]:
    token = request.cookies.get(TOKEN_COOKIE_NAME, "")
    return token or None


def is_exempt_path(path: str) -> bool:
    return path.startswith(EXEMPT_PREFIXES)


def gate_redirect(path: str, token: Optional[str]) -> Optional[str]:
    """Return the redirect target for a page request, or ``None`` to allow it.

    Only token presence is checked; the value is not verified.
    """

    if is_exempt_path(path):
        return None
    if path == LOGIN_PATH:
        return HOME_PATH if token else None
    if not token:
        return LOGIN_PATH
    return None


class AuthGateMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        target = gate_redirect(request.url.path, get_token_from_request(request))
        if target is not None:
            return RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)
        return await call_next(request)


def start_session(response: Response, user: SessionUser, settings: Optional[Settings] = None) -> None:
    set_auth_cookie(response, settings or get_settings())
    logger.info("User %s logged in", user.email)
