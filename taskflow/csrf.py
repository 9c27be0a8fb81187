"""
CSRF Protection Middleware for FastAPI

Double-submit cookie pattern:
- A CSRF token is generated and set as a cookie
- State-changing requests authenticated by the session cookie must echo it in
  the X-CSRF-Token header
- Requests carrying an Authorization header are not cookie-authenticated and
  are not checked

Set CSRF_ENABLED=false in environment to disable.
"""

import logging
import secrets
from typing import Callable

from fastapi import Request
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .config import AUTH_COOKIE_NAME, AUTH_COOKIE_SECURE

logger = logging.getLogger(__name__)

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"
CSRF_COOKIE_MAX_AGE = 86400

# Methods that require CSRF protection
PROTECTED_METHODS = {"POST", "PUT", "PATCH", "DELETE"}

# Session creation happens before any cookie exists
EXEMPT_PATHS = ["/auth/session", "/health", "/csrf-token"]


def generate_csrf_token() -> str:
    """Generate a cryptographically secure CSRF token"""
    return secrets.token_urlsafe(32)


def is_path_exempt(path: str) -> bool:
    return any(path == exempt or path.startswith(exempt + "/") for exempt in EXEMPT_PATHS)


def set_csrf_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=CSRF_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=AUTH_COOKIE_SECURE,
        samesite="strict",
        max_age=CSRF_COOKIE_MAX_AGE,
        path="/",
    )


def requires_csrf_check(request: Request) -> bool:
    return (
        request.method in PROTECTED_METHODS
        and AUTH_COOKIE_NAME in request.cookies
        and "authorization" not in request.headers
        and not is_path_exempt(request.url.path)
    )


def _reject(request: Request, reason: str, detail: str) -> JSONResponse:
    logger.warning(f"🚫 CSRF: {reason} for {request.method} {request.url.path}")
    return JSONResponse(status_code=403, content={"detail": detail})


class CSRFMiddleware(BaseHTTPMiddleware):
    """
    CSRF Protection Middleware using double-submit cookie pattern.

    1. On any request without a CSRF cookie, a new one is set on the response
    2. Cookie-authenticated POST/PUT/PATCH/DELETE requests must send the same
       value in the X-CSRF-Token header
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        csrf_cookie = request.cookies.get(CSRF_COOKIE_NAME)

        if requires_csrf_check(request):
            csrf_header = request.headers.get(CSRF_HEADER_NAME)

            if not csrf_cookie:
                return _reject(
                    request,
                    "Missing cookie",
                    "CSRF token missing. Please refresh the page and try again.",
                )
            if not csrf_header:
                return _reject(
                    request,
                    "Missing header",
                    "CSRF token header missing. Please refresh the page and try again.",
                )
            if not secrets.compare_digest(csrf_cookie, csrf_header):
                return _reject(
                    request,
                    "Token mismatch",
                    "CSRF token invalid. Please refresh the page and try again.",
                )

            logger.debug(f"✅ CSRF: Valid token for {request.method} {request.url.path}")

        response = await call_next(request)

        # /csrf-token sets the cookie itself
        already_set = any(
            c.startswith(f"{CSRF_COOKIE_NAME}=") for c in response.headers.getlist("set-cookie")
        )
        if not csrf_cookie and not already_set:
            set_csrf_cookie(response, generate_csrf_token())
            logger.debug("🔑 CSRF: Set new token cookie")

        return response
