"""
Menu Board — Admin bearer guard

Every /admin path except the login route needs `Authorization: Bearer <jwt>`
carrying `"type": "admin"`. Viewer routes (menu, layouts, carts, live)
pass through untouched.
"""
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from jose import JWTError

from menuboard.core.security import decode_token

ADMIN_PREFIX = "/admin"
LOGIN_PATHS = {"/admin/login", "/admin/login/"}


def is_guarded(path: str) -> bool:
    if path in LOGIN_PATHS:
        return False
    return path == ADMIN_PREFIX or path.startswith(ADMIN_PREFIX + "/")


def _unauthorized(detail: str) -> JSONResponse:
    return JSONResponse(status_code=401, content={"detail": detail}, headers={"WWW-Authenticate": "Bearer"})


class AdminAuthMiddleware(BaseHTTPMiddleware):
    """On success the decoded claims are available as request.state.admin."""

    async def dispatch(self, request: Request, call_next) -> Response:
        if request.method == "OPTIONS" or not is_guarded(request.url.path):
            return await call_next(request)

        scheme, _, token = request.headers.get("Authorization", "").partition(" ")
        if scheme != "Bearer" or not token:
            return _unauthorized("Admin session required. Expected: Bearer <token>")

        try:
            claims = decode_token(token)
        except JWTError as exc:
            return _unauthorized(f"Invalid or expired admin session: {exc}")
        if claims.get("type") != "admin":
            return _unauthorized("Not an admin session token")

        request.state.admin = claims
        return await call_next(request)
