"""
Menu Board — Admin session tokens
"""
import hmac
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt

from menuboard.core.config import get_settings

settings = get_settings()


def verify_admin_password(plain: str) -> bool:
    return hmac.compare_digest(plain.encode("utf-8"), settings.ADMIN_PASSWORD.encode("utf-8"))


def create_admin_token(data: dict[str, Any] | None = None) -> str:
    payload = dict(data or {})
    expire = datetime.now(tz=timezone.utc) + timedelta(hours=settings.ADMIN_SESSION_HOURS)
    payload.update({"sub": "admin", "exp": expire, "type": "admin", "jti": str(uuid.uuid4())})
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """Decode and validate a JWT. Raises JWTError on failure."""
    return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
