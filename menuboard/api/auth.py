"""
Menu Board — Admin login
"""
from fastapi import APIRouter, HTTPException, status

from menuboard.core.config import get_settings
from menuboard.core.security import create_admin_token, verify_admin_password
from menuboard.schemas.auth import LoginRequest, TokenResponse

settings = get_settings()
router = APIRouter(prefix="/admin", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(payload: LoginRequest):
    """Exchange the admin password for a bearer token. Rate limited per client."""
    if not verify_admin_password(payload.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid password.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(
        access_token=create_admin_token(),
        expires_in=settings.ADMIN_SESSION_HOURS * 3600,
    )
