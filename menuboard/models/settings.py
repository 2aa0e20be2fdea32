"""
Menu Board — Settings and sync state models

[CONFIG DATA] site_settings, theme_presets, sync_state
"""
import uuid
from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from menuboard.db.database import Base

SYNC_STATE_ID = "menu-sync"


class SiteSetting(Base):
    __tablename__ = "site_settings"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    key: Mapped[str] = mapped_column(String(64), unique=True, index=True, nullable=False)
    value: Mapped[Any] = mapped_column(JSON, nullable=True)
    updated_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class ThemePreset(Base):
    __tablename__ = "theme_presets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(128), unique=True, index=True, nullable=False)
    theme: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)


class SyncState(Base):
    """
    Singleton keyed by SYNC_STATE_ID, created on first use.
    """
    __tablename__ = "sync_state"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=SYNC_STATE_ID)
    last_sync_at: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="idle")
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)
