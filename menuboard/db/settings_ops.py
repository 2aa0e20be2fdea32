"""
Menu Board — Site settings, theme presets and exchange rates

[CONFIG DATA] Settings are JSON values stored under a fixed key in
site_settings. Reads fall back to built-in defaults when a key is unset.
"""
import copy
import uuid
import logging
from typing import Any

import httpx
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.core import live
from menuboard.core.clock import now_ms
from menuboard.core.config import get_settings
from menuboard.core.errors import ExternalFetchError, NotFound
from menuboard.models.settings import SiteSetting, ThemePreset
from menuboard.schemas.settings import CustomerInfo, ExchangeRates, MenuSchedule, PresetRequest

settings = get_settings()
logger = logging.getLogger(__name__)

THEME_KEY = "theme"
SCHEDULE_KEY = "menu-schedule"
ANIMATIONS_KEY = "animations-enabled"
CUSTOMER_INFO_KEY = "customer-info"

FALLBACK_RATES = {"CZK": 23.5, "EUR": 0.92, "CNY": 7.25}

DEFAULT_THEME: dict[str, Any] = {
    "fonts": {
        "headline": "Georgia, serif",
        "body": "Helvetica Neue, Arial, sans-serif",
        "price": "Helvetica Neue, Arial, sans-serif",
    },
    "typography": {
        "headline_size": "1.875rem",
        "subheadline_size": "1.25rem",
        "body_size": "1rem",
        "price_size": "1rem",
        "allergen_size": "0.75rem",
        "line_spacing": 1.5,
    },
    "colors": {
        "text": "#1a1a1a",
        "text_muted": "#525252",
        "price": "#2d5016",
        "background": "#ffffff",
        "surface": "#fafafa",
        "accent": "#c45a3b",
        "available": "#16a34a",
        "unavailable": "#dc2626",
        "border": "#e5e5e5",
    },
    "spacing": {"scale": 1, "item_gap": "1rem", "category_gap": "2rem"},
    "display": {
        "show_currency_symbol": False,
        "price_alignment": "right",
        "show_images": False,
        "image_size": "medium",
    },
    "tv": {"scale_factor": 1.5, "column_count": 3},
    "currency": {
        "base_currency": "USD",  # stored prices are USD cents
        "display_currencies": ["CZK", "EUR", "USD"],
        "display_mode": "single",
        "rates": {"USD": 1, **FALLBACK_RATES},
        "show_symbols": True,
        "compact_mode": True,
    },
}


# ─── Key/value store ──────────────────────────────────────────────────────────

async def _setting(db: AsyncSession, key: str) -> SiteSetting | None:
    result = await db.execute(select(SiteSetting).where(SiteSetting.key == key))
    return result.scalar_one_or_none()


async def get_setting(db: AsyncSession, key: str, default: Any = None) -> Any:
    setting = await _setting(db, key)
    return default if setting is None else setting.value


async def put_setting(db: AsyncSession, key: str, value: Any) -> SiteSetting:
    setting = await _setting(db, key)
    if setting is None:
        setting = SiteSetting(id=str(uuid.uuid4()), key=key)
        db.add(setting)
    setting.value = value
    setting.updated_at = now_ms()
    await db.commit()
    await live.notify(live.SETTINGS)
    return setting


# ─── Theme ────────────────────────────────────────────────────────────────────

async def get_theme(db: AsyncSession) -> dict[str, Any]:
    return await get_setting(db, THEME_KEY) or copy.deepcopy(DEFAULT_THEME)


async def update_theme(db: AsyncSession, theme: dict[str, Any]) -> dict[str, Any]:
    await put_setting(db, THEME_KEY, theme)
    return theme


async def reset_theme(db: AsyncSession) -> dict[str, Any]:
    return await update_theme(db, copy.deepcopy(DEFAULT_THEME))


# ─── Presets ──────────────────────────────────────────────────────────────────

async def _preset(db: AsyncSession, name: str) -> ThemePreset | None:
    result = await db.execute(select(ThemePreset).where(ThemePreset.name == name))
    return result.scalar_one_or_none()


async def save_preset(db: AsyncSession, payload: PresetRequest) -> ThemePreset:
    """Create the named preset or overwrite its theme."""
    preset = await _preset(db, payload.name)
    if preset is None:
        preset = ThemePreset(id=str(uuid.uuid4()), name=payload.name, created_at=now_ms())
        db.add(preset)
    preset.theme = payload.theme
    preset.is_default = payload.is_default
    await db.commit()
    await live.notify(live.SETTINGS)
    return preset


async def list_presets(db: AsyncSession) -> list[ThemePreset]:
    result = await db.execute(select(ThemePreset).order_by(ThemePreset.created_at))
    return list(result.scalars().all())


async def get_preset(db: AsyncSession, name: str) -> ThemePreset:
    preset = await _preset(db, name)
    if preset is None:
        raise NotFound(f'Preset "{name}" not found')
    return preset


async def delete_preset(db: AsyncSession, name: str) -> bool:
    preset = await _preset(db, name)
    if preset is None:
        return False
    await db.delete(preset)
    await db.commit()
    await live.notify(live.SETTINGS)
    return True


async def load_preset(db: AsyncSession, name: str) -> dict[str, Any]:
    """Apply a saved preset as the current theme."""
    preset = await get_preset(db, name)
    return await update_theme(db, copy.deepcopy(preset.theme))


# ─── Schedule, animations and customer info ───────────────────────────────────

async def get_menu_schedule(db: AsyncSession) -> MenuSchedule | None:
    value = await get_setting(db, SCHEDULE_KEY)
    return MenuSchedule.model_validate(value) if value else None


async def update_menu_schedule(db: AsyncSession, schedule: MenuSchedule) -> MenuSchedule:
    await put_setting(db, SCHEDULE_KEY, schedule.model_dump())
    return schedule


async def get_animations_enabled(db: AsyncSession) -> bool:
    return bool(await get_setting(db, ANIMATIONS_KEY, default=True))


async def update_animations_enabled(db: AsyncSession, enabled: bool) -> bool:
    await put_setting(db, ANIMATIONS_KEY, enabled)
    return enabled


async def get_customer_info(db: AsyncSession) -> CustomerInfo | None:
    value = await get_setting(db, CUSTOMER_INFO_KEY)
    return CustomerInfo.model_validate(value) if value else None


async def update_customer_info(db: AsyncSession, info: CustomerInfo) -> CustomerInfo:
    await put_setting(db, CUSTOMER_INFO_KEY, info.model_dump())
    return info


# ─── Exchange rates ───────────────────────────────────────────────────────────

async def fetch_exchange_rates(transport: httpx.AsyncBaseTransport | None = None) -> ExchangeRates:
    """USD-based rates from Frankfurter. Currencies missing from the answer use fallbacks."""
    try:
        async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS, transport=transport) as client:
            response = await client.get(settings.EXCHANGE_RATES_URL)
    except httpx.TimeoutException:
        raise ExternalFetchError("Timed out fetching exchange rates")
    except httpx.RequestError as exc:
        raise ExternalFetchError(f"Failed to fetch exchange rates: {exc}")

    if response.status_code >= 400:
        raise ExternalFetchError(f"Failed to fetch exchange rates: {response.reason_phrase}")

    rates = response.json().get("rates", {})
    return ExchangeRates(USD=1, **{code: rates.get(code, fallback) for code, fallback in FALLBACK_RATES.items()})


async def refresh_exchange_rates(
    db: AsyncSession,
    transport: httpx.AsyncBaseTransport | None = None,
) -> ExchangeRates | None:
    """
    Fetch current rates and write them into the stored theme's currency.rates.
    Returns None when no theme is stored yet, since there is nothing to update.
    """
    rates = await fetch_exchange_rates(transport)

    setting = await _setting(db, THEME_KEY)
    if setting is None:
        logger.info("No stored theme, exchange rates not written")
        return None

    theme = dict(setting.value or {})
    theme["currency"] = {**theme.get("currency", {}), "rates": rates.model_dump()}
    await put_setting(db, THEME_KEY, theme)
    logger.info("Exchange rates updated: %s", rates.model_dump())
    return rates
