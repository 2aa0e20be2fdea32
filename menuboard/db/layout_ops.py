"""
Menu Board — Display layouts with one active layout per page type

Activation is a compare-and-swap on the layout_scopes row of the page type:
  - READ:  scope row + version_id
  - WRITE: UPDATE layout_scopes ... WHERE version_id = <read_version>
  - rowcount 0 → another activation won → StaleDataError → retry

Sibling layouts are deactivated and the target activated in the same
transaction as the swap, so readers never see two active layouts.
"""
import uuid
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from menuboard.core import live
from menuboard.core.errors import NotFound
from menuboard.core.optimistic_lock import StaleDataError, with_optimistic_retry
from menuboard.models.layout import DisplayLayout, LayoutScope, LayoutType, PageType
from menuboard.schemas.layout import LayoutConfig, LayoutCreate, LayoutOut, LayoutUpdate

logger = logging.getLogger(__name__)

DEFAULT_LAYOUT_CONFIG = LayoutConfig(columns_per_row=1, show_images=True, category_style="header")

DEFAULT_LAYOUTS = [
    (LayoutType.STANDARD_LIST, PageType.DISPLAY, DEFAULT_LAYOUT_CONFIG, True),
    (LayoutType.DIM_SUM_GRID, PageType.ORDER,
     LayoutConfig(columns_per_row=2, show_checkboxes=True, show_item_numbers=True,
                  show_quantity_input=True, color_scheme="classic-red"), True),
    (LayoutType.CARD_GRID, PageType.DISPLAY,
     LayoutConfig(columns_per_row=3, show_images=True, category_style="tabs"), False),
]


def _config(config: LayoutConfig) -> dict:
    return config.model_dump(exclude_none=True)


async def _scope(db: AsyncSession, page_type: str) -> LayoutScope:
    result = await db.execute(
        select(LayoutScope)
        .where(LayoutScope.page_type == page_type)
        .execution_options(populate_existing=True)
    )
    scope = result.scalar_one_or_none()
    if scope is not None:
        return scope

    scope = LayoutScope(page_type=page_type, active_layout_id=None, version_id=1)
    db.add(scope)
    try:
        await db.flush()
    except IntegrityError:
        # Created concurrently; start over from a clean read
        await db.rollback()
        raise StaleDataError(f"Layout scope '{page_type}' created concurrently.")
    return scope


async def _swap_active(db: AsyncSession, page_type: str, layout_id: str | None) -> None:
    """
    Point the page type at `layout_id` (or nothing) and align every sibling's
    is_active flag with it. Does not commit.
    """
    scope = await _scope(db, page_type)
    expected_version = scope.version_id

    result = await db.execute(
        update(LayoutScope)
        .where(LayoutScope.page_type == page_type, LayoutScope.version_id == expected_version)
        .values(active_layout_id=layout_id, version_id=expected_version + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise StaleDataError(f"Optimistic lock conflict: layout scope '{page_type}' changed concurrently.")

    siblings = update(DisplayLayout).where(DisplayLayout.page_type == page_type)
    if layout_id is not None:
        siblings = siblings.where(DisplayLayout.id != layout_id)
    await db.execute(siblings.values(is_active=False).execution_options(synchronize_session=False))
    if layout_id is not None:
        await db.execute(
            update(DisplayLayout)
            .where(DisplayLayout.id == layout_id)
            .values(is_active=True)
            .execution_options(synchronize_session=False)
        )


async def _require_layout(db: AsyncSession, layout_id: str) -> DisplayLayout:
    result = await db.execute(
        select(DisplayLayout)
        .where(DisplayLayout.id == layout_id)
        .execution_options(populate_existing=True)
    )
    layout = result.scalar_one_or_none()
    if layout is None:
        raise NotFound("Layout not found")
    return layout


# ─── Reads ────────────────────────────────────────────────────────────────────

async def list_layouts(db: AsyncSession, page_type: PageType | None = None) -> list[DisplayLayout]:
    query = select(DisplayLayout).execution_options(populate_existing=True)
    if page_type is not None:
        query = query.where(DisplayLayout.page_type == page_type.value)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_active_layout(db: AsyncSession, page_type: PageType = PageType.DISPLAY) -> LayoutOut:
    """The active layout of the page type, or the built-in default when none is active."""
    result = await db.execute(
        select(DisplayLayout)
        .where(DisplayLayout.page_type == page_type.value, DisplayLayout.is_active.is_(True))
        .execution_options(populate_existing=True)
    )
    layout = result.scalars().first()
    if layout is not None:
        return LayoutOut.model_validate(layout)
    return LayoutOut(
        id=None,
        layout_type=LayoutType.STANDARD_LIST,
        page_type=page_type,
        config=DEFAULT_LAYOUT_CONFIG,
        is_active=True,
    )


# ─── Writes ───────────────────────────────────────────────────────────────────

@with_optimistic_retry()
async def set_active_layout(db: AsyncSession, layout_id: str) -> DisplayLayout:
    layout = await _require_layout(db, layout_id)
    await _swap_active(db, layout.page_type, layout.id)
    await db.commit()
    logger.info("Layout %s is now active for page type %s", layout_id, layout.page_type)
    await live.notify(live.LAYOUTS)
    return await _require_layout(db, layout_id)


@with_optimistic_retry()
async def create_layout(db: AsyncSession, payload: LayoutCreate) -> DisplayLayout:
    layout = DisplayLayout(
        id=str(uuid.uuid4()),
        layout_type=payload.layout_type.value,
        page_type=payload.page_type.value,
        config=_config(payload.config),
        is_active=False,
    )
    db.add(layout)
    await db.flush()
    if payload.is_active:
        await _swap_active(db, layout.page_type, layout.id)
    await db.commit()
    await live.notify(live.LAYOUTS)
    return await _require_layout(db, layout.id)


@with_optimistic_retry()
async def update_layout(db: AsyncSession, layout_id: str, payload: LayoutUpdate) -> DisplayLayout:
    layout = await _require_layout(db, layout_id)
    if payload.layout_type is not None:
        layout.layout_type = payload.layout_type.value
    if payload.config is not None:
        layout.config = _config(payload.config)

    if payload.is_active is True and not layout.is_active:
        await _swap_active(db, layout.page_type, layout.id)
    elif payload.is_active is False and layout.is_active:
        await _swap_active(db, layout.page_type, None)

    await db.commit()
    await live.notify(live.LAYOUTS)
    return await _require_layout(db, layout_id)


@with_optimistic_retry()
async def delete_layout(db: AsyncSession, layout_id: str) -> None:
    layout = await _require_layout(db, layout_id)
    if layout.is_active:
        await _swap_active(db, layout.page_type, None)
    await db.delete(layout)
    await db.commit()
    await live.notify(live.LAYOUTS)


async def initialize_default_layouts(db: AsyncSession) -> bool:
    """Seed the default layouts once. Returns False when layouts already exist."""
    if await db.scalar(select(DisplayLayout.id).limit(1)) is not None:
        return False

    for layout_type, page_type, config, active in DEFAULT_LAYOUTS:
        await create_layout(db, LayoutCreate(
            layout_type=layout_type, page_type=page_type, config=config, is_active=active,
        ))
    logger.info("Seeded %d default layouts", len(DEFAULT_LAYOUTS))
    return True
