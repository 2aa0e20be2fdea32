"""
Display layouts: at most one active layout per page type.
"""
import asyncio

import pytest
from sqlalchemy import select

from menuboard.core.optimistic_lock import StaleDataError, with_optimistic_retry
from menuboard.db import layout_ops
from menuboard.models.layout import DisplayLayout, LayoutScope, LayoutType, PageType
from menuboard.schemas.layout import LayoutConfig, LayoutCreate, LayoutUpdate


def _layout(layout_type=LayoutType.CARD_GRID, page_type=PageType.DISPLAY, is_active=False):
    return LayoutCreate(
        layout_type=layout_type,
        page_type=page_type,
        config=LayoutConfig(columns_per_row=2),
        is_active=is_active,
    )


async def _active_ids(session_factory, page_type: PageType) -> list[str]:
    async with session_factory() as db:
        result = await db.execute(
            select(DisplayLayout.id).where(
                DisplayLayout.page_type == page_type.value, DisplayLayout.is_active.is_(True)
            )
        )
        return list(result.scalars().all())


@pytest.mark.asyncio
async def test_set_active_leaves_exactly_one_active(db, session_factory):
    first = await layout_ops.create_layout(db, _layout(is_active=True))
    second = await layout_ops.create_layout(db, _layout(LayoutType.DIM_SUM_GRID))
    other_page = await layout_ops.create_layout(db, _layout(page_type=PageType.ORDER, is_active=True))

    await layout_ops.set_active_layout(db, second.id)

    assert await _active_ids(session_factory, PageType.DISPLAY) == [second.id]
    assert await _active_ids(session_factory, PageType.ORDER) == [other_page.id]
    scope = await db.get(LayoutScope, PageType.DISPLAY.value, populate_existing=True)
    assert scope.active_layout_id == second.id


@pytest.mark.asyncio
async def test_creating_an_active_layout_deactivates_the_previous_one(db, session_factory):
    first = await layout_ops.create_layout(db, _layout(is_active=True))
    second = await layout_ops.create_layout(db, _layout(is_active=True))

    assert second.is_active is True
    assert await _active_ids(session_factory, PageType.DISPLAY) == [second.id]
    assert (await db.get(DisplayLayout, first.id, populate_existing=True)).is_active is False


@pytest.mark.asyncio
async def test_update_layout_can_activate_and_deactivate(db, session_factory):
    first = await layout_ops.create_layout(db, _layout(is_active=True))
    second = await layout_ops.create_layout(db, _layout())

    await layout_ops.update_layout(db, second.id, LayoutUpdate(is_active=True))
    assert await _active_ids(session_factory, PageType.DISPLAY) == [second.id]

    await layout_ops.update_layout(db, second.id, LayoutUpdate(is_active=False))
    assert await _active_ids(session_factory, PageType.DISPLAY) == []
    scope = await db.get(LayoutScope, PageType.DISPLAY.value, populate_existing=True)
    assert scope.active_layout_id is None


@pytest.mark.asyncio
async def test_active_layout_falls_back_to_default(db):
    layout = await layout_ops.get_active_layout(db, PageType.ORDER)
    assert layout.id is None
    assert layout.layout_type == LayoutType.STANDARD_LIST
    assert layout.config.show_images is True
    assert layout.config.category_style == "header"


@pytest.mark.asyncio
async def test_deleting_active_layout_clears_scope(db):
    layout = await layout_ops.create_layout(db, _layout(is_active=True))
    await layout_ops.delete_layout(db, layout.id)

    assert (await layout_ops.get_active_layout(db, PageType.DISPLAY)).id is None
    scope = await db.get(LayoutScope, PageType.DISPLAY.value, populate_existing=True)
    assert scope.active_layout_id is None


@pytest.mark.asyncio
async def test_initialize_default_layouts_runs_once(db, session_factory):
    assert await layout_ops.initialize_default_layouts(db) is True
    assert await layout_ops.initialize_default_layouts(db) is False

    assert len(await layout_ops.list_layouts(db)) == 3
    assert len(await _active_ids(session_factory, PageType.DISPLAY)) == 1
    assert len(await _active_ids(session_factory, PageType.ORDER)) == 1


@pytest.mark.asyncio
async def test_concurrent_activations_end_with_one_active(session_factory):
    async with session_factory() as db:
        ids = [(await layout_ops.create_layout(db, _layout())).id for _ in range(4)]

    async def activate(layout_id):
        async with session_factory() as db:
            await layout_ops.set_active_layout(db, layout_id)

    await asyncio.gather(*(activate(i) for i in ids))

    active = await _active_ids(session_factory, PageType.DISPLAY)
    assert len(active) == 1
    async with session_factory() as db:
        scope = await db.get(LayoutScope, PageType.DISPLAY.value)
        assert scope.active_layout_id == active[0]


@pytest.mark.asyncio
async def test_optimistic_retry_gives_up_after_max_retries():
    calls = []

    @with_optimistic_retry(max_retries=3)
    async def always_conflicts():
        calls.append(1)
        raise StaleDataError("conflict")

    with pytest.raises(StaleDataError):
        await always_conflicts()
    assert len(calls) == 3
