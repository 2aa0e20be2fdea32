"""
Session carts: totals, line addressing and the status machine.
"""
import pytest

from menuboard.core.errors import EmptyOrder, NotFound
from menuboard.db import order_ops
from menuboard.models.order import OrderStatus
from menuboard.schemas.order import OrderItemRequest, SelectedModifiers

SESSION = "session-abc"


def _item(unit_price=100, quantity=1, name="Dumplings", **kwargs):
    return OrderItemRequest(
        menu_item_id=f"item-{name}", name=name, quantity=quantity, unit_price=unit_price, **kwargs
    )


def test_compute_totals_applies_tax_rate():
    items = [{"unit_price": 100, "quantity": 2}, {"unit_price": 50, "quantity": 1}]
    assert order_ops.compute_totals(items, tax_rate=0.1) == (250, 25, 275)


def test_compute_totals_rounds_half_up():
    assert order_ops.compute_totals([{"unit_price": 5, "quantity": 1}], tax_rate=0.1) == (5, 1, 6)
    assert order_ops.compute_totals([], tax_rate=0.1) == (0, 0, 0)


@pytest.mark.asyncio
async def test_add_item_opens_order_with_taxed_totals(db):
    order = await order_ops.add_item(db, SESSION, _item(100, 2))
    order = await order_ops.add_item(db, SESSION, _item(50, 1, name="Tea"))

    assert order.status == OrderStatus.ACTIVE.value
    assert (order.subtotal, order.tax, order.total) == (250, 25, 275)
    assert len({line["line_id"] for line in order.items}) == 2


@pytest.mark.asyncio
async def test_first_item_is_taxed_on_creation(db):
    order = await order_ops.add_item(db, SESSION, _item(200, 1))
    assert (order.subtotal, order.tax, order.total) == (200, 20, 220)


@pytest.mark.asyncio
async def test_quantity_zero_removes_single_line_and_zeroes_totals(db):
    order = await order_ops.add_item(db, SESSION, _item(100, 3))
    line_id = order.items[0]["line_id"]

    order = await order_ops.update_quantity(db, SESSION, line_id, 0)
    assert order.items == []
    assert (order.subtotal, order.tax, order.total) == (0, 0, 0)


@pytest.mark.asyncio
async def test_update_quantity_targets_line_by_id(db):
    await order_ops.add_item(db, SESSION, _item(100, 1, name="A"))
    order = await order_ops.add_item(db, SESSION, _item(100, 1, name="B"))
    line_b = order.items[1]["line_id"]

    order = await order_ops.update_quantity(db, SESSION, line_b, 4)
    assert [(line["name"], line["quantity"]) for line in order.items] == [("A", 1), ("B", 4)]
    assert order.subtotal == 500

    order = await order_ops.remove_item(db, SESSION, order.items[0]["line_id"])
    assert [line["name"] for line in order.items] == ["B"]


@pytest.mark.asyncio
async def test_unknown_line_raises_not_found(db):
    await order_ops.add_item(db, SESSION, _item())
    with pytest.raises(NotFound):
        await order_ops.update_quantity(db, SESSION, "no-such-line", 2)


@pytest.mark.asyncio
async def test_mutations_without_active_order_raise_not_found(db):
    with pytest.raises(NotFound, match="No active order found"):
        await order_ops.update_notes(db, SESSION, "extra chili")
    with pytest.raises(NotFound):
        await order_ops.submit(db, SESSION)
    assert await order_ops.clear_order(db, SESSION) is None


@pytest.mark.asyncio
async def test_empty_submit_fails_and_order_stays_active(db):
    order = await order_ops.create_order(db, SESSION, table_number="7")

    with pytest.raises(EmptyOrder):
        await order_ops.submit(db, SESSION)

    current = await order_ops.get_order(db, SESSION)
    assert current.id == order.id
    assert current.status == OrderStatus.ACTIVE.value


@pytest.mark.asyncio
async def test_create_order_returns_existing_active_order(db):
    first = await order_ops.create_order(db, SESSION)
    second = await order_ops.create_order(db, SESSION, table_number="3")
    assert first.id == second.id


@pytest.mark.asyncio
async def test_submit_then_complete_is_idempotent(db):
    await order_ops.add_item(db, SESSION, _item(selected_modifiers=SelectedModifiers(spice_level="hot")))
    order = await order_ops.submit(db, SESSION)
    assert order.status == OrderStatus.SUBMITTED.value
    assert order.items[0]["selected_modifiers"] == {"spice_level": "hot"}
    assert await order_ops.get_order(db, SESSION) is None

    completed = await order_ops.complete(db, order.id)
    updated_at = completed.updated_at
    again = await order_ops.complete(db, order.id)
    assert again.status == OrderStatus.COMPLETED.value
    assert again.updated_at == updated_at


@pytest.mark.asyncio
async def test_after_submit_a_new_cart_is_opened(db):
    await order_ops.add_item(db, SESSION, _item())
    submitted = await order_ops.submit(db, SESSION)

    fresh = await order_ops.add_item(db, SESSION, _item(name="Tea"))
    assert fresh.id != submitted.id
    assert [line["name"] for line in fresh.items] == ["Tea"]


@pytest.mark.asyncio
async def test_notes_table_and_clear(db):
    order = await order_ops.add_item(db, SESSION, _item())
    await order_ops.update_notes(db, SESSION, "no onions")
    await order_ops.update_table_number(db, SESSION, "12")
    cleared = await order_ops.clear_order(db, SESSION)

    assert cleared.id == order.id
    assert cleared.status == OrderStatus.ACTIVE.value
    assert cleared.items == []
    assert (cleared.notes, cleared.table_number) == ("no onions", "12")
    assert cleared.total == 0


@pytest.mark.asyncio
async def test_list_and_delete_orders(db):
    await order_ops.add_item(db, "s1", _item())
    await order_ops.submit(db, "s1")
    other = await order_ops.add_item(db, "s2", _item())

    submitted = await order_ops.list_orders(db, OrderStatus.SUBMITTED)
    assert [o.session_id for o in submitted] == ["s1"]
    assert len(await order_ops.list_orders(db)) == 2

    await order_ops.delete_order(db, other.id)
    assert len(await order_ops.list_orders(db)) == 1
    with pytest.raises(NotFound):
        await order_ops.complete(db, other.id)
