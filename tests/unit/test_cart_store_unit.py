import json
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from cakeshop.cart import AppliedPromotion, CartLine, CartStore


def _line(item_id=1, price="10.00", qty=1, name=None):
    return CartLine(item_id=item_id, name=name or f"Gâteau {item_id}", unit_price=Decimal(price), quantity=qty)


def _promo(pct=20, code="gateau20"):
    return AppliedPromotion(id=7, code=code, discount_percentage=pct,
                            expiry_date=datetime.now(timezone.utc) + timedelta(days=3))


def test_add_same_item_twice_merges_quantities():
    cart = CartStore({})
    cart.add_item(_line(1, qty=2))
    cart.add_item(_line(1, qty=3))
    cart.add_item(_line(2))

    ids = [line.item_id for line in cart.items]
    assert ids == [1, 2]
    assert cart.items[0].quantity == 5


def test_sequence_keeps_unique_ids_and_positive_quantities():
    cart = CartStore({})
    cart.add_item(_line(1))
    cart.add_item(_line(2, qty=4))
    cart.update_quantity(2, 1)
    cart.add_item(_line(1, qty=2))
    cart.update_quantity(1, -3)
    cart.add_item(_line(3))
    cart.remove_item(3)
    cart.add_item(_line(2))

    ids = [line.item_id for line in cart.items]
    assert len(ids) == len(set(ids))
    assert all(line.quantity >= 1 for line in cart.items)
    assert {line.item_id: line.quantity for line in cart.items} == {2: 2}


def test_update_quantity_zero_is_remove():
    a, b = CartStore({}), CartStore({})
    for cart in (a, b):
        cart.add_item(_line(1))
        cart.add_item(_line(2))
    msg_a = a.update_quantity(1, 0)
    msg_b = b.remove_item(1)

    assert msg_a == msg_b == "Article retiré du panier"
    assert a.items == b.items


def test_update_quantity_unknown_item_is_noop():
    cart = CartStore({})
    cart.add_item(_line(1, qty=2))
    cart.update_quantity(99, 5)
    assert [(l.item_id, l.quantity) for l in cart.items] == [(1, 2)]


def test_total_formula_with_delivery_fee():
    cart = CartStore({}, delivery_fee=Decimal("15"))
    cart.add_item(_line(1, price="12.50", qty=2))
    cart.add_item(_line(2, price="30.00"))
    cart.apply_promo_code(_promo(pct=10))

    assert cart.subtotal == Decimal("55.00")
    assert cart.discount == Decimal("5.50")
    assert cart.total == cart.subtotal - cart.discount + Decimal("15")
    # lecture répétée: même valeur
    assert cart.total == cart.total == Decimal("64.50")


def test_twenty_percent_on_hundred():
    cart = CartStore({}, delivery_fee=Decimal("15"))
    cart.add_item(_line(1, price="50.00", qty=2))
    cart.apply_promo_code(_promo(pct=20))

    assert cart.discount == Decimal("20.00")
    assert cart.total == Decimal("95.00")


def test_empty_cart_total_is_delivery_fee():
    cart = CartStore({}, delivery_fee=Decimal("15"))
    assert cart.is_empty()
    assert cart.total == Decimal("15.00")


def test_clear_cart_empties_lines_and_promo_and_storage():
    storage = {}
    cart = CartStore(storage)
    cart.add_item(_line(1))
    cart.apply_promo_code(_promo())

    assert cart.clear_cart() == "Panier vidé"
    assert cart.items == []
    assert cart.applied_promo is None

    reloaded = CartStore(storage)
    assert reloaded.is_empty()
    assert reloaded.applied_promo is None
    assert "promo" not in storage


def test_state_survives_reload_from_storage():
    storage = {}
    cart = CartStore(storage)
    cart.add_item(_line(1, price="19.99", qty=2))
    msg = cart.apply_promo_code(_promo(pct=15))
    assert msg == "Code promo appliqué ! -15%"

    reloaded = CartStore(storage)
    assert reloaded.items == cart.items
    assert reloaded.applied_promo.code == "GATEAU20"
    assert reloaded.total == cart.total


def test_remove_promo_code():
    storage = {}
    cart = CartStore(storage)
    cart.apply_promo_code(_promo())
    assert cart.remove_promo_code() == "Code promo retiré"
    assert CartStore(storage).applied_promo is None


def test_malformed_storage_is_discarded(caplog):
    storage = {"cart": "{not json", "promo": json.dumps({"code": "X"})}
    with caplog.at_level("WARNING"):
        cart = CartStore(storage)
    assert cart.is_empty()
    assert cart.applied_promo is None
    assert "cart.load discarded malformed cart payload" in caplog.text


def test_duplicate_lines_in_storage_are_merged():
    storage = {"cart": json.dumps([
        {"item_id": 4, "name": "Tarte", "unit_price": "8.00", "quantity": 1},
        {"item_id": 4, "name": "Tarte", "unit_price": "8.00", "quantity": 2},
    ])}
    cart = CartStore(storage)
    assert [(l.item_id, l.quantity) for l in cart.items] == [(4, 3)]


def test_items_returns_copies():
    cart = CartStore({})
    cart.add_item(_line(1))
    cart.items[0].quantity = 50
    assert cart.items[0].quantity == 1


def test_snapshot_exposes_totals_and_message():
    cart = CartStore({}, delivery_fee=Decimal("15"))
    cart.add_item(_line(1, price="10"))
    snap = cart.snapshot("ok")
    assert snap.subtotal == Decimal("10.00")
    assert snap.delivery_fee == Decimal("15.00")
    assert snap.total == Decimal("25.00")
    assert snap.message == "ok"


def test_cart_line_rejects_zero_quantity():
    with pytest.raises(ValueError):
        _line(1, qty=0)
