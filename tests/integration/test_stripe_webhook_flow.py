import pytest

MENU = {1: {"id": 1, "name": "Fraisier", "price": 40, "image_url": None}}
DETAILS = {"delivery_address": "Cantonments, Accra", "phone_number": "0277000000"}


@pytest.fixture(autouse=True)
def _menu(monkeypatch):
    monkeypatch.setattr("cakeshop.catalog.repository.get_menu_item", lambda client, item_id: MENU.get(item_id))


def _deliver(monkeypatch, event):
    async def _fake_parse_event(request):
        return event
    monkeypatch.setattr("cakeshop.payments.stripe_client.parse_event", _fake_parse_event)


def _start(client):
    client.post("/api/v1/cart/items", json={"menu_item_id": 1})
    return client.post("/api/v1/orders/checkout", json=DETAILS).json()


def test_completed_event_marks_order_processing(client, monkeypatch, fake_orders, fake_stripe):
    started = _start(client)
    session = fake_stripe.get_session(started["session_id"])
    _deliver(monkeypatch, {"type": "checkout.session.completed", "data": {"object": session}})

    r = client.post("/api/v1/payments/webhook", content=b"{}", headers={"Stripe-Signature": "t=1,v1=x"})
    assert r.status_code == 200
    assert r.json()["status"] == "ok"
    assert fake_orders.orders[started["order_id"]]["status"] == "processing"

    # le retour navigateur après le webhook reste un succès
    confirm = client.get(f"/api/v1/orders/{started['order_id']}/confirm", params={"session_id": started["session_id"]})
    assert confirm.status_code == 200
    assert confirm.json()["status"] == "processing"


def test_duplicate_delivery_is_idempotent(client, monkeypatch, fake_orders, fake_stripe):
    started = _start(client)
    session = fake_stripe.get_session(started["session_id"])
    _deliver(monkeypatch, {"type": "checkout.session.completed", "data": {"object": session}})

    assert client.post("/api/v1/payments/webhook", content=b"{}").json()["status"] == "ok"
    assert client.post("/api/v1/payments/webhook", content=b"{}").json()["status"] == "ok"
    assert fake_orders.orders[started["order_id"]]["payment_reference"] == started["payment_reference"]


def test_expired_session_leaves_order_pending(client, monkeypatch, fake_orders, fake_stripe):
    started = _start(client)
    session = fake_stripe.get_session(started["session_id"])
    session["payment_status"] = "unpaid"
    _deliver(monkeypatch, {"type": "checkout.session.expired", "data": {"object": session}})

    assert client.post("/api/v1/payments/webhook", content=b"{}").json()["status"] == "pending"
    assert fake_orders.orders[started["order_id"]]["status"] == "pending"


def test_unrelated_event_ignored(client, monkeypatch, fake_orders):
    _deliver(monkeypatch, {"type": "invoice.paid", "data": {"object": {}}})
    assert client.post("/api/v1/payments/webhook", content=b"{}").json() == {"status": "ignored"}


def test_bad_signature_400(client, monkeypatch):
    async def _boom(request):
        raise ValueError("No signatures found matching the expected signature for payload")
    monkeypatch.setattr("cakeshop.payments.stripe_client.parse_event", _boom)
    r = client.post("/api/v1/payments/webhook", content=b"{}")
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid Stripe webhook payload"


def test_reconciliation_failure_is_500(client, monkeypatch, fake_orders, fake_stripe):
    started = _start(client)
    fake_orders.fail_mark_paid = True
    session = fake_stripe.get_session(started["session_id"])
    _deliver(monkeypatch, {"type": "checkout.session.completed", "data": {"object": session}})

    r = client.post("/api/v1/payments/webhook", content=b"{}")
    assert r.status_code == 500
    assert r.json()["context"]["payment_reference"] == started["payment_reference"]
