import os
import pytest
from itertools import count
from typing import Generator, Dict, Any, List, Optional
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

# Pas de Redis ni de Supabase réels pendant les tests
os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

from cakeshop.app import app as fastapi_app
from cakeshop.infra.supabase_client import get_db, get_service_db
from cakeshop.utils.security import require_user, require_admin

TEST_USER: Dict[str, Any] = {
    "id": "test-user",
    "email": "test@example.com",
    "role": "user",
    "metadata": {"full_name": "Test User"},
    "token": "fake-token",
}

ADMIN_USER: Dict[str, Any] = {"id": "admin-user-id", "role": "admin", "email": "admin@example.com"}


# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="session")
def app():
    return fastapi_app


@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def db() -> MagicMock:
    return MagicMock(name="supabase")


# Client Supabase factice pour toutes les routes (get_db / get_service_db)
@pytest.fixture(autouse=True)
def _override_db(app, db):
    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_service_db] = lambda: db
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_service_db, None)


# Simuler un utilisateur authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_require_user(app):
    app.dependency_overrides[require_user] = lambda: dict(TEST_USER)
    try:
        yield
    finally:
        app.dependency_overrides.pop(require_user, None)


@pytest.fixture
def authenticated_admin_client(app, client):
    app.dependency_overrides[require_admin] = lambda: dict(ADMIN_USER)
    yield client
    app.dependency_overrides.pop(require_admin, None)


class FakeOrdersStore:
    """
    Remplace cakeshop.orders.repository (mêmes signatures) par un stockage en mémoire.
    Les drapeaux fail_* simulent un refus du data store à chaque étape.
    """

    def __init__(self):
        self.orders: Dict[int, dict] = {}
        self.items: List[dict] = []
        self._ids = count(1)
        self.fail_order_insert = False
        self.fail_items_insert = False
        self.fail_mark_paid = False

    def insert_order(self, client, payload: Dict[str, Any]) -> Optional[dict]:
        if self.fail_order_insert:
            return None
        order_id = next(self._ids)
        row = {"id": order_id, "payment_reference": None, **payload}
        self.orders[order_id] = row
        return dict(row)

    def insert_order_items(self, client, rows: List[Dict[str, Any]]) -> bool:
        if self.fail_items_insert:
            return False
        self.items.extend(dict(r) for r in rows)
        return True

    def find_order_by_idempotency_key(self, client, user_id, key):
        for row in self.orders.values():
            if row.get("user_id") == user_id and row.get("idempotency_key") == key:
                return dict(row)
        return None

    def get_order(self, client, order_id):
        row = self.orders.get(int(order_id))
        return dict(row) if row else None

    def get_order_items(self, client, order_id):
        return [dict(i) for i in self.items if i["order_id"] == int(order_id)]

    def mark_order_paid(self, client, order_id, payment_reference):
        if self.fail_mark_paid:
            return None
        row = self.orders.get(int(order_id))
        if not row:
            return None
        row.update({"payment_reference": payment_reference, "status": "processing"})
        return dict(row)

    def update_order_status(self, client, order_id, status):
        row = self.orders.get(int(order_id))
        if not row:
            return None
        row["status"] = status
        return dict(row)

    def list_user_orders(self, client, user_id, limit=50):
        return [dict(r) for r in self.orders.values() if r.get("user_id") == user_id][:limit]

    def list_orders(self, client, limit=200):
        return [dict(r) for r in self.orders.values()][:limit]


@pytest.fixture
def fake_orders(monkeypatch) -> FakeOrdersStore:
    store = FakeOrdersStore()
    for name in (
        "insert_order",
        "insert_order_items",
        "find_order_by_idempotency_key",
        "get_order",
        "get_order_items",
        "mark_order_paid",
        "update_order_status",
        "list_user_orders",
        "list_orders",
    ):
        monkeypatch.setattr(f"cakeshop.orders.repository.{name}", getattr(store, name))
    return store


class FakeStripe:
    """Sessions Checkout en mémoire; get_session renvoie la session 'paid' par défaut."""

    def __init__(self):
        self.sessions: Dict[str, dict] = {}
        self.payment_status = "paid"
        self.fail_create = False
        self.calls: List[dict] = []

    def create_payment_session(self, **kwargs):
        if self.fail_create:
            raise RuntimeError("stripe down")
        self.calls.append(kwargs)
        session_id = f"cs_test_{len(self.calls)}"
        self.sessions[session_id] = {
            "id": session_id,
            "url": f"https://checkout.stripe.test/{session_id}",
            "client_reference_id": kwargs["reference"],
            "metadata": dict(kwargs["metadata"]),
            "amount_total": kwargs["amount_minor"],
        }
        return dict(self.sessions[session_id])

    def get_session(self, session_id):
        session = dict(self.sessions[session_id])
        session["payment_status"] = self.payment_status
        return session


@pytest.fixture
def fake_stripe(monkeypatch) -> FakeStripe:
    fake = FakeStripe()
    monkeypatch.setattr("cakeshop.payments.stripe_client.create_payment_session", fake.create_payment_session)
    monkeypatch.setattr("cakeshop.payments.stripe_client.get_session", fake.get_session)
    return fake
