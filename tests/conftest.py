import hashlib
import hmac
import json
import os
import time
from typing import Any, Dict, Generator, List, Optional

# Variables d'environnement fixées avant tout import de backend.config
os.environ["STRIPE_SECRET_KEY"] = "sk_test_1234567890abcdef"
os.environ["STRIPE_PUBLISHABLE_KEY"] = "pk_test_1234567890abcdef"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["FRONTEND_URL"] = "http://localhost:4200"
os.environ["ORDER_STORE_BACKEND"] = "json"

import pytest
import stripe
from fastapi.testclient import TestClient

from backend.app import app as fastapi_app
from backend.orders.repository import JsonFileOrderStore, get_order_store

WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)
        elif "tests/functional/" in nodeid:
            item.add_marker(pytest.mark.functional)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def orders_file(tmp_path):
    return tmp_path / "data" / "orders.json"

@pytest.fixture()
def order_store(orders_file) -> JsonFileOrderStore:
    return JsonFileOrderStore(orders_file)

# Chaque test écrit dans son propre fichier de commandes
@pytest.fixture(autouse=True)
def _override_order_store(app, order_store):
    app.dependency_overrides[get_order_store] = lambda: order_store
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_order_store, None)

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


class FakeStripeCheckout:
    """Remplace stripe.checkout.Session.create/retrieve et enregistre les appels."""

    def __init__(self):
        self.created: List[Dict[str, Any]] = []
        self.retrieved: List[str] = []
        self.sessions: Dict[str, Dict[str, Any]] = {}
        self.create_error: Optional[Exception] = None
        self.retrieve_error: Optional[Exception] = None

    def create(self, **params):
        self.created.append(params)
        if self.create_error:
            raise self.create_error
        session_id = f"cs_test_{len(self.created)}"
        session = {
            "id": session_id,
            "object": "checkout.session",
            "url": f"https://checkout.stripe.com/c/pay/{session_id}",
            "status": "open",
            "payment_status": "unpaid",
            "customer_details": {"email": params.get("customer_email")},
            "metadata": dict(params.get("metadata") or {}),
        }
        self.sessions[session_id] = session
        return session

    def retrieve(self, session_id, **params):
        self.retrieved.append(session_id)
        if self.retrieve_error:
            raise self.retrieve_error
        if session_id not in self.sessions:
            raise stripe.InvalidRequestError(f"No such checkout.session: '{session_id}'", param="session")
        return self.sessions[session_id]

# Aucun appel réseau vers Stripe pendant les tests
@pytest.fixture(autouse=True)
def fake_stripe(monkeypatch) -> FakeStripeCheckout:
    fake = FakeStripeCheckout()
    monkeypatch.setattr(stripe.checkout.Session, "create", fake.create)
    monkeypatch.setattr(stripe.checkout.Session, "retrieve", fake.retrieve)
    return fake


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    """En-tête Stripe-Signature (schéma v1: HMAC-SHA256 de "<t>.<payload>")."""
    ts = int(time.time()) if timestamp is None else timestamp
    signed = f"{ts}.{payload.decode('utf-8')}".encode("utf-8")
    sig = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return f"t={ts},v1={sig}"

def make_event(event_type: str, obj: Dict[str, Any], event_id: str = "evt_test_1") -> bytes:
    event = {
        "id": event_id,
        "object": "event",
        "api_version": "2024-06-20",
        "created": int(time.time()),
        "type": event_type,
        "data": {"object": obj},
    }
    return json.dumps(event).encode("utf-8")

@pytest.fixture()
def signed_event():
    """Fabrique (payload, en-tête signé) pour un événement Stripe."""
    def _make(event_type: str = "checkout.session.completed", obj: Optional[Dict[str, Any]] = None):
        payload = make_event(event_type, obj or {"id": "cs_test_1", "object": "checkout.session"})
        return payload, sign_payload(payload)
    return _make


@pytest.fixture()
def webhook_signer():
    return sign_payload

@pytest.fixture()
def shirt_cart() -> List[Dict[str, Any]]:
    return [{"product": {"id": "p1", "title": "Shirt", "price": 19.99, "images": ["https://cdn.test/p1.png"]}, "quantity": 2}]

@pytest.fixture()
def customer_info():
    """Infos client valides; surcharger via customer_info(email="...")."""
    def _make(**overrides) -> Dict[str, Any]:
        info = {
            "firstName": "Ada",
            "lastName": "Lovelace",
            "email": "ada@example.com",
            "phone": "+1 555 0100",
            "address": "12 Analytical St",
            "house": "4B",
            "postalcode": "10001",
            "zip": "10001",
            "message": "Leave at the door",
        }
        info.update(overrides)
        return info
    return _make
