"""Shared test fixtures.

Provides:
- InMemoryRecordStore: RecordStore fake with the same conditional-write rules
- FakeGateway: records checkout sessions instead of calling Stripe
- sign_payload: builds a real ``Stripe-Signature`` header for a body
- client: FastAPI test client wired to the fakes
"""

import copy
import hashlib
import hmac
import json
import threading
import time

import pytest
from fastapi.testclient import TestClient

from giftpage.api.main import app
from giftpage.core import dependencies
from giftpage.core.config import Settings
from giftpage.services.checkout_service import CheckoutSessionService
from giftpage.services.event_router import EventRouter
from giftpage.services.event_verifier import EventVerifier
from giftpage.services.gift_ledger import GiftLedger
from giftpage.services.public_page_service import PublicPageService
from giftpage.services.reconciliation import ReconciliationHandlers

WEBHOOK_SECRET = "whsec_test_secret"


class InMemoryRecordStore:
    def __init__(self):
        self.collections: dict[str, dict[str, dict]] = {}
        self._lock = threading.Lock()

    def _collection(self, name):
        return self.collections.setdefault(name, {})

    def get(self, collection, key):
        with self._lock:
            item = self._collection(collection).get(key)
            return copy.deepcopy(item)

    def put(self, collection, key, value):
        with self._lock:
            records = self._collection(collection)
            if key in records:
                return False
            records[key] = copy.deepcopy(dict(value))
            return True

    def update_if_exists(self, collection, key, patch, only_if=None):
        with self._lock:
            item = self._collection(collection).get(key)
            if item is None:
                return None
            if any(item.get(f) != v for f, v in (only_if or {}).items()):
                return None
            item.update(copy.deepcopy(dict(patch)))
            return copy.deepcopy(item)

    def query_by_equals(self, collection, field, value, limit, order_by=None, direction="desc", filters=None):
        with self._lock:
            matches = [
                copy.deepcopy(item)
                for item in self._collection(collection).values()
                if item.get(field) == value
                and all(item.get(f) == v for f, v in (filters or {}).items())
            ]
        if order_by:
            matches.sort(key=lambda item: item.get(order_by), reverse=direction == "desc")
        return matches[:limit]


class FakeGateway:
    def __init__(self):
        self.sessions = []
        self.error = None

    def create_checkout_session(self, line_item, success_url, cancel_url, metadata):
        if self.error:
            raise self.error
        session_id = f"sess_{len(self.sessions) + 1}"
        self.sessions.append({
            "id": session_id,
            "line_item": line_item,
            "success_url": success_url,
            "cancel_url": cancel_url,
            "metadata": metadata,
        })
        return {"id": session_id, "url": f"https://checkout.stripe.test/{session_id}"}


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET, timestamp: int | None = None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    signature = hmac.new(
        secret.encode("utf-8"),
        f"{timestamp}.{payload}".encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


def checkout_completed_event(session_id="sess_1", payment_intent="pi_1", amount_total=1000, metadata=None):
    if metadata is None:
        metadata = {
            "beneficiaryId": "child-abc-id",
            "slug": "child-abc",
            "contributorName": "Bob",
            "contributorEmail": "bob@example.com",
            "message": "Happy savings!",
        }
    return {
        "id": f"evt_cs_{session_id}",
        "type": "checkout.session.completed",
        "data": {
            "object": {
                "id": session_id,
                "object": "checkout.session",
                "amount_total": amount_total,
                "currency": "cad",
                "payment_intent": payment_intent,
                "metadata": metadata,
            }
        },
    }


def payment_succeeded_event(payment_intent="pi_1", amount=1000):
    return {
        "id": f"evt_pi_{payment_intent}",
        "type": "payment_intent.succeeded",
        "data": {"object": {"id": payment_intent, "object": "payment_intent", "amount": amount, "metadata": {}}},
    }


@pytest.fixture
def settings():
    return Settings(
        STRIPE_SECRET_KEY="sk_test_123",
        STRIPE_WEBHOOK_SECRET=WEBHOOK_SECRET,
        APP_BASE_URL="https://gifts.example.com",
        DYNAMODB_TABLE_NAME="giftpage-test",
    )


@pytest.fixture
def store():
    """Store seeded with one public gift page at slug ``child-abc``."""
    store = InMemoryRecordStore()
    store.put("slugIndex", "child-abc", {"beneficiary_id": "child-abc-id"})
    store.put("beneficiaries", "child-abc-id", {"first_name": "Abby", "hero_photo_url": "https://img.example.com/abby.jpg"})
    store.put("giftPages", "child-abc-id", {
        "title": "Abby's RESP",
        "description": "Help Abby save for school",
        "goal_amount": 500000,
        "theme": "forest",
        "is_public": True,
    })
    return store


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def ledger(store):
    return GiftLedger(store=store)


@pytest.fixture
def handlers(ledger):
    return ReconciliationHandlers(ledger=ledger)


@pytest.fixture
def event_router(handlers):
    return EventRouter(handlers=handlers)


@pytest.fixture
def verifier():
    return EventVerifier(webhook_secret=WEBHOOK_SECRET)


@pytest.fixture
def checkout_service(store, gateway, settings):
    return CheckoutSessionService(
        store=store,
        gateway=gateway,
        base_url=settings.APP_BASE_URL,
        min_amount=settings.MIN_GIFT_AMOUNT,
        currency=settings.GIFT_CURRENCY,
    )


@pytest.fixture
def client(store, ledger, checkout_service, verifier, event_router):
    app.dependency_overrides[dependencies.get_checkout_service] = lambda: checkout_service
    app.dependency_overrides[dependencies.get_event_verifier] = lambda: verifier
    app.dependency_overrides[dependencies.get_event_router] = lambda: event_router
    app.dependency_overrides[dependencies.get_public_page_service] = lambda: PublicPageService(store=store, ledger=ledger)
    yield TestClient(app)
    app.dependency_overrides.clear()


def post_event(client, event: dict, secret: str = WEBHOOK_SECRET):
    payload = json.dumps(event)
    return client.post(
        "/webhooks/stripe",
        content=payload,
        headers={"Content-Type": "application/json", "Stripe-Signature": sign_payload(payload, secret)},
    )
