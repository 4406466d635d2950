"""Typed view of the Stripe events this service reconciles.

Only two event types carry meaning here. Every other type parses into
``IgnoredEvent`` so the router can acknowledge it without touching state.
"""

from typing import Literal, Union

from pydantic import BaseModel, Field

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"
PAYMENT_INTENT_SUCCEEDED = "payment_intent.succeeded"


class CheckoutSessionPayload(BaseModel):
    id: str
    amount_total: int | None = None
    currency: str | None = None
    payment_intent: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)


class PaymentIntentPayload(BaseModel):
    id: str
    amount: int | None = None
    metadata: dict[str, str] = Field(default_factory=dict)


class CheckoutSessionCompleted(BaseModel):
    id: str | None = None
    type: Literal["checkout.session.completed"] = CHECKOUT_SESSION_COMPLETED
    session: CheckoutSessionPayload


class PaymentIntentSucceeded(BaseModel):
    id: str | None = None
    type: Literal["payment_intent.succeeded"] = PAYMENT_INTENT_SUCCEEDED
    payment_intent: PaymentIntentPayload


class IgnoredEvent(BaseModel):
    id: str | None = None
    type: str


VerifiedEvent = Union[CheckoutSessionCompleted, PaymentIntentSucceeded, IgnoredEvent]


def parse_event(envelope: dict) -> VerifiedEvent:
    """Build the typed event from a decoded ``{id, type, data: {object}}`` envelope.

    Raises pydantic.ValidationError when a recognised type has a malformed object.
    """
    if not isinstance(envelope, dict):
        raise ValueError("Event envelope is not an object")

    event_type = envelope.get("type")
    if not isinstance(event_type, str):
        raise ValueError("Event envelope has no type")

    event_id = envelope.get("id")
    data = envelope.get("data")
    obj = data.get("object") if isinstance(data, dict) else None
    if not isinstance(obj, dict):
        obj = {}

    if event_type == CHECKOUT_SESSION_COMPLETED:
        return CheckoutSessionCompleted(id=event_id, session=CheckoutSessionPayload.model_validate(obj))
    if event_type == PAYMENT_INTENT_SUCCEEDED:
        return PaymentIntentSucceeded(id=event_id, payment_intent=PaymentIntentPayload.model_validate(obj))
    return IgnoredEvent(id=event_id, type=event_type)
