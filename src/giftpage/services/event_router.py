import logging
from typing import Literal

from giftpage.core.errors import ProcessingFailure
from giftpage.models.events import (
    CheckoutSessionCompleted,
    IgnoredEvent,
    PaymentIntentSucceeded,
    VerifiedEvent,
)
from giftpage.services.reconciliation import ReconciliationHandlers

logger = logging.getLogger(__name__)

RouteOutcome = Literal["handled", "ignored"]


class EventRouter:
    def __init__(self, handlers: ReconciliationHandlers):
        self.handlers = handlers

    def route(self, event: VerifiedEvent) -> RouteOutcome:
        """Hand a verified event to its handler.

        Any handler error becomes ProcessingFailure so the webhook answers 500
        and Stripe redelivers. Handlers are idempotent, so that is safe.
        """
        if isinstance(event, IgnoredEvent):
            logger.info(f"Unhandled event type: {event.type}", extra={"event_id": event.id})
            return "ignored"

        try:
            if isinstance(event, CheckoutSessionCompleted):
                self.handlers.on_checkout_completed(event.session)
            elif isinstance(event, PaymentIntentSucceeded):
                self.handlers.on_payment_succeeded(event.payment_intent)
            else:
                raise TypeError(f"Unsupported event variant: {type(event).__name__}")
        except ProcessingFailure:
            logger.exception("Webhook processing error", extra={"event_id": event.id, "event_type": event.type})
            raise
        except Exception as e:
            logger.exception("Webhook processing error", extra={"event_id": event.id, "event_type": event.type})
            raise ProcessingFailure("Webhook processing failed") from e

        return "handled"
