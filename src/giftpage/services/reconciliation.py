import logging

from giftpage.core.errors import InvalidMetadata, ProcessingFailure
from giftpage.models.events import (
    CHECKOUT_SESSION_COMPLETED,
    PAYMENT_INTENT_SUCCEEDED,
    CheckoutSessionPayload,
    PaymentIntentPayload,
)
from giftpage.models.gift import GiftRecord
from giftpage.services.gift_ledger import GiftLedger

logger = logging.getLogger(__name__)


class ReconciliationHandlers:
    def __init__(self, ledger: GiftLedger, default_currency: str = "cad", redeliver_unmatched_payments: bool = False):
        self.ledger = ledger
        self.default_currency = default_currency
        self.redeliver_unmatched_payments = redeliver_unmatched_payments

    def on_checkout_completed(self, session: CheckoutSessionPayload) -> GiftRecord | None:
        logger.info("Processing checkout session completed", extra={"session_id": session.id})

        metadata = session.metadata
        try:
            return self.ledger.create_pending(
                session_id=session.id,
                payment_intent_id=session.payment_intent,
                beneficiary_id=metadata.get("beneficiaryId"),
                slug=metadata.get("slug"),
                contributor_name=metadata.get("contributorName"),
                contributor_email=metadata.get("contributorEmail"),
                message=metadata.get("message"),
                amount=session.amount_total,
                currency=session.currency or self.default_currency,
            )
        except InvalidMetadata as e:
            # The payment went through but there is nothing to attribute it to.
            # Acknowledge so Stripe stops redelivering, and keep the payload.
            logger.error(
                "Missing required metadata in session; gift not recorded",
                extra={"session_id": session.id, "missing": e.missing},
            )
            self.ledger.record_unreconciled(
                CHECKOUT_SESSION_COMPLETED, session.id, e.message, session.model_dump()
            )
            return None

    def on_payment_succeeded(self, payment_intent: PaymentIntentPayload) -> GiftRecord | None:
        logger.info("Processing payment intent succeeded", extra={"payment_intent_id": payment_intent.id})

        gift = self.ledger.mark_succeeded(payment_intent.id)
        if gift is not None:
            return gift

        if self.redeliver_unmatched_payments:
            logger.warning(
                "No gift found for payment intent yet; asking for redelivery",
                extra={"payment_intent_id": payment_intent.id},
            )
            raise ProcessingFailure(f"No gift found for payment intent {payment_intent.id}")

        logger.error("No gift found for payment intent", extra={"payment_intent_id": payment_intent.id})
        self.ledger.record_unreconciled(
            PAYMENT_INTENT_SUCCEEDED, payment_intent.id, "No gift found for payment intent",
            payment_intent.model_dump(),
        )
        return None
