import logging
from typing import Any

from giftpage.core.errors import InvalidMetadata
from giftpage.data_access.record_store import RecordStore
from giftpage.models.gift import GiftRecord, PENDING, SUCCEEDED, utcnow

logger = logging.getLogger(__name__)

GIFTS = "gifts"
UNRECONCILED_EVENTS = "unreconciledEvents"


class GiftLedger:
    """Sole owner of the ``gifts`` collection.

    Gifts are keyed by checkout session id, so a conditional insert on that key
    is what keeps duplicate ``checkout.session.completed`` deliveries from
    creating a second record.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def get_by_session(self, session_id: str) -> GiftRecord | None:
        item = self.store.get(GIFTS, session_id)
        return GiftRecord.model_validate(item) if item else None

    def find_by_payment_intent(self, payment_intent_id: str) -> GiftRecord | None:
        items = self.store.query_by_equals(
            GIFTS,
            "stripe_payment_intent_id",
            payment_intent_id,
            limit=1,
        )
        return GiftRecord.model_validate(items[0]) if items else None

    def create_pending(
        self,
        session_id: str,
        payment_intent_id: str | None,
        beneficiary_id: str | None,
        slug: str | None,
        contributor_name: str | None,
        contributor_email: str | None,
        message: str | None,
        amount: int | None,
        currency: str,
    ) -> GiftRecord:
        missing = [
            name for name, value in (
                ("beneficiaryId", beneficiary_id),
                ("contributorName", contributor_name),
                ("contributorEmail", contributor_email),
            ) if not value
        ]
        if missing:
            raise InvalidMetadata(
                f"Missing required metadata: {', '.join(missing)}", missing=missing
            )

        existing = self.get_by_session(session_id)
        if existing:
            logger.info("Gift already recorded for session", extra={"session_id": session_id})
            return existing

        now = utcnow()
        record = GiftRecord(
            stripe_session_id=session_id,
            stripe_payment_intent_id=payment_intent_id,
            beneficiary_id=beneficiary_id,
            slug=slug,
            contributor_name=contributor_name,
            contributor_email=contributor_email,
            message=message or "",
            amount=amount or 0,
            currency=currency,
            status=PENDING,
            created_at=now,
            updated_at=now,
        )

        if self.store.put(GIFTS, session_id, record.to_item()):
            logger.info(
                "Gift record created",
                extra={"session_id": session_id, "beneficiary_id": beneficiary_id, "gift_id": record.id},
            )
            return record

        # Lost the race against a concurrent delivery of the same session.
        return self.get_by_session(session_id)

    def mark_succeeded(self, payment_intent_id: str) -> GiftRecord | None:
        """Promote the gift paid by ``payment_intent_id`` to succeeded.

        Returns None when no gift references the payment intent yet. Calling it
        again for an already succeeded gift returns the stored record unchanged.
        """
        gift = self.find_by_payment_intent(payment_intent_id)
        if gift is None:
            return None

        if gift.status == SUCCEEDED:
            logger.info(
                "Idempotency check: gift already succeeded",
                extra={"gift_id": gift.id, "payment_intent_id": payment_intent_id},
            )
            return gift

        updated = self.store.update_if_exists(
            GIFTS,
            gift.stripe_session_id,
            {"status": SUCCEEDED, "updated_at": utcnow().isoformat()},
            only_if={"status": PENDING},
        )
        if updated is None:
            # Another delivery won the transition; report what it wrote.
            return self.get_by_session(gift.stripe_session_id)

        logger.info(
            "Gift status updated to succeeded",
            extra={"gift_id": gift.id, "payment_intent_id": payment_intent_id},
        )
        return GiftRecord.model_validate(updated)

    def list_recent_succeeded(self, beneficiary_id: str, limit: int = 10) -> list[GiftRecord]:
        items = self.store.query_by_equals(
            GIFTS,
            "beneficiary_id",
            beneficiary_id,
            limit=limit,
            order_by="created_at",
            direction="desc",
            filters={"status": SUCCEEDED},
        )
        return [GiftRecord.model_validate(item) for item in items]

    def record_unreconciled(self, event_type: str, reference: str, reason: str, payload: dict[str, Any]) -> bool:
        """Keep an event that could not be applied so it can be replayed by hand."""
        created = self.store.put(
            UNRECONCILED_EVENTS,
            f"{event_type}:{reference}",
            {
                "event_type": event_type,
                "reference": reference,
                "reason": reason,
                "payload": payload,
                "created_at": utcnow().isoformat(),
            },
        )
        if not created:
            logger.info("Unreconciled event already recorded", extra={"reference": reference})
        return created
