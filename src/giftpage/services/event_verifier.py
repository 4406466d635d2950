import json
import logging

import stripe
from pydantic import ValidationError

from giftpage.core.errors import VerificationError
from giftpage.models.events import VerifiedEvent, parse_event

logger = logging.getLogger(__name__)


class EventVerifier:
    def __init__(self, webhook_secret: str, tolerance: int = stripe.Webhook.DEFAULT_TOLERANCE):
        self.webhook_secret = webhook_secret
        self.tolerance = tolerance

    def verify(self, raw_body: bytes, signature_header: str | None) -> VerifiedEvent:
        """Check the Stripe signature over the untouched body, then decode it.

        Nothing is parsed before the signature holds.
        """
        if not signature_header:
            raise VerificationError("Missing signature")

        try:
            payload = raw_body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise VerificationError("Invalid payload") from e

        try:
            stripe.WebhookSignature.verify_header(
                payload, signature_header, self.webhook_secret, self.tolerance
            )
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Webhook signature verification failed: {e}")
            raise VerificationError("Invalid signature") from e

        try:
            return parse_event(json.loads(payload))
        except (ValueError, ValidationError) as e:
            logger.warning(f"Webhook invalid payload: {e}")
            raise VerificationError("Invalid payload") from e
