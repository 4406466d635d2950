import logging

import stripe
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from giftpage.core.errors import UpstreamFailure

logger = logging.getLogger(__name__)


class StripeGateway:
    """Thin wrapper over the Stripe calls this service makes.

    The API key is passed per request instead of being set on the ``stripe``
    module, so nothing depends on process-wide state.
    """

    def __init__(self, api_key: str):
        self.api_key = api_key

    @retry(
        wait=wait_exponential(multiplier=1, min=1, max=4),
        stop=stop_after_attempt(3),
        retry=retry_if_exception_type(stripe.APIConnectionError),
        reraise=True,
    )
    def _create_session(self, **params):
        return stripe.checkout.Session.create(api_key=self.api_key, **params)

    def create_checkout_session(
        self,
        line_item: dict,
        success_url: str,
        cancel_url: str,
        metadata: dict[str, str],
    ) -> dict:
        try:
            session = self._create_session(
                payment_method_types=["card"],
                line_items=[line_item],
                mode="payment",
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
            )
        except stripe.StripeError as e:
            logger.error(f"Error creating Stripe checkout session: {e}")
            raise UpstreamFailure("Payment processor request failed") from e

        return {"id": session.id, "url": getattr(session, "url", None)}
