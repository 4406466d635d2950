import logging

from giftpage.core.errors import InvalidInput, NotFound
from giftpage.data_access.record_store import RecordStore
from giftpage.models.gift_page import Beneficiary, GiftPage
from giftpage.services.stripe_gateway import StripeGateway

logger = logging.getLogger(__name__)

SLUG_INDEX = "slugIndex"
BENEFICIARIES = "beneficiaries"
GIFT_PAGES = "giftPages"


def resolve_gift_page(store: RecordStore, slug: str) -> tuple[str, Beneficiary, GiftPage]:
    """slug -> (beneficiary id, beneficiary, gift page), or NotFound."""
    slug_entry = store.get(SLUG_INDEX, slug)
    if not slug_entry or not slug_entry.get("beneficiary_id"):
        raise NotFound("Gift page not found")

    beneficiary_id = slug_entry["beneficiary_id"]
    beneficiary = store.get(BENEFICIARIES, beneficiary_id)
    gift_page = store.get(GIFT_PAGES, beneficiary_id)
    if not beneficiary or not gift_page:
        raise NotFound("Gift page not found")

    return (
        beneficiary_id,
        Beneficiary.model_validate({**beneficiary, "id": beneficiary_id}),
        GiftPage.model_validate(gift_page),
    )


class CheckoutSessionService:
    def __init__(
        self,
        store: RecordStore,
        gateway: StripeGateway,
        base_url: str,
        min_amount: int = 200,
        currency: str = "cad",
    ):
        self.store = store
        self.gateway = gateway
        self.base_url = base_url.rstrip("/")
        self.min_amount = min_amount
        self.currency = currency

    def create_session(
        self,
        slug: str,
        amount: int,
        contributor_name: str,
        contributor_email: str,
        message: str | None = None,
    ) -> dict:
        """Open a Stripe checkout session for a gift and return ``{id, url}``.

        The session metadata is the only thing the webhook side gets back about
        who the gift is from and for, so it is written verbatim here.
        """
        if not slug or not amount or not contributor_name or not contributor_email:
            raise InvalidInput("Missing required fields")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount < self.min_amount:
            raise InvalidInput(
                f"Minimum gift amount is ${self.min_amount / 100:.2f} {self.currency.upper()}"
            )

        beneficiary_id, beneficiary, _ = resolve_gift_page(self.store, slug)

        line_item = {
            "price_data": {
                "currency": self.currency,
                "product_data": {
                    "name": f"RESP Gift for {beneficiary.first_name}",
                    "description": message or f"A gift towards {beneficiary.first_name}'s education",
                },
                "unit_amount": amount,
            },
            "quantity": 1,
        }
        metadata = {
            "beneficiaryId": beneficiary_id,
            "slug": slug,
            "contributorName": contributor_name,
            "contributorEmail": contributor_email,
            "message": message or "",
        }

        session = self.gateway.create_checkout_session(
            line_item=line_item,
            success_url=f"{self.base_url}/thanks?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{self.base_url}/for/{slug}",
            metadata=metadata,
        )
        logger.info(
            "Checkout session created",
            extra={"session_id": session["id"], "beneficiary_id": beneficiary_id, "slug": slug},
        )
        return session
