from datetime import datetime, timezone
from typing import Optional
import logging

from fastapi import APIRouter, Depends, Header, Query, Request

from giftpage.api.schemas import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    HealthResponse,
    PublicGiftPageResponse,
    WebhookAck,
)
from giftpage.core.dependencies import (
    get_checkout_service,
    get_event_router,
    get_event_verifier,
    get_public_page_service,
)
from giftpage.services.checkout_service import CheckoutSessionService
from giftpage.services.event_router import EventRouter
from giftpage.services.event_verifier import EventVerifier
from giftpage.services.public_page_service import PublicPageService

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/payments/checkout",
    response_model=CheckoutSessionResponse,
)
def create_checkout_session(
    body: CheckoutSessionRequest,
    service: CheckoutSessionService = Depends(get_checkout_service),
):
    session = service.create_session(
        slug=body.slug,
        amount=body.amount,
        contributor_name=body.gifter_name,
        contributor_email=str(body.gifter_email),
        message=body.message,
    )
    return CheckoutSessionResponse(session_id=session["id"], url=session.get("url"))


@router.post("/webhooks/stripe", response_model=WebhookAck)
async def handle_stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    verifier: EventVerifier = Depends(get_event_verifier),
    event_router: EventRouter = Depends(get_event_router),
):
    """
    Receives webhook events from Stripe, verifies the signature over the raw
    body and reconciles the gift ledger. A 500 makes Stripe redeliver.
    """
    payload = await request.body()

    event = verifier.verify(payload, stripe_signature)
    outcome = event_router.route(event)
    logger.info(f"Webhook {event.type} {outcome}", extra={"event_id": event.id})

    return WebhookAck(received=True)


@router.get("/public/gift-pages", response_model=PublicGiftPageResponse)
def get_public_gift_page(
    slug: str = Query(..., min_length=1),
    service: PublicPageService = Depends(get_public_page_service),
):
    return service.get_public_page(slug)


@router.get("/health", response_model=HealthResponse)
def health_check():
    logger.info("Health check requested")
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc))
