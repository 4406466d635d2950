import boto3
from functools import lru_cache

from giftpage.core.config import get_settings
from giftpage.data_access.dynamodb import DynamoRecordStore
from giftpage.services.checkout_service import CheckoutSessionService
from giftpage.services.event_router import EventRouter
from giftpage.services.event_verifier import EventVerifier
from giftpage.services.gift_ledger import GiftLedger
from giftpage.services.public_page_service import PublicPageService
from giftpage.services.reconciliation import ReconciliationHandlers
from giftpage.services.stripe_gateway import StripeGateway

# Providers are built lazily on first request and reused across warm Lambda
# invocations. Tests replace them through app.dependency_overrides.


@lru_cache()
def get_boto_session() -> boto3.Session:
    settings = get_settings()
    return boto3.Session(
        region_name=settings.AWS_REGION,
        profile_name=settings.AWS_PROFILE
    )

@lru_cache()
def get_record_store() -> DynamoRecordStore:
    dynamo_resource = get_boto_session().resource('dynamodb')
    table = dynamo_resource.Table(get_settings().DYNAMODB_TABLE_NAME)
    return DynamoRecordStore(table=table)

@lru_cache()
def get_gift_ledger() -> GiftLedger:
    return GiftLedger(store=get_record_store())

@lru_cache()
def get_checkout_service() -> CheckoutSessionService:
    settings = get_settings()
    return CheckoutSessionService(
        store=get_record_store(),
        gateway=StripeGateway(api_key=settings.STRIPE_SECRET_KEY),
        base_url=settings.APP_BASE_URL,
        min_amount=settings.MIN_GIFT_AMOUNT,
        currency=settings.GIFT_CURRENCY,
    )

@lru_cache()
def get_event_verifier() -> EventVerifier:
    settings = get_settings()
    return EventVerifier(
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        tolerance=settings.STRIPE_SIGNATURE_TOLERANCE,
    )

@lru_cache()
def get_event_router() -> EventRouter:
    settings = get_settings()
    handlers = ReconciliationHandlers(
        ledger=get_gift_ledger(),
        default_currency=settings.GIFT_CURRENCY,
        redeliver_unmatched_payments=settings.REDELIVER_UNMATCHED_PAYMENTS,
    )
    return EventRouter(handlers=handlers)

@lru_cache()
def get_public_page_service() -> PublicPageService:
    return PublicPageService(
        store=get_record_store(),
        ledger=get_gift_ledger(),
        recent_limit=get_settings().RECENT_GIFTS_LIMIT,
    )
