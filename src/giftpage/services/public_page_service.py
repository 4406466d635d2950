from giftpage.core.errors import NotFound
from giftpage.data_access.record_store import RecordStore
from giftpage.services.checkout_service import resolve_gift_page
from giftpage.services.gift_ledger import GiftLedger


class PublicPageService:
    """Read-only projection of a gift page for the public site."""

    def __init__(self, store: RecordStore, ledger: GiftLedger, recent_limit: int = 10):
        self.store = store
        self.ledger = ledger
        self.recent_limit = recent_limit

    def get_public_page(self, slug: str) -> dict:
        if not slug:
            raise NotFound("Gift page not found")

        beneficiary_id, beneficiary, gift_page = resolve_gift_page(self.store, slug)
        if not gift_page.is_public:
            raise NotFound("Gift page not found")

        recent = self.ledger.list_recent_succeeded(beneficiary_id, limit=self.recent_limit)
        recent_gifts = [
            {
                "id": gift.id,
                "gifterName": gift.contributor_name,
                "amount": gift.amount,
                "message": gift.message,
                "createdAt": gift.created_at,
            }
            for gift in recent
        ]

        return {
            "beneficiary": {
                "id": beneficiary.id,
                "firstName": beneficiary.first_name,
                "heroPhotoUrl": beneficiary.hero_photo_url,
            },
            "giftPage": {
                "title": gift_page.title,
                "description": gift_page.description,
                "goalAmount": gift_page.goal_amount,
                "theme": gift_page.theme,
                "isPublic": gift_page.is_public,
            },
            "totalRaised": sum(gift["amount"] for gift in recent_gifts),
            "recentGifts": recent_gifts,
            "slug": slug,
        }
