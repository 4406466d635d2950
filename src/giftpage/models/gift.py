import uuid
from datetime import datetime, timezone
from pydantic import BaseModel, Field
from typing import Literal


GiftStatus = Literal["pending", "succeeded"]

PENDING: GiftStatus = "pending"
SUCCEEDED: GiftStatus = "succeeded"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GiftRecord(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    stripe_session_id: str
    stripe_payment_intent_id: str | None = None

    beneficiary_id: str
    slug: str | None = None
    contributor_name: str
    contributor_email: str
    message: str = ""

    amount: int = Field(ge=0)
    currency: str
    status: GiftStatus = PENDING

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def to_item(self) -> dict:
        # DynamoDB rejects NULL for index key attributes, so unset ids are omitted.
        return self.model_dump(mode="json", exclude_none=True)
