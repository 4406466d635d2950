from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional
from datetime import datetime

class CheckoutSessionRequest(BaseModel):
    slug: str = Field(min_length=1)
    amount: int
    gifter_name: str = Field(alias="gifterName", min_length=1)
    gifter_email: EmailStr = Field(alias="gifterEmail")
    message: Optional[str] = None

class CheckoutSessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    url: Optional[str] = None

class WebhookAck(BaseModel):
    received: bool = True

class PublicBeneficiary(BaseModel):
    id: str
    firstName: str
    heroPhotoUrl: Optional[str] = None

class PublicGiftPage(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    goalAmount: Optional[int] = None
    theme: Optional[str] = None
    isPublic: bool

class PublicGift(BaseModel):
    id: str
    gifterName: str
    amount: int
    message: str
    createdAt: datetime

class PublicGiftPageResponse(BaseModel):
    beneficiary: PublicBeneficiary
    giftPage: PublicGiftPage
    totalRaised: int
    recentGifts: list[PublicGift]
    slug: str

class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
