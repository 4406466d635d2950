from pydantic import BaseModel


class Beneficiary(BaseModel):
    id: str
    first_name: str
    hero_photo_url: str | None = None


class GiftPage(BaseModel):
    title: str | None = None
    description: str | None = None
    goal_amount: int | None = None
    theme: str | None = None
    is_public: bool = False
