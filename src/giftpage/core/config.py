from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

class Settings(BaseSettings):

    STRIPE_SECRET_KEY: str
    STRIPE_WEBHOOK_SECRET: str
    STRIPE_SIGNATURE_TOLERANCE: int = 300

    APP_BASE_URL: str
    MIN_GIFT_AMOUNT: int = 200
    GIFT_CURRENCY: str = "cad"
    RECENT_GIFTS_LIMIT: int = 10
    REDELIVER_UNMATCHED_PAYMENTS: bool = False

    AWS_REGION: str = "ca-central-1"
    AWS_PROFILE: str | None = None
    DYNAMODB_TABLE_NAME: str


    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

@lru_cache()
def get_settings() -> Settings:
    return Settings()
