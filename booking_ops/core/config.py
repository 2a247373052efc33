from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    BUSINESS_TIMEZONE: str = "America/Toronto"

    SLOT_START: str = "08:00"
    SLOT_END: str = "18:00"
    SLOT_MINUTES: int = 30
    DEFAULT_PAGE_SIZE: int = 10

    DRAFT_TTL_MINUTES: int = 60
    REAPER_ENABLED: bool = True
    REAPER_INTERVAL_SECONDS: float = 300.0

    PAYMENT_API_KEY: str | None = None
    PAYMENT_BASE_URL: str = "https://api.stripe.com/v1"
    PAYMENT_RETURN_URL: str = "http://localhost:3000/dashboard/payments"
    PAYMENT_WEBHOOK_SECRET: str | None = None
    PAYMENT_CURRENCY: str = "cad"


settings = Settings()
