from pydantic_settings import BaseSettings
from pydantic import ConfigDict, field_validator


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./announcements.db"

    # JWT
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Supabase (storage + project ref)
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    # Public address of this deployment; Telegram posts updates to its /telegram/webhook
    PUBLIC_BASE_URL: str = ""
    WEBHOOK_URL_TEMPLATE: str = "{base_url}/telegram/webhook"

    # Gemini
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_API_BASE: str = "https://generativelanguage.googleapis.com/v1beta"

    # Telegram
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_API_BASE: str = "https://api.telegram.org"
    # Shared with Telegram via setWebhook(secret_token); generated when empty
    TELEGRAM_WEBHOOK_SECRET: str = ""

    HTTP_TIMEOUT_SECONDS: float = 30.0
    AI_RATE_LIMIT: str = "10/minute"
    LOG_LEVEL: str = "INFO"

    STRIPE_SECRET_KEY: str = ""
    STRIPE_SUCCESS_URL: str = "http://localhost:5173/payment/success"
    STRIPE_CANCEL_URL: str = "http://localhost:5173/payment/cancel"
    STRIPE_WEBHOOK_SECRET: str = ""

    @field_validator("GEMINI_API_BASE", "TELEGRAM_API_BASE", "SUPABASE_URL", "PUBLIC_BASE_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return (v or "").strip().rstrip("/")

    model_config = ConfigDict(env_file=".env", extra="ignore")


settings = Settings()
