from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import ConfigError
from app.models.platform_settings import PlatformSettings
from app.schemas.platform_settings import PlatformSettingsUpdate


class PlatformSettingsService:
    def __init__(self, db: Session):
        self.db = db

    def get(self) -> PlatformSettings:
        row = self.db.query(PlatformSettings).order_by(PlatformSettings.id).first()
        if row is None:
            row = PlatformSettings(platform_fee=0.0)
            self.db.add(row)
            self.db.commit()
            self.db.refresh(row)
        return row

    def update(self, data: PlatformSettingsUpdate) -> PlatformSettings:
        row = self.get()
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(row, field, value)
        self.db.commit()
        self.db.refresh(row)
        return row

    def bot_token(self) -> str:
        """Bot token from the environment, falling back to the stored settings row."""
        if settings.TELEGRAM_BOT_TOKEN:
            return settings.TELEGRAM_BOT_TOKEN
        row = self.db.query(PlatformSettings).order_by(PlatformSettings.id).first()
        if row is None or not row.telegram_bot_token:
            raise ConfigError("Telegram bot token not configured")
        return row.telegram_bot_token

    def webhook_secret(self) -> Optional[str]:
        if settings.TELEGRAM_WEBHOOK_SECRET:
            return settings.TELEGRAM_WEBHOOK_SECRET
        row = self.db.query(PlatformSettings).order_by(PlatformSettings.id).first()
        return row.telegram_webhook_secret if row else None

    @staticmethod
    def to_response(row: PlatformSettings) -> dict:
        return {
            "platform_fee": row.platform_fee,
            "telegram_bot_username": row.telegram_bot_username,
            "has_telegram_bot_token": bool(row.telegram_bot_token),
        }
