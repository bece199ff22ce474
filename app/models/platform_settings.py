from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.sql import func
from app.database import Base


class PlatformSettings(Base):
    """Single-row table holding platform-wide configuration."""

    __tablename__ = "platform_settings"
    id = Column(Integer, primary_key=True)
    platform_fee = Column(Float, nullable=False, default=0.0)
    telegram_bot_token = Column(String, nullable=True)
    telegram_bot_username = Column(String, nullable=True)
    telegram_webhook_secret = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
