from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional


class PlatformSettingsUpdate(BaseModel):
    platform_fee: Optional[float] = Field(None, ge=0)
    telegram_bot_token: Optional[str] = None
    telegram_bot_username: Optional[str] = None

    @field_validator("platform_fee")
    @classmethod
    def fee_not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class PlatformSettingsResponse(BaseModel):
    platform_fee: float
    telegram_bot_username: Optional[str] = None
    # Never echo the token back; only whether one is stored
    has_telegram_bot_token: bool

    model_config = ConfigDict(from_attributes=True)
