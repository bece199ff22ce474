from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Any, List, Optional

from app.models.announcement import AnnouncementStatus, PaymentStatus


class AnnouncementBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1, max_length=4000)
    cta_text: Optional[str] = Field(None, max_length=100)
    cta_url: Optional[str] = Field(None, max_length=500)
    media_url: Optional[str] = Field(None, max_length=500)


class AnnouncementCreate(AnnouncementBase):
    community_ids: List[int] = Field(default_factory=list)


class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    content: Optional[str] = Field(None, min_length=1, max_length=4000)
    cta_text: Optional[str] = Field(None, max_length=100)
    cta_url: Optional[str] = Field(None, max_length=500)
    media_url: Optional[str] = Field(None, max_length=500)
    community_ids: Optional[List[int]] = None

    @field_validator("title", "content")
    @classmethod
    def not_null(cls, v):
        # Omit a field to keep it; null would clear a required column
        if v is None:
            raise ValueError("must not be null")
        return v


class AnnouncementResponse(AnnouncementBase):
    id: int
    status: AnnouncementStatus
    payment_status: PaymentStatus
    validation_result: Optional[dict[str, Any]] = None
    impressions: Optional[int] = 0
    user_id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
