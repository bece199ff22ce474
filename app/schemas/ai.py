from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnnouncementText(BaseModel):
    # Optional so that a missing field reaches the service and fails as invalid input
    title: Optional[str] = None
    content: Optional[str] = None


class ValidationResult(BaseModel):
    is_valid: bool = Field(..., alias="isValid")
    score: float = Field(..., ge=0.0, le=1.0)
    issues: List[str] = Field(default_factory=list)
    feedback: str = ""

    model_config = ConfigDict(populate_by_name=True)


class EnhancementResult(BaseModel):
    enhanced_title: str = Field(..., alias="enhancedTitle", min_length=1)
    enhanced_content: str = Field(..., alias="enhancedContent", min_length=1)
    improvements: List[str] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("improvements", mode="before")
    @classmethod
    def coerce_improvements(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(item) for item in v]
