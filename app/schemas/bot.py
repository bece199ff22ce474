from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Any, List, Optional


class BotCommandBase(BaseModel):
    command: str = Field(..., pattern=r"^/[a-z0-9_]{1,32}$")
    description: str = Field(..., min_length=1, max_length=256)
    response_template: str = Field(..., min_length=1)
    is_admin_only: bool = False


class BotCommandCreate(BotCommandBase):
    pass


class BotCommandUpdate(BaseModel):
    description: Optional[str] = Field(None, min_length=1, max_length=256)
    response_template: Optional[str] = Field(None, min_length=1)
    is_admin_only: Optional[bool] = None

    @field_validator("description", "response_template", "is_admin_only")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("must not be null")
        return v


class BotCommandResponse(BotCommandBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ConfigureBotRequest(BaseModel):
    token: Optional[str] = None


class ConfigureBotResponse(BaseModel):
    success: bool
    webhook: str
    result: dict[str, Any]
    username: Optional[str] = None


class CommandSyncResponse(BaseModel):
    success: bool
    message: str
    registered_commands: int = Field(..., alias="registeredCommands")
    failed_commands: List[str] = Field(default_factory=list, alias="failedCommands")

    model_config = ConfigDict(populate_by_name=True)


class CheckBotRequest(BaseModel):
    community_id: Optional[int] = Field(None, alias="communityId")

    model_config = ConfigDict(populate_by_name=True)


class CheckBotResponse(BaseModel):
    bot_added: bool = Field(..., alias="botAdded")
    is_admin: bool = Field(False, alias="isAdmin")
    status: Optional[str] = None
    error: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True)


class CommunityStatsResponse(BaseModel):
    community_id: int = Field(..., alias="communityId")
    member_count: int = Field(..., alias="memberCount")
    title: Optional[str] = None
    chat_type: Optional[str] = Field(None, alias="chatType")

    model_config = ConfigDict(populate_by_name=True)


class PostAnnouncementRequest(BaseModel):
    announcement_id: Optional[int] = Field(None, alias="announcementId")

    model_config = ConfigDict(populate_by_name=True)


class DeliveryResult(BaseModel):
    community_id: int
    success: bool
    message_id: Optional[int] = None
    error: Optional[str] = None


class PostAnnouncementResponse(BaseModel):
    success: bool
    results: List[DeliveryResult]
