from pydantic import BaseModel, EmailStr, ConfigDict, Field
from datetime import datetime

from app.models.user import AccountType, UserRole


class UserBase(BaseModel):
    email: EmailStr
    name: str | None = Field(None, max_length=120)
    account_type: AccountType = AccountType.BUSINESS


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)


class UserResponse(UserBase):
    id: int
    role: UserRole
    is_active: bool
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class Token(BaseModel):
    access_token: str
    token_type: str
