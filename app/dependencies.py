from enum import Enum
from typing import Annotated, Callable

from fastapi import Depends, HTTPException
from starlette import status
from sqlalchemy.orm import Session

from app.database import SessionLocal
from app.models.user import User
from app.services.ai_content import AnnouncementAIService
from app.services.auth_service import get_current_user


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_ai_service() -> AnnouncementAIService:
    return AnnouncementAIService()


db_dependency = Annotated[Session, Depends(get_db)]
CurrentUser = Annotated[dict, Depends(get_current_user)]
ai_dependency = Annotated[AnnouncementAIService, Depends(get_ai_service)]


class Permission(str, Enum):
    CREATE_ANNOUNCEMENTS = "create:announcements"
    REVIEW_ANNOUNCEMENTS = "review:announcements"
    MANAGE_BOT = "manage:bot"
    MANAGE_SETTINGS = "manage:settings"
    MANAGE_STORAGE = "manage:storage"
    MANAGE_USERS = "manage:users"


# Map role strings (as embedded in JWT) to allowed permissions
ROLE_PERMISSIONS: dict[str, list[Permission]] = {
    "user": [Permission.CREATE_ANNOUNCEMENTS],
    "admin": [
        Permission.CREATE_ANNOUNCEMENTS,
        Permission.REVIEW_ANNOUNCEMENTS,
        Permission.MANAGE_BOT,
        Permission.MANAGE_SETTINGS,
        Permission.MANAGE_STORAGE,
        Permission.MANAGE_USERS,
    ],
}


def require_permission(required: Permission) -> Callable[..., dict]:
    def dependency(current_user: CurrentUser, db: db_dependency) -> dict:
        role = current_user.get("role")
        if role is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Could not authenticate user",
            )

        # Tokens outlive suspensions, so the account is re-checked on every call
        user = db.query(User).filter(User.id == current_user.get("id")).first()
        if user is None or not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Account is deactivated",
            )

        allowed = ROLE_PERMISSIONS.get(role, [])
        if required not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

        return current_user

    return dependency
