from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, ConfigDict
from datetime import datetime
from starlette import status

from app.dependencies import Permission, db_dependency, require_permission
from app.exceptions import NotFoundError
from app.models.user import User
from app.schemas.user import UserResponse
from app.services.audit_log_service import AuditLogService

router = APIRouter(prefix="/admin", tags=["admin"])

admin_dependency = Annotated[dict, Depends(require_permission(Permission.MANAGE_USERS))]


class AuditLogResponse(BaseModel):
    id: int
    user_id: Optional[int] = None
    action: str
    resource_type: str
    resource_id: Optional[int] = None
    status: str
    status_code: Optional[int] = None
    error_message: Optional[str] = None
    timestamp: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


@router.get("/users", response_model=List[UserResponse], status_code=status.HTTP_200_OK)
def get_all_users(user: admin_dependency, db: db_dependency):
    return db.query(User).order_by(User.id).all()


@router.patch("/users/{user_id}/active", status_code=status.HTTP_200_OK)
def set_user_active(
    user_id: int,
    is_active: bool,
    user: admin_dependency,
    db: db_dependency,
    http_req: Request,
):
    target: User = db.query(User).filter(User.id == user_id).first()
    if not target:
        raise NotFoundError("User not found")
    old = target.is_active
    target.is_active = is_active
    db.commit()
    AuditLogService().create_log(
        db=db,
        action="user.activate" if is_active else "user.suspend",
        resource_type="user",
        resource_id=user_id,
        user_id=user.get("id"),
        changes={"is_active": {"old": old, "new": is_active}},
        status_code=status.HTTP_200_OK,
        request=http_req,
    )
    return {"message": "User updated successfully", "is_active": is_active}


@router.get("/audit-logs", response_model=List[AuditLogResponse], status_code=status.HTTP_200_OK)
def get_audit_logs(
    user: admin_dependency,
    db: db_dependency,
    resource_type: Optional[str] = None,
    action: Optional[str] = None,
    limit: int = 100,
    skip: int = 0,
):
    return AuditLogService().get_logs(
        db, resource_type=resource_type, action=action, limit=limit, skip=skip
    )
