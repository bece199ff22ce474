from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from supabase import Client

from app.dependencies import Permission, db_dependency, require_permission
from app.schemas.storage import BucketInitResponse
from app.services.audit_log_service import AuditLogService
from app.services.storage import StorageService, get_supabase_client

router = APIRouter(prefix="/storage", tags=["storage"])

admin_dependency = Annotated[dict, Depends(require_permission(Permission.MANAGE_STORAGE))]


@router.post(
    "/announcements-bucket",
    status_code=status.HTTP_200_OK,
    response_model=BucketInitResponse,
)
def create_announcements_bucket(
    db: db_dependency,
    current_user: admin_dependency,
    request: Request,
    client: Annotated[Client, Depends(get_supabase_client)],
):
    result = StorageService(client).ensure_announcements_bucket()
    AuditLogService().create_log(
        db=db,
        action="storage.ensure_bucket",
        resource_type="storage",
        user_id=current_user.get("id"),
        changes=None if result["bucket_exists"] else {"bucket": {"old": None, "new": "announcements"}},
        status_code=status.HTTP_200_OK,
        request=request,
    )
    return result
