from typing import Annotated

from fastapi import APIRouter, Depends, Request, status

from app.dependencies import Permission, db_dependency, require_permission
from app.schemas.platform_settings import PlatformSettingsResponse, PlatformSettingsUpdate
from app.services.audit_log_service import AuditLogService
from app.services.platform_settings import PlatformSettingsService

router = APIRouter(prefix="/settings", tags=["settings"])

admin_dependency = Annotated[dict, Depends(require_permission(Permission.MANAGE_SETTINGS))]


@router.get("/", status_code=status.HTTP_200_OK, response_model=PlatformSettingsResponse)
def get_settings(db: db_dependency, current_user: admin_dependency):
    service = PlatformSettingsService(db)
    return service.to_response(service.get())


@router.patch("/", status_code=status.HTTP_200_OK, response_model=PlatformSettingsResponse)
def update_settings(
    body: PlatformSettingsUpdate,
    db: db_dependency,
    current_user: admin_dependency,
    request: Request,
):
    service = PlatformSettingsService(db)
    row = service.update(body)
    AuditLogService().create_log(
        db=db,
        action="settings.update",
        resource_type="platform_settings",
        resource_id=row.id,
        user_id=current_user.get("id"),
        # Field names only; the token value must not land in the audit trail
        changes={field: {"updated": True} for field in body.model_dump(exclude_unset=True)},
        status_code=status.HTTP_200_OK,
        request=request,
    )
    return service.to_response(row)
