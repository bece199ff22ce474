from typing import Annotated, Any, Optional

from fastapi import APIRouter, Body, Depends, Header, Request, status

from app.dependencies import Permission, db_dependency, require_permission
from app.schemas.bot import (
    CheckBotRequest,
    CheckBotResponse,
    CommunityStatsResponse,
    CommandSyncResponse,
    ConfigureBotRequest,
    ConfigureBotResponse,
    PostAnnouncementRequest,
    PostAnnouncementResponse,
)
from app.services.audit_log_service import AuditLogService
from app.services.bot import BotService

router = APIRouter(prefix="/telegram", tags=["telegram"])

bot_admin_dependency = Annotated[dict, Depends(require_permission(Permission.MANAGE_BOT))]


@router.post(
    "/configure-bot",
    status_code=status.HTTP_200_OK,
    response_model=ConfigureBotResponse,
)
def configure_bot(
    body: ConfigureBotRequest,
    db: db_dependency,
    current_user: bot_admin_dependency,
    request: Request,
):
    result = BotService(db).configure_webhook(body.token)
    AuditLogService().create_log(
        db=db,
        action="bot.configure_webhook",
        resource_type="platform_settings",
        user_id=current_user.get("id"),
        status_code=status.HTTP_200_OK,
        request=request,
    )
    return result


@router.post(
    "/register-commands",
    status_code=status.HTTP_200_OK,
    response_model=CommandSyncResponse,
)
def register_commands(db: db_dependency, current_user: bot_admin_dependency, request: Request):
    result = BotService(db).sync_commands()
    AuditLogService().create_log(
        db=db,
        action="bot.sync_commands",
        resource_type="bot_command",
        user_id=current_user.get("id"),
        status="success" if not result["failed_commands"] else "failure",
        status_code=status.HTTP_200_OK,
        error_message=", ".join(result["failed_commands"]) or None,
        request=request,
    )
    return result


@router.post("/check-bot", status_code=status.HTTP_200_OK, response_model=CheckBotResponse)
def check_bot(body: CheckBotRequest, db: db_dependency, current_user: bot_admin_dependency):
    return BotService(db).check_bot(body.community_id)


@router.post(
    "/community-stats",
    status_code=status.HTTP_200_OK,
    response_model=CommunityStatsResponse,
)
def refresh_community_stats(
    body: CheckBotRequest,
    db: db_dependency,
    current_user: bot_admin_dependency,
    request: Request,
):
    result = BotService(db).refresh_community_stats(body.community_id)
    AuditLogService().create_log(
        db=db,
        action="community.refresh_reach",
        resource_type="community",
        resource_id=result["community_id"],
        user_id=current_user.get("id"),
        changes={"reach": {"new": result["member_count"]}},
        status_code=status.HTTP_200_OK,
        request=request,
    )
    return result


@router.post(
    "/post-announcement",
    status_code=status.HTTP_200_OK,
    response_model=PostAnnouncementResponse,
)
def post_announcement(
    body: PostAnnouncementRequest,
    db: db_dependency,
    current_user: bot_admin_dependency,
    request: Request,
):
    result = BotService(db).post_announcement(body.announcement_id)
    AuditLogService().create_log(
        db=db,
        action="announcement.post_telegram",
        resource_type="announcement",
        resource_id=body.announcement_id,
        user_id=current_user.get("id"),
        status_code=status.HTTP_200_OK,
        request=request,
    )
    return result


@router.post("/webhook", status_code=status.HTTP_200_OK)
def telegram_webhook(
    db: db_dependency,
    update: Annotated[dict[str, Any], Body()],
    x_telegram_bot_api_secret_token: Annotated[Optional[str], Header()] = None,
):
    service = BotService(db)
    service.verify_webhook_secret(x_telegram_bot_api_secret_token)
    return service.handle_update(update)
