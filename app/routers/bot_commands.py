from typing import Annotated, List

from fastapi import APIRouter, Depends, Request, status

from app.dependencies import Permission, db_dependency, require_permission
from app.exceptions import ConflictError, NotFoundError
from app.models.bot_command import BotCommand
from app.schemas.bot import BotCommandCreate, BotCommandResponse, BotCommandUpdate
from app.services.audit_log_service import AuditLogService

router = APIRouter(prefix="/bot-commands", tags=["bot_commands"])

admin_dependency = Annotated[dict, Depends(require_permission(Permission.MANAGE_BOT))]


def _get_command(db, command_id: int) -> BotCommand:
    command = db.query(BotCommand).filter(BotCommand.id == command_id).first()
    if not command:
        raise NotFoundError(f"Bot command with id {command_id} not found")
    return command


@router.get("/", status_code=status.HTTP_200_OK, response_model=List[BotCommandResponse])
def list_commands(db: db_dependency, current_user: admin_dependency):
    return db.query(BotCommand).order_by(BotCommand.command).all()


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=BotCommandResponse)
def create_command(
    body: BotCommandCreate, db: db_dependency, current_user: admin_dependency, request: Request
):
    if db.query(BotCommand).filter(BotCommand.command == body.command).first():
        raise ConflictError(f"Command {body.command} already exists")
    command = BotCommand(**body.model_dump())
    db.add(command)
    db.commit()
    db.refresh(command)
    AuditLogService().create_log(
        db=db,
        action="bot_command.create",
        resource_type="bot_command",
        resource_id=command.id,
        user_id=current_user.get("id"),
        status_code=status.HTTP_201_CREATED,
        request=request,
    )
    return command


@router.patch("/{command_id}", status_code=status.HTTP_200_OK, response_model=BotCommandResponse)
def update_command(
    command_id: int,
    body: BotCommandUpdate,
    db: db_dependency,
    current_user: admin_dependency,
    request: Request,
):
    command = _get_command(db, command_id)
    for field, value in body.model_dump(exclude_unset=True).items():
        setattr(command, field, value)
    db.commit()
    db.refresh(command)
    AuditLogService().create_log(
        db=db,
        action="bot_command.update",
        resource_type="bot_command",
        resource_id=command_id,
        user_id=current_user.get("id"),
        status_code=status.HTTP_200_OK,
        request=request,
    )
    return command


@router.delete("/{command_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_command(
    command_id: int, db: db_dependency, current_user: admin_dependency, request: Request
):
    command = _get_command(db, command_id)
    db.delete(command)
    db.commit()
    AuditLogService().create_log(
        db=db,
        action="bot_command.delete",
        resource_type="bot_command",
        resource_id=command_id,
        user_id=current_user.get("id"),
        status_code=status.HTTP_204_NO_CONTENT,
        request=request,
    )
