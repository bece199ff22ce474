from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm

from app.config import settings
from app.dependencies import db_dependency
from app.exceptions import ConflictError
from app.limits import LOGIN_LIMIT, limiter
from app.models.user import User, UserRole
from app.schemas.user import Token, UserCreate, UserResponse
from app.services.audit_log_service import AuditLogService
from app.services.auth_service import (
    authenticate_user,
    create_access_token,
    get_password_hash,
)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
def create_user(db: db_dependency, user_request: UserCreate, request: Request):
    if db.query(User).filter(User.email == user_request.email).first():
        raise ConflictError("Email already registered")
    user_model = User(
        email=user_request.email,
        password_hash=get_password_hash(user_request.password),
        name=user_request.name,
        account_type=user_request.account_type,
        role=UserRole.USER,
        is_active=True,
    )
    db.add(user_model)
    db.commit()
    db.refresh(user_model)

    AuditLogService().create_log(
        db=db,
        action="user.create",
        resource_type="user",
        resource_id=user_model.id,
        user_id=user_model.id,
        status_code=status.HTTP_201_CREATED,
        request=request,
    )
    return user_model


@router.post("/login", status_code=status.HTTP_200_OK, response_model=Token)
@limiter.limit(LOGIN_LIMIT)
def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    db: db_dependency,
    request: Request,
):
    user = authenticate_user(form_data.username, form_data.password, db)
    if not user:
        AuditLogService().create_log(
            db=db,
            action="auth.login",
            resource_type="auth",
            status="failure",
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_message="invalid_credentials",
            request=request,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not authenticate user",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Account is deactivated, contact support to reactivate it",
        )
    token = create_access_token(
        user.email,
        user.id,
        user.role.value,
        timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )
    AuditLogService().create_log(
        db=db,
        action="auth.login",
        resource_type="auth",
        user_id=user.id,
        status_code=status.HTTP_200_OK,
        request=request,
    )
    return {"access_token": token, "token_type": "bearer"}
