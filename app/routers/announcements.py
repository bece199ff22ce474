from typing import Annotated, List, Optional
from fastapi import APIRouter, Depends, Request, status
from app.dependencies import (
    Permission,
    ai_dependency,
    db_dependency,
    require_permission,
)
from app.models.announcement import AnnouncementStatus
from app.services.announcement import AnnouncementService
from app.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementUpdate,
    AnnouncementResponse,
)

router = APIRouter(prefix="/announcements", tags=["announcements"])

user_dependency = Annotated[
    dict, Depends(require_permission(Permission.CREATE_ANNOUNCEMENTS))
]
reviewer_dependency = Annotated[
    dict, Depends(require_permission(Permission.REVIEW_ANNOUNCEMENTS))
]


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=AnnouncementResponse)
def create_announcement(
    announcement_data: AnnouncementCreate,
    db: db_dependency,
    request: Request,
    current_user: user_dependency,
):
    return AnnouncementService(db).create_announcement(
        announcement_data, request, current_user
    )


@router.get("/", status_code=status.HTTP_200_OK, response_model=List[AnnouncementResponse])
def get_announcements(
    db: db_dependency,
    current_user: user_dependency,
    announcement_status: Optional[AnnouncementStatus] = None,
):
    return AnnouncementService(db).get_announcements(current_user, announcement_status)


@router.get("/{announcement_id}", status_code=status.HTTP_200_OK, response_model=AnnouncementResponse)
def get_announcement(announcement_id: int, db: db_dependency, current_user: user_dependency):
    return AnnouncementService(db).get_announcement(announcement_id, current_user)


@router.put("/{announcement_id}", status_code=status.HTTP_200_OK, response_model=AnnouncementResponse)
def update_announcement(
    announcement_id: int,
    announcement_data: AnnouncementUpdate,
    db: db_dependency,
    request: Request,
    current_user: user_dependency,
):
    return AnnouncementService(db).update_announcement(
        announcement_id, announcement_data, request, current_user
    )


@router.delete("/{announcement_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_announcement(
    announcement_id: int,
    db: db_dependency,
    request: Request,
    current_user: user_dependency,
):
    AnnouncementService(db).delete_announcement(announcement_id, request, current_user)


@router.post(
    "/{announcement_id}/submit",
    status_code=status.HTTP_200_OK,
    response_model=AnnouncementResponse,
)
def submit_announcement(
    announcement_id: int,
    db: db_dependency,
    request: Request,
    current_user: user_dependency,
    ai: ai_dependency,
):
    return AnnouncementService(db).submit_announcement(
        announcement_id, request, current_user, ai
    )


@router.post(
    "/{announcement_id}/approve",
    status_code=status.HTTP_200_OK,
    response_model=AnnouncementResponse,
)
def approve_announcement(
    announcement_id: int,
    db: db_dependency,
    request: Request,
    current_user: reviewer_dependency,
):
    return AnnouncementService(db).review_announcement(
        announcement_id, True, request, current_user
    )


@router.post(
    "/{announcement_id}/reject",
    status_code=status.HTTP_200_OK,
    response_model=AnnouncementResponse,
)
def reject_announcement(
    announcement_id: int,
    db: db_dependency,
    request: Request,
    current_user: reviewer_dependency,
):
    return AnnouncementService(db).review_announcement(
        announcement_id, False, request, current_user
    )
