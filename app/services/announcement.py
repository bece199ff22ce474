import logging
from typing import Optional

from fastapi import Request, status
from sqlalchemy.orm import Session

from app.exceptions import AppError, ConflictError, NotFoundError
from app.models.announcement import Announcement, AnnouncementStatus
from app.models.community import AnnouncementCommunity, Community
from app.schemas.announcement import AnnouncementCreate, AnnouncementUpdate
from app.services.ai_content import AnnouncementAIService
from app.services.audit_log_service import AuditLogService

logger = logging.getLogger(__name__)

SUBMITTABLE = (AnnouncementStatus.DRAFT, AnnouncementStatus.VALIDATION_FAILED)


class AnnouncementService:
    def __init__(self, db: Session):
        self.db = db

    def _get_owned(self, announcement_id: int, current_user: dict) -> Announcement:
        announcement = (
            self.db.query(Announcement)
            .filter(Announcement.id == announcement_id)
            .first()
        )
        # Other users' announcements are reported as missing
        if not announcement or (
            current_user.get("role") != "admin"
            and announcement.user_id != current_user.get("id")
        ):
            raise NotFoundError("Announcement not found")
        return announcement

    def _set_communities(self, announcement: Announcement, community_ids: list[int]):
        ids = set(community_ids)
        found = self.db.query(Community.id).filter(Community.id.in_(ids)).all() if ids else []
        missing = ids - {row[0] for row in found}
        if missing:
            raise NotFoundError(f"Communities not found: {sorted(missing)}")
        announcement.communities = [
            AnnouncementCommunity(community_id=cid) for cid in sorted(ids)
        ]

    def create_announcement(
        self,
        announcement_data: AnnouncementCreate,
        request: Request,
        current_user: dict,
    ) -> Announcement:
        new_announcement = Announcement(
            **announcement_data.model_dump(exclude={"community_ids"}),
            status=AnnouncementStatus.DRAFT,
            user_id=current_user.get("id"),
        )
        self._set_communities(new_announcement, announcement_data.community_ids)
        self.db.add(new_announcement)
        self.db.commit()
        self.db.refresh(new_announcement)
        AuditLogService().create_log(
            db=self.db,
            action="announcement.create",
            resource_type="announcement",
            resource_id=new_announcement.id,
            user_id=current_user.get("id"),
            status_code=status.HTTP_201_CREATED,
            request=request,
        )
        return new_announcement

    def get_announcements(
        self, current_user: dict, status_filter: Optional[AnnouncementStatus] = None
    ) -> list[Announcement]:
        query = self.db.query(Announcement)
        if current_user.get("role") != "admin":
            query = query.filter(Announcement.user_id == current_user.get("id"))
        if status_filter is not None:
            query = query.filter(Announcement.status == status_filter)
        return query.order_by(Announcement.id.desc()).all()

    def get_announcement(self, announcement_id: int, current_user: dict) -> Announcement:
        return self._get_owned(announcement_id, current_user)

    def update_announcement(
        self,
        announcement_id: int,
        announcement_data: AnnouncementUpdate,
        request: Request,
        current_user: dict,
    ) -> Announcement:
        announcement = self._get_owned(announcement_id, current_user)
        if announcement.status == AnnouncementStatus.PUBLISHED:
            raise ConflictError("Published announcements cannot be modified")

        changes = {}
        for field, value in announcement_data.model_dump(
            exclude_unset=True, exclude={"community_ids"}
        ).items():
            old = getattr(announcement, field)
            if old != value:
                changes[field] = {"old": old, "new": value}
                setattr(announcement, field, value)
        if announcement_data.community_ids is not None:
            self._set_communities(announcement, announcement_data.community_ids)

        # Edited content needs a fresh verdict
        announcement.status = AnnouncementStatus.DRAFT
        announcement.validation_result = None
        self.db.commit()
        self.db.refresh(announcement)
        AuditLogService().create_log(
            db=self.db,
            action="announcement.update",
            resource_type="announcement",
            resource_id=announcement_id,
            user_id=current_user.get("id"),
            changes=changes or None,
            status_code=status.HTTP_200_OK,
            request=request,
        )
        return announcement

    def delete_announcement(
        self, announcement_id: int, request: Request, current_user: dict
    ) -> None:
        announcement = self._get_owned(announcement_id, current_user)
        if announcement.status == AnnouncementStatus.PUBLISHED:
            raise ConflictError("Published announcements cannot be deleted")
        self.db.delete(announcement)
        self.db.commit()
        AuditLogService().create_log(
            db=self.db,
            action="announcement.delete",
            resource_type="announcement",
            resource_id=announcement_id,
            user_id=current_user.get("id"),
            status_code=status.HTTP_204_NO_CONTENT,
            request=request,
        )

    def submit_announcement(
        self,
        announcement_id: int,
        request: Request,
        current_user: dict,
        ai_service: AnnouncementAIService,
    ) -> Announcement:
        """Move to PENDING_VALIDATION, then publish or fail on the validator's verdict.

        If the validator itself is unavailable the announcement stays pending
        for manual review.
        """
        announcement = self._get_owned(announcement_id, current_user)
        if announcement.status not in SUBMITTABLE:
            raise ConflictError(
                f"Announcement in status {announcement.status.value} cannot be submitted"
            )
        announcement.status = AnnouncementStatus.PENDING_VALIDATION
        self.db.commit()

        try:
            verdict = ai_service.validate(announcement.title, announcement.content)
        except AppError as e:
            logger.warning(
                f"Validation unavailable for announcement {announcement_id}: {e.message}"
            )
            AuditLogService().create_log(
                db=self.db,
                action="announcement.submit",
                resource_type="announcement",
                resource_id=announcement_id,
                user_id=current_user.get("id"),
                status="failure",
                status_code=e.status_code,
                error_message=e.message,
                request=request,
            )
            self.db.refresh(announcement)
            return announcement

        announcement.validation_result = verdict.model_dump(by_alias=True)
        announcement.status = (
            AnnouncementStatus.PUBLISHED
            if verdict.is_valid
            else AnnouncementStatus.VALIDATION_FAILED
        )
        self.db.commit()
        self.db.refresh(announcement)
        AuditLogService().create_log(
            db=self.db,
            action="announcement.submit",
            resource_type="announcement",
            resource_id=announcement_id,
            user_id=current_user.get("id"),
            changes={"status": {"old": "PENDING_VALIDATION", "new": announcement.status.value}},
            status_code=status.HTTP_200_OK,
            request=request,
        )
        return announcement

    def review_announcement(
        self, announcement_id: int, approve: bool, request: Request, current_user: dict
    ) -> Announcement:
        announcement = self._get_owned(announcement_id, current_user)
        if announcement.status != AnnouncementStatus.PENDING_VALIDATION:
            raise ConflictError("Only pending announcements can be reviewed")
        announcement.status = (
            AnnouncementStatus.PUBLISHED if approve else AnnouncementStatus.VALIDATION_FAILED
        )
        self.db.commit()
        self.db.refresh(announcement)
        AuditLogService().create_log(
            db=self.db,
            action="announcement.approve" if approve else "announcement.reject",
            resource_type="announcement",
            resource_id=announcement_id,
            user_id=current_user.get("id"),
            changes={"status": {"old": "PENDING_VALIDATION", "new": announcement.status.value}},
            status_code=status.HTTP_200_OK,
            request=request,
        )
        return announcement
