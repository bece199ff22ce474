from typing import Optional, List
from fastapi import Request
from sqlalchemy.orm import Session
from sqlalchemy import desc
from app.models.audit_log import AuditLog


class AuditLogService:
    """Central service for creating and querying audit logs"""

    def create_log(
        self,
        db: Session,
        action: str,
        resource_type: str,
        resource_id: Optional[int] = None,
        user_id: Optional[int] = None,
        changes: Optional[dict] = None,
        status: str = "success",
        status_code: Optional[int] = None,
        error_message: Optional[str] = None,
        request: Optional[Request] = None,
    ) -> AuditLog:
        """Create an audit log entry, taking client details from `request` if given"""
        log = AuditLog(
            user_id=user_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            changes=changes,
            status=status,
            status_code=status_code,
            error_message=error_message,
        )
        if request is not None:
            log.ip_address = request.headers.get("x-forwarded-for") or (
                request.client.host if request.client else None
            )
            log.user_agent = request.headers.get("user-agent")
            log.request_method = request.method
            log.request_path = request.url.path

        db.add(log)
        try:
            db.commit()
            db.refresh(log)
        except Exception:
            db.rollback()
            raise
        return log

    def get_logs(
        self,
        db: Session,
        user_id: Optional[int] = None,
        resource_type: Optional[str] = None,
        action: Optional[str] = None,
        limit: int = 100,
        skip: int = 0,
    ) -> List[AuditLog]:
        """Query audit logs with filters, newest first"""
        query = db.query(AuditLog)

        if user_id is not None:
            query = query.filter(AuditLog.user_id == user_id)
        if resource_type is not None:
            query = query.filter(AuditLog.resource_type == resource_type)
        if action is not None:
            query = query.filter(AuditLog.action == action)

        return (
            query.order_by(desc(AuditLog.timestamp), desc(AuditLog.id))
            .offset(skip)
            .limit(max(1, min(limit, 1000)))
            .all()
        )
