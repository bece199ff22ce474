from sqlalchemy import (
    JSON,
    Column,
    ForeignKey,
    Integer,
    String,
    DateTime,
    Text,
)
from sqlalchemy.sql import func
from app.database import Base


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)

    # e.g. "announcement.submit", "bot.sync_commands", "storage.ensure_bucket"
    action = Column(String, nullable=False, index=True)
    resource_type = Column(String, nullable=False, index=True)
    resource_id = Column(Integer, nullable=True, index=True)
    changes = Column(JSON, nullable=True)  # {field: {"old": value, "new": value}}

    request_method = Column(String, nullable=True)
    request_path = Column(String, nullable=True)

    status = Column(String, nullable=False, index=True)  # "success" | "failure"
    status_code = Column(Integer, nullable=True)
    error_message = Column(Text, nullable=True)

    timestamp = Column(DateTime(timezone=True), server_default=func.now(), index=True)
