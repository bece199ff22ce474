import enum
from sqlalchemy import (
    JSON,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    DateTime,
    Enum as SqlEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class AnnouncementStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING_VALIDATION = "PENDING_VALIDATION"
    VALIDATION_FAILED = "VALIDATION_FAILED"
    PUBLISHED = "PUBLISHED"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"


class Announcement(Base):
    __tablename__ = "announcements"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    cta_text = Column(String(100), nullable=True)
    cta_url = Column(String(500), nullable=True)
    media_url = Column(String(500), nullable=True)
    status = Column(
        SqlEnum(
            AnnouncementStatus,
            values_callable=lambda obj: [e.value for e in obj],
            native_enum=False,
        ),
        nullable=False,
        default=AnnouncementStatus.DRAFT,
        index=True,
    )
    payment_status = Column(
        SqlEnum(
            PaymentStatus,
            values_callable=lambda obj: [e.value for e in obj],
            native_enum=False,
        ),
        nullable=False,
        default=PaymentStatus.PENDING,
    )
    validation_result = Column(JSON, nullable=True)
    impressions = Column(Integer, default=0)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    communities = relationship(
        "AnnouncementCommunity",
        back_populates="announcement",
        cascade="all, delete-orphan",
    )
