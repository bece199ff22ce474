import enum
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Enum as SqlEnum,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base


class PlatformType(str, enum.Enum):
    TELEGRAM = "TELEGRAM"
    DISCORD = "DISCORD"
    WHATSAPP = "WHATSAPP"


class Community(Base):
    __tablename__ = "communities"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    platform = Column(
        SqlEnum(
            PlatformType,
            values_callable=lambda obj: [e.value for e in obj],
            native_enum=False,
        ),
        nullable=False,
    )
    platform_id = Column(String, nullable=True, index=True)  # chat id on the platform
    price_per_announcement = Column(Float, nullable=False, default=0.0)
    reach = Column(Integer, nullable=True)
    approval_status = Column(String, nullable=False, default="pending")
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class AnnouncementCommunity(Base):
    __tablename__ = "announcement_communities"
    id = Column(Integer, primary_key=True)
    announcement_id = Column(
        Integer, ForeignKey("announcements.id", ondelete="CASCADE"), nullable=False
    )
    community_id = Column(
        Integer, ForeignKey("communities.id", ondelete="CASCADE"), nullable=False
    )
    delivered = Column(Boolean, default=False)
    delivery_log = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    announcement = relationship("Announcement", back_populates="communities")
    community = relationship("Community")
