from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum as SqlEnum
from sqlalchemy.sql import func
from app.database import Base
from enum import Enum


class UserRole(Enum):
    USER = "user"
    ADMIN = "admin"


class AccountType(Enum):
    # Businesses buy announcements, community accounts own the groups
    BUSINESS = "business"
    COMMUNITY = "community"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=True)
    role = Column(
        SqlEnum(
            UserRole,
            values_callable=lambda obj: [e.value for e in obj],
            native_enum=False,
        ),
        default=UserRole.USER,
    )
    account_type = Column(
        SqlEnum(
            AccountType,
            values_callable=lambda obj: [e.value for e in obj],
            native_enum=False,
        ),
        nullable=False,
        default=AccountType.BUSINESS,
    )
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
