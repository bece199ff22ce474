from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.sql import func
from app.database import Base


class BotCommand(Base):
    __tablename__ = "bot_commands"
    id = Column(Integer, primary_key=True, index=True)
    command = Column(String(64), unique=True, nullable=False, index=True)
    description = Column(String(256), nullable=False)
    response_template = Column(Text, nullable=False)
    is_admin_only = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
