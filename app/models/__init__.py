# Import all models so they're registered with Base.metadata
from app.models.user import User
from app.models.announcement import Announcement
from app.models.community import Community, AnnouncementCommunity
from app.models.bot_command import BotCommand
from app.models.platform_settings import PlatformSettings
from app.models.audit_log import AuditLog

__all__ = [
    "User",
    "Announcement",
    "Community",
    "AnnouncementCommunity",
    "BotCommand",
    "PlatformSettings",
    "AuditLog",
]
