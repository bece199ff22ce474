import hmac
import logging
import re
import secrets
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.exceptions import (
    ConfigError,
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UpstreamError,
)
from app.models.announcement import Announcement, AnnouncementStatus
from app.models.bot_command import BotCommand
from app.models.community import AnnouncementCommunity, Community, PlatformType
from app.services.platform_settings import PlatformSettingsService
from app.services.telegram import TelegramClient

logger = logging.getLogger(__name__)

WEBHOOK_UPDATE_TYPES = ["message", "callback_query"]
WELCOME_MESSAGE = (
    "✅ Bot successfully connected to this community! "
    "Now you can receive approved announcements."
)

DEFAULT_BOT_COMMANDS = [
    {
        "command": "/start",
        "description": "Start interacting with the announcements bot",
        "response_template": "👋 Hi! I deliver approved announcements to this community.",
        "is_admin_only": False,
    },
    {
        "command": "/help",
        "description": "Show the list of available commands",
        "response_template": "Here is what I can do for you...",
        "is_admin_only": False,
    },
    {
        "command": "/my_communities",
        "description": "List all communities where the bot is added",
        "response_template": "📊 Checking communities where I am present...",
        "is_admin_only": True,
    },
    {
        "command": "/generate_invite",
        "description": "Generate a link to add the bot to a group",
        "response_template": "Generating invite link...",
        "is_admin_only": False,
    },
    {
        "command": "/community_stats",
        "description": "Get statistics about this community",
        "response_template": "Analyzing community statistics...",
        "is_admin_only": False,
    },
    {
        "command": "/member_count",
        "description": "Get the number of members in this community",
        "response_template": "Counting members...",
        "is_admin_only": False,
    },
]

_PROJECT_RE = re.compile(r"^https://([^./]+)\.")


def project_ref(base_url: str) -> str:
    match = _PROJECT_RE.match(base_url or "")
    if not match:
        raise ConfigError("Failed to determine project name from SUPABASE_URL")
    return match.group(1)


def webhook_url() -> str:
    """Public URL Telegram posts updates to, built from WEBHOOK_URL_TEMPLATE."""
    project = project_ref(settings.SUPABASE_URL)
    if "{base_url}" in settings.WEBHOOK_URL_TEMPLATE and not settings.PUBLIC_BASE_URL:
        raise ConfigError("PUBLIC_BASE_URL must be set to register the webhook")
    return settings.WEBHOOK_URL_TEMPLATE.format(
        project=project, base_url=settings.PUBLIC_BASE_URL
    )


def format_announcement_message(announcement: Announcement) -> str:
    message = f"📢 *{announcement.title}*\n\n{announcement.content}"
    if announcement.cta_text and announcement.cta_url:
        message += f"\n\n[{announcement.cta_text}]({announcement.cta_url})"
    return message


class BotService:
    def __init__(self, db: Session):
        self.db = db
        self.platform_settings = PlatformSettingsService(db)

    def _client(self, token: Optional[str] = None) -> TelegramClient:
        return TelegramClient(token or self.platform_settings.bot_token())

    def _upsert_command(self, definition: dict) -> BotCommand:
        cmd = (
            self.db.query(BotCommand)
            .filter(BotCommand.command == definition["command"])
            .first()
        )
        if cmd is None:
            cmd = BotCommand(**definition)
            self.db.add(cmd)
        else:
            cmd.description = definition["description"]
            cmd.response_template = definition["response_template"]
            cmd.is_admin_only = definition["is_admin_only"]
        self.db.commit()
        return cmd

    def sync_commands(self) -> dict:
        """Upsert the default commands locally, then register them with Telegram."""
        client = self._client()
        failed = []
        for definition in DEFAULT_BOT_COMMANDS:
            try:
                self._upsert_command(definition)
            except SQLAlchemyError:
                self.db.rollback()
                logger.error(
                    f"Failed to upsert bot command {definition['command']}",
                    exc_info=True,
                )
                failed.append(definition["command"])

        telegram_commands = [
            {"command": d["command"].lstrip("/"), "description": d["description"]}
            for d in DEFAULT_BOT_COMMANDS
        ]
        client.set_my_commands(telegram_commands)
        logger.info(f"Registered {len(telegram_commands)} commands with Telegram")
        return {
            "success": True,
            "message": "Bot commands registered successfully",
            "registered_commands": len(DEFAULT_BOT_COMMANDS),
            "failed_commands": failed,
        }

    def configure_webhook(self, token: Optional[str]) -> dict:
        if not token:
            raise InvalidInputError("Missing bot token")
        client = self._client(token)
        username = client.get_me().get("username")
        logger.info(f"Retrieved bot username: {username}")

        url = webhook_url()
        secret = settings.TELEGRAM_WEBHOOK_SECRET or secrets.token_urlsafe(32)
        result = client.set_webhook(url, WEBHOOK_UPDATE_TYPES, secret_token=secret)

        row = self.platform_settings.get()
        row.telegram_bot_token = token
        row.telegram_bot_username = username
        if not settings.TELEGRAM_WEBHOOK_SECRET:
            row.telegram_webhook_secret = secret
        self.db.commit()
        return {
            "success": True,
            "webhook": url,
            "result": result,
            "username": username,
        }

    def _telegram_community(self, community_id: Optional[int]) -> Community:
        if not community_id:
            raise InvalidInputError("Missing community ID")
        community = self.db.query(Community).filter(Community.id == community_id).first()
        if not community:
            raise NotFoundError(f"Community with ID {community_id} not found")
        if community.platform != PlatformType.TELEGRAM or not community.platform_id:
            raise InvalidInputError("Not a valid Telegram community or missing platform ID")
        return community

    def check_bot(self, community_id: Optional[int]) -> dict:
        community = self._telegram_community(community_id)
        client = self._client()
        bot = client.get_me()
        try:
            member = client.get_chat_member(community.platform_id, bot["id"])
        except UpstreamError as e:
            return {"bot_added": False, "error": e.message}
        status = member.get("status")
        return {
            "bot_added": True,
            "is_admin": status in ("administrator", "creator"),
            "status": status,
        }

    def refresh_community_stats(self, community_id: Optional[int]) -> dict:
        """Store the chat's current member count as the community's reach."""
        community = self._telegram_community(community_id)
        client = self._client()
        member_count = client.get_chat_member_count(community.platform_id)
        chat = client.get_chat(community.platform_id)
        community.reach = member_count
        self.db.commit()
        logger.info(f"Community {community.id} reach updated to {member_count}")
        return {
            "community_id": community.id,
            "member_count": member_count,
            "title": chat.get("title"),
            "chat_type": chat.get("type"),
        }

    def post_announcement(self, announcement_id: Optional[int]) -> dict:
        if not announcement_id:
            raise InvalidInputError("Missing announcement ID")
        announcement = (
            self.db.query(Announcement).filter(Announcement.id == announcement_id).first()
        )
        if not announcement:
            raise NotFoundError("Announcement not found")
        if announcement.status != AnnouncementStatus.PUBLISHED:
            raise ConflictError("Only published announcements can be posted")

        client = self._client()
        message = format_announcement_message(announcement)
        links = (
            self.db.query(AnnouncementCommunity)
            .join(Community, AnnouncementCommunity.community_id == Community.id)
            .filter(
                AnnouncementCommunity.announcement_id == announcement_id,
                Community.platform == PlatformType.TELEGRAM,
            )
            .all()
        )

        results = []
        for link in links:
            try:
                sent = client.send_message(link.community.platform_id, message)
            except UpstreamError as e:
                logger.error(f"Error posting to community {link.community_id}: {e.message}")
                link.delivered = False
                link.delivery_log = {"error": e.message}
                results.append(
                    {"community_id": link.community_id, "success": False, "error": e.message}
                )
                continue
            link.delivered = True
            link.delivery_log = sent
            results.append(
                {
                    "community_id": link.community_id,
                    "success": True,
                    "message_id": sent.get("message_id"),
                }
            )
        self.db.commit()
        return {"success": True, "results": results}

    def verify_webhook_secret(self, received: Optional[str]) -> None:
        expected = self.platform_settings.webhook_secret()
        if not expected or not received:
            raise ForbiddenError("Invalid webhook secret token")
        if not hmac.compare_digest(expected.encode(), received.encode()):
            raise ForbiddenError("Invalid webhook secret token")

    def handle_update(self, update: dict) -> dict:
        """Greet group chats that belong to a registered community."""
        message = update.get("message")
        if not message:
            return {"success": True}
        chat = message.get("chat") or {}
        if chat.get("type") not in ("group", "supergroup"):
            return {"success": True}

        chat_id = str(chat.get("id"))
        logger.info(f"Update from chat: {chat.get('title')} (ID: {chat_id})")
        matches = (
            self.db.query(Community)
            .filter(
                Community.platform == PlatformType.TELEGRAM,
                Community.platform_id == chat_id,
            )
            .count()
        )
        if matches:
            try:
                self._client().send_message(chat_id, WELCOME_MESSAGE)
            except UpstreamError as e:
                logger.warning(f"Could not send welcome message to {chat_id}: {e.message}")
        return {"success": True}
