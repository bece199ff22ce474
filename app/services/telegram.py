"""
Telegram Bot API client.

Every method returns the `result` member of an ok response and raises
UpstreamError when the transport fails or Telegram reports `ok: false`.
"""

import logging
from typing import Any, Optional

import requests

from app.config import settings
from app.exceptions import UpstreamError

logger = logging.getLogger(__name__)


class TelegramClient:
    def __init__(self, token: str, base_url: Optional[str] = None, timeout: Optional[float] = None):
        self.token = token
        self.base_url = (base_url or settings.TELEGRAM_API_BASE).rstrip("/")
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    def call(self, method: str, payload: Optional[dict] = None) -> dict:
        """Invoke a Bot API method and return the full decoded response."""
        url = f"{self.base_url}/bot{self.token}/{method}"
        try:
            if payload is None:
                res = requests.get(url, timeout=self.timeout)
            else:
                res = requests.post(url, json=payload, timeout=self.timeout)
            data = res.json()
        except requests.RequestException as e:
            logger.error(f"Telegram {method} request failed: {e}")
            raise UpstreamError(f"Telegram {method} request failed") from e
        except ValueError as e:
            raise UpstreamError(f"Telegram {method} returned a non-JSON response") from e

        if not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else None
            raise UpstreamError(f"Telegram {method} failed: {description or 'unknown error'}")
        return data

    def get_me(self) -> dict:
        return self.call("getMe")["result"]

    def set_webhook(
        self, url: str, allowed_updates: list[str], secret_token: Optional[str] = None
    ) -> dict:
        payload = {"url": url, "allowed_updates": allowed_updates}
        if secret_token:
            payload["secret_token"] = secret_token
        return self.call("setWebhook", payload)

    def set_my_commands(self, commands: list[dict[str, str]]) -> dict:
        return self.call("setMyCommands", {"commands": commands})

    def send_message(self, chat_id: Any, text: str, parse_mode: str = "Markdown") -> dict:
        return self.call(
            "sendMessage",
            {
                "chat_id": chat_id,
                "text": text,
                "parse_mode": parse_mode,
                "disable_web_page_preview": False,
            },
        )["result"]

    def get_chat_member(self, chat_id: Any, user_id: int) -> dict:
        return self.call("getChatMember", {"chat_id": chat_id, "user_id": user_id})["result"]

    def get_chat(self, chat_id: Any) -> dict:
        return self.call("getChat", {"chat_id": chat_id})["result"]

    def get_chat_member_count(self, chat_id: Any) -> int:
        return self.call("getChatMemberCount", {"chat_id": chat_id})["result"]
