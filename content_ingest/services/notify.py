from __future__ import annotations

import logging
from typing import Protocol

import requests

from content_ingest.config.settings import Settings
from content_ingest.errors import NotificationDeliveryFailure

logger = logging.getLogger(__name__)

TELEGRAM_MAX_CHARS = 4096


class Notifier(Protocol):
    def send(self, text: str) -> bool: ...


class NullNotifier:
    """Used when no sink is configured."""

    def send(self, text: str) -> bool:
        return False


class _HttpNotifier:
    timeout_seconds = 30

    def __init__(self, session: requests.Session | None = None) -> None:
        self.http = session or requests

    def _deliver(self, text: str) -> None:
        raise NotImplementedError

    def send(self, text: str) -> bool:
        """Best effort: delivery problems are logged, never raised."""
        try:
            self._deliver(text)
        except (requests.RequestException, NotificationDeliveryFailure) as exc:
            logger.error("Notification failed: %s", exc)
            return False
        return True


class WebhookNotifier(_HttpNotifier):
    def __init__(self, url: str, session: requests.Session | None = None) -> None:
        super().__init__(session)
        self.url = url

    def _deliver(self, text: str) -> None:
        r = self.http.post(self.url, json={"text": text}, timeout=self.timeout_seconds)
        if not r.ok:
            raise NotificationDeliveryFailure(f"webhook answered {r.status_code}")


class TelegramNotifier(_HttpNotifier):
    def __init__(self, token: str, chat_id: str, session: requests.Session | None = None) -> None:
        super().__init__(session)
        self.token = token
        self.chat_id = chat_id

    def _deliver(self, text: str) -> None:
        url = f"https://api.telegram.org/bot{self.token}/sendMessage"
        # plain text: run reports carry raw error strings that MarkdownV2 would reject
        payload = {
            "chat_id": self.chat_id,
            "text": text[:TELEGRAM_MAX_CHARS],
            "disable_web_page_preview": True,
        }
        r = self.http.post(url, json=payload, timeout=self.timeout_seconds)
        if not r.ok:
            try:
                detail = r.json()
            except ValueError:
                detail = r.text
            raise NotificationDeliveryFailure(f"Telegram error: {detail}")


def build_notifier(settings: Settings, session: requests.Session | None = None) -> Notifier:
    if settings.notify_webhook_url:
        return WebhookNotifier(settings.notify_webhook_url, session=session)
    if settings.telegram_enabled and settings.telegram_bot_token and settings.telegram_chat_id:
        return TelegramNotifier(settings.telegram_bot_token, settings.telegram_chat_id, session=session)
    return NullNotifier()
