# core/notifications.py

"""
Post-commit notifications.

Guarded operations publish a NotificationEvent only after their primary
write succeeded. Publishing is fire-and-forget: every failure is logged
here and never reaches the operation's response.
"""

import requests
from typing import Optional
from pydantic import BaseModel

from core.config import settings
from core.errors import extract_supabase_error
from core.logging_config import logger
from core.utils import utc_now_iso
from models.enums import NotificationPriority


class NotificationEvent(BaseModel):
    recipient_id: str
    sender_id: Optional[str] = None
    type: str
    title: str
    message: str
    priority: NotificationPriority = NotificationPriority.normal
    related_entity_type: Optional[str] = None
    related_entity_id: Optional[str] = None


class NotificationPublisher:
    def __init__(self, client, webhook_url: Optional[str] = None):
        self.client = client
        self.webhook_url = webhook_url

    def publish(self, event: NotificationEvent) -> bool:
        """Returns True when the notification record was stored."""
        stored = self._store(event)
        self._send_webhook(event)
        return stored

    # -----------------------------------------------------
    # 🔔 notifications table
    # -----------------------------------------------------
    def _store(self, event: NotificationEvent) -> bool:
        record = event.model_dump(mode="json")
        record["is_read"] = False
        record["created_at"] = utc_now_iso()

        try:
            self.client.table("notifications").insert(record).execute()
            logger.info(f"Notification '{event.type}' queued for {event.recipient_id}")
            return True
        except Exception as e:
            logger.warning(
                f"Notification '{event.type}' for {event.recipient_id} failed: {extract_supabase_error(e)}"
            )
            return False

    # -----------------------------------------------------
    # 📨 Send webhook (Discord, Slack, etc.)
    # -----------------------------------------------------
    def _send_webhook(self, event: NotificationEvent):
        if not self.webhook_url:
            logger.debug("Notification webhook not configured, skipping.")
            return

        try:
            payload = {"content": f"[{event.priority}] {event.title}: {event.message}"}
            response = requests.post(self.webhook_url, json=payload, timeout=10)
            logger.info(f"Notification webhook sent (status {response.status_code})")
        except Exception as e:
            logger.warning(f"Notification webhook failed: {e}")


def get_notification_publisher(client) -> NotificationPublisher:
    return NotificationPublisher(client, webhook_url=settings.NOTIFICATION_WEBHOOK_URL)
