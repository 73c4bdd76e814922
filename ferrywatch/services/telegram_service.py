"""
Telegram alert service
Operational alerts and prediction feedback go to a single bot chat
"""
import logging
import time
from typing import Dict, Optional

import requests

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Send messages through the Telegram Bot API"""

    API_URL = "https://api.telegram.org/bot{token}/sendMessage"
    DEDUP_INTERVAL = 60  # seconds

    def __init__(self, bot_token: Optional[str], chat_id: Optional[str]):
        self.bot_token = bot_token
        self.chat_id = chat_id
        self.recent_messages: Dict[str, float] = {}

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def send_message(self, text: str) -> bool:
        """Post a message; True when Telegram accepted it"""
        if not self.is_configured:
            logger.debug("Telegram not configured, message dropped")
            return False

        try:
            response = requests.post(
                self.API_URL.format(token=self.bot_token),
                json={"chat_id": self.chat_id, "text": text},
                timeout=10,
            )
            response.raise_for_status()
            return True
        except requests.exceptions.RequestException as e:
            logger.error(f"Telegram send error: {e}")
            return False

    def send_alert(self, message: str) -> bool:
        """Like send_message, but identical alerts within DEDUP_INTERVAL are sent once"""
        if not self.is_configured:
            return False

        now = time.monotonic()
        self.recent_messages = {
            text: sent for text, sent in self.recent_messages.items() if now - sent < self.DEDUP_INTERVAL
        }
        last_sent = self.recent_messages.get(message)
        if last_sent is not None and now - last_sent < self.DEDUP_INTERVAL:
            return False
        self.recent_messages[message] = now

        return self.send_message(message)
