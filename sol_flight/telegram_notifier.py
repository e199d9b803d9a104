import html
import logging
from typing import Any, Dict, Optional

import requests

from .config import TelegramConfig
from .models import DistributionResult, lamports_to_sol

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"


class TelegramNotifier:
    """Sends distribution notifications to an admin Telegram chat, when configured."""

    def __init__(self, config: Optional[TelegramConfig] = None):
        config = config or TelegramConfig()
        self.bot_token = config.bot_token
        self.admin_chat_id = config.admin_chat_id
        self.enabled = bool(self.bot_token and self.admin_chat_id)

        if not self.enabled:
            logger.debug("Telegram notifications disabled: missing bot_token or admin_chat_id")
        else:
            logger.info(f"Telegram notifier initialized. Admin chat ID: {self.admin_chat_id}")

    def send_message(self, message: str) -> Dict[str, Any]:
        """Send a message to the admin Telegram chat.

        Failures are logged and reported in the returned dict, never raised.

        Args:
            message: The text message to send (HTML formatting allowed)

        Returns:
            Dict with status and details about the attempt
        """
        if not self.enabled:
            return {
                "success": False,
                "sent": False,
                "error": "Telegram notifications not configured (missing bot_token or admin_chat_id)",
                "message": message
            }

        payload = {
            "chat_id": self.admin_chat_id,
            "text": message,
            "parse_mode": "HTML",
            "disable_web_page_preview": True
        }

        try:
            response = requests.post(TELEGRAM_API_URL.format(token=self.bot_token), json=payload, timeout=10)
        except requests.exceptions.RequestException as e:
            error_msg = f"Error sending Telegram notification: {e}"
            logger.error(error_msg)
            return {"success": False, "sent": False, "error": error_msg, "message": message}

        if response.status_code == 200:
            logger.info("Telegram notification sent successfully")
            return {"success": True, "sent": True, "message": message}

        error_msg = (
            f"Failed to send Telegram notification. Status: {response.status_code}, "
            f"Response: {response.text}"
        )
        logger.error(error_msg)
        return {
            "success": False,
            "sent": False,
            "error": error_msg,
            "status_code": response.status_code,
            "message": message
        }

    def notify_distribution_start(self, recipient_count: int, amount_per_recipient, network: str) -> Dict[str, Any]:
        message = (
            f"🚀 <b>SOL DISTRIBUTION STARTED</b> ({network})\n\n"
            f"Sending {amount_per_recipient} SOL to {recipient_count} recipients."
        )
        return self.send_message(message)

    def notify_distribution_result(self, result: DistributionResult) -> Dict[str, Any]:
        status = "COMPLETED" if not result.failed else "COMPLETED WITH FAILURES"
        message = (
            f"✅ <b>SOL DISTRIBUTION {status}</b>\n\n"
            f"Successful: {result.successful}/{result.recipient_count}\n"
            f"Failed: {result.failed}/{result.recipient_count}\n"
            f"Transactions: {result.total_transactions}\n"
            f"Duration: {result.duration_seconds:.2f}s\n"
        )
        if result.spent_lamports is not None:
            message += f"Total spent: {lamports_to_sol(result.spent_lamports):.4f} SOL\n"
        return self.send_message(message)

    def notify_distribution_failed(self, error: str) -> Dict[str, Any]:
        return self.send_message(f"❌ <b>SOL DISTRIBUTION FAILED</b>\n\nError: {html.escape(error)}")
