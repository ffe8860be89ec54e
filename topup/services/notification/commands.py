"""Operator commands arriving through the bot webhook.

Supports `/start`, `/test`, `/status <transactionId>` and the inline
"mark delivered" / "mark failed" buttons attached to payment notifications.
"""

from topup.common.errors import NotFound
from topup.common.logging import logger
from topup.services.notification import templates
from topup.services.notification.service import NotificationService
from topup.services.payments.service import PaymentService, build_sample_payment

STATUS_USAGE = "Usage: <code>/status TRANSACTION_ID</code>"


class TelegramCommandHandler:
    def __init__(self, payments: PaymentService, notifier: NotificationService) -> None:
        self.payments = payments
        self.notifier = notifier

    def handle_update(self, update: dict) -> None:
        """Process one webhook update. Failures are logged, never raised to Telegram."""

        try:
            if "callback_query" in update:
                self._handle_callback(update["callback_query"])
            elif "message" in update:
                self._handle_message(update["message"])
        except Exception as exc:
            logger.exception("webhook_update_failed update_id=%s error=%s", update.get("update_id"), exc)

    def _handle_message(self, message: dict) -> None:
        text = (message.get("text") or "").strip()
        chat_id = message["chat"]["id"]
        if not text.startswith("/"):
            return
        parts = text.split()
        command = parts[0].split("@")[0].lower()
        logger.info("bot_command command=%s chat_id=%s", command, chat_id)

        if command == "/start":
            self.notifier.reply(chat_id, templates.WELCOME_TEXT)
        elif command == "/test":
            sample = build_sample_payment(templates.ProductType.WEEKLY.value)
            self.notifier.notify(sample, templates.ProductType.WEEKLY)
            self.notifier.reply(chat_id, "✅ Test notification sent!")
        elif command == "/status":
            if len(parts) < 2:
                self.notifier.reply(chat_id, STATUS_USAGE)
                return
            try:
                payment = self.payments.query_status(parts[1])
            except NotFound:
                self.notifier.reply(chat_id, templates.not_found_text(parts[1]))
                return
            self.notifier.reply(chat_id, templates.status_summary_text(payment, self.notifier.display_timezone))

    def _handle_callback(self, callback: dict) -> None:
        callback_id = callback["id"]
        action, _, transaction_id = (callback.get("data") or "").partition(":")
        operator = (callback.get("from") or {}).get("username")
        logger.info("bot_callback action=%s transaction_id=%s operator=%s", action, transaction_id, operator)

        try:
            if action == templates.DELIVER_ACTION and transaction_id:
                self.payments.mark_completed_by_transaction_id(transaction_id, delivered_by=operator)
                answer = f"✅ {transaction_id} marked as delivered"
            elif action == templates.FAIL_ACTION and transaction_id:
                self.payments.mark_failed(transaction_id)
                answer = f"❌ {transaction_id} marked as failed"
            else:
                answer = "Unknown action"
        except NotFound:
            answer = f"Transaction not found: {transaction_id}"
        self.notifier.answer_callback(callback_id, answer)
