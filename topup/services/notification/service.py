"""Best-effort operator notifications.

Every public method returns a `NotificationResult`; bot API failures are
logged and converted to `success=False`, never raised to the caller.
"""

from typing import Any, Callable

from pydantic import BaseModel

from topup.common.errors import NotificationFailure
from topup.common.logging import logger
from topup.common.metrics import notifications_total
from topup.services.notification import templates
from topup.services.notification.telegram import TelegramClient


class NotificationResult(BaseModel):
    success: bool
    message_ref: str | None = None
    error: str | None = None
    data: dict[str, Any] | None = None


class NotificationService:
    """Formats lifecycle messages and sends them to the operator chat."""

    def __init__(
        self,
        client: TelegramClient,
        admin_chat_id: str,
        code_prefix: str = "Ktp",
        display_timezone: str = "Asia/Dhaka",
        service_name: str = "topup-api",
    ) -> None:
        self.client = client
        self.admin_chat_id = admin_chat_id
        self.code_prefix = code_prefix
        self.display_timezone = display_timezone
        self.service_name = service_name

    def _deliver(self, template: str, send: Callable[[], Any]) -> NotificationResult:
        try:
            result = send()
        except NotificationFailure as exc:
            logger.warning("notification_failed template=%s error=%s", template, exc)
            notifications_total.labels(service=self.service_name, template=template, outcome="failed").inc()
            return NotificationResult(success=False, error=str(exc))
        notifications_total.labels(service=self.service_name, template=template, outcome="sent").inc()
        message_ref = None
        data = None
        if isinstance(result, dict):
            data = result
            if "message_id" in result:
                message_ref = str(result["message_id"])
        logger.info("notification_sent template=%s message_ref=%s", template, message_ref)
        return NotificationResult(success=True, message_ref=message_ref, data=data)

    def _send_to_admin(self, text: str, reply_markup: dict | None = None):
        if not self.admin_chat_id:
            raise NotificationFailure("operator chat id is not configured")
        return self.client.send_message(self.admin_chat_id, text, reply_markup)

    def redemption_code(self, payment, product_type: templates.ProductType | str) -> str:
        return templates.redemption_code(product_type, payment.player_id, payment.diamonds, self.code_prefix)

    def notify(self, payment, product_type: templates.ProductType | str) -> NotificationResult:
        """New verified payment, with the redemption code and delivery buttons."""

        code = self.redemption_code(payment, product_type)
        text = templates.payment_notification_text(payment, code, self.display_timezone)
        keyboard = templates.delivery_keyboard(payment.transaction_id)
        return self._deliver("payment", lambda: self._send_to_admin(text, keyboard))

    def send_delivery_confirmation(self, transaction_id: str, player_id: str, product_name: str) -> NotificationResult:
        text = templates.delivery_confirmation_text(transaction_id, player_id, product_name, self.display_timezone)
        return self._deliver("delivery", lambda: self._send_to_admin(text))

    def send_marked_delivered(self, payment) -> NotificationResult:
        text = templates.marked_delivered_text(payment, self.display_timezone)
        return self._deliver("marked_delivered", lambda: self._send_to_admin(text))

    def send_marked_failed(self, payment) -> NotificationResult:
        text = templates.marked_failed_text(payment, self.display_timezone)
        return self._deliver("marked_failed", lambda: self._send_to_admin(text))

    def edit_payment_message(self, payment) -> NotificationResult:
        """Rewrite the payment's original notification to show its final status."""

        if not payment.notification_message_ref:
            return NotificationResult(success=False, error="payment has no notification message")
        product_type = templates.classify_product(payment.product_name, payment.diamonds)
        code = self.redemption_code(payment, product_type)
        text = templates.final_status_text(payment, code, self.display_timezone)
        return self._deliver(
            "edit",
            lambda: self.client.edit_message_text(
                self.admin_chat_id,
                payment.notification_message_ref,
                text,
                {"inline_keyboard": []},
            ),
        )

    def reply(self, chat_id: str | int, text: str) -> NotificationResult:
        return self._deliver("reply", lambda: self.client.send_message(chat_id, text))

    def answer_callback(self, callback_query_id: str, text: str) -> NotificationResult:
        return self._deliver("callback", lambda: self.client.answer_callback_query(callback_query_id, text))

    def test_connection(self) -> NotificationResult:
        return self._deliver("get_me", self.client.get_me)

    def register_webhook(self, url: str) -> NotificationResult:
        return self._deliver("set_webhook", lambda: self.client.set_webhook(url))

    def webhook_info(self) -> NotificationResult:
        return self._deliver("webhook_info", self.client.get_webhook_info)
