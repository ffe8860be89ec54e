"""Thin synchronous client for the Telegram Bot HTTP API.

Every call either returns the `result` field of an `{ok: true}` response or
raises `NotificationFailure`.
"""

import httpx

from topup.common.errors import NotificationFailure
from topup.common.metrics import notification_latency_seconds


class TelegramClient:
    """POSTs JSON to `<api_url>/bot<token>/<method>` with a bounded timeout."""

    def __init__(
        self,
        token: str,
        api_url: str = "https://api.telegram.org",
        timeout: float = 5.0,
        transport: httpx.BaseTransport | None = None,
        service_name: str = "topup-api",
    ) -> None:
        self.token = token
        self.service_name = service_name
        self._http = httpx.Client(
            base_url=f"{api_url.rstrip('/')}/bot{token}/",
            timeout=timeout,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self.token)

    def call(self, method: str, payload: dict | None = None):
        """Invoke one bot API method and return its `result`."""

        if not self.configured:
            raise NotificationFailure("bot token is not configured")
        with notification_latency_seconds.labels(service=self.service_name, method=method).time():
            try:
                resp = self._http.post(method, json=payload or {})
            except httpx.HTTPError as exc:
                raise NotificationFailure(f"{method} transport error: {exc.__class__.__name__}: {exc}") from exc
        try:
            data = resp.json()
        except ValueError as exc:
            raise NotificationFailure(f"{method} returned HTTP {resp.status_code} with a non-JSON body") from exc
        if not isinstance(data, dict) or not data.get("ok"):
            description = data.get("description") if isinstance(data, dict) else None
            raise NotificationFailure(description or f"{method} returned HTTP {resp.status_code}")
        return data.get("result")

    def send_message(self, chat_id: str | int, text: str, reply_markup: dict | None = None) -> dict:
        payload = {
            "chat_id": chat_id,
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return self.call("sendMessage", payload)

    def edit_message_text(
        self, chat_id: str | int, message_id: str | int, text: str, reply_markup: dict | None = None
    ):
        payload = {
            "chat_id": chat_id,
            "message_id": int(message_id),
            "text": text,
            "parse_mode": "HTML",
            "disable_web_page_preview": True,
        }
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return self.call("editMessageText", payload)

    def answer_callback_query(self, callback_query_id: str, text: str, show_alert: bool = True):
        return self.call(
            "answerCallbackQuery",
            {"callback_query_id": callback_query_id, "text": text, "show_alert": show_alert},
        )

    def get_me(self) -> dict:
        return self.call("getMe")

    def set_webhook(self, url: str):
        return self.call("setWebhook", {"url": url})

    def get_webhook_info(self) -> dict:
        return self.call("getWebhookInfo")

    def close(self) -> None:
        self._http.close()
