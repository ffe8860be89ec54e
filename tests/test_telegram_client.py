"""Bot API client error mapping and best-effort notification delivery."""

from types import SimpleNamespace

import httpx
import pytest

from topup.common.errors import NotificationFailure
from topup.services.notification.service import NotificationService
from topup.services.notification.telegram import TelegramClient
from topup.services.notification.templates import ProductType


def _client(bot_api, token="test-token") -> TelegramClient:
    return TelegramClient(token, api_url="https://bot.test", transport=httpx.MockTransport(bot_api.handler))


def _payment():
    return SimpleNamespace(
        transaction_id="ABC123",
        amount=185,
        player_id="P1",
        product_name="240 Diamond",
        diamonds=240,
        verified_at=None,
    )


def test_call_returns_result(bot_api):
    client = _client(bot_api)

    result = client.send_message("1001", "hello")

    assert result["message_id"] == 101
    method, payload = bot_api.calls[0]
    assert method == "sendMessage"
    assert payload == {
        "chat_id": "1001",
        "text": "hello",
        "parse_mode": "HTML",
        "disable_web_page_preview": True,
    }


def test_not_ok_response_raises(bot_api):
    bot_api.failures["sendMessage"] = httpx.Response(
        400, json={"ok": False, "description": "Bad Request: chat not found"}
    )

    with pytest.raises(NotificationFailure, match="chat not found"):
        _client(bot_api).send_message("1001", "hello")


def test_non_json_server_error_raises(bot_api):
    bot_api.failures["getMe"] = httpx.Response(502, text="<html>Bad Gateway</html>")

    with pytest.raises(NotificationFailure, match="HTTP 502"):
        _client(bot_api).get_me()


def test_timeout_raises(bot_api):
    bot_api.failures["sendMessage"] = httpx.ReadTimeout

    with pytest.raises(NotificationFailure, match="ReadTimeout"):
        _client(bot_api).send_message("1001", "hello")


def test_missing_token_never_calls_api(bot_api):
    with pytest.raises(NotificationFailure):
        _client(bot_api, token="").get_me()
    assert bot_api.calls == []


def test_notify_attaches_delivery_buttons(notifier, bot_api):
    result = notifier.notify(_payment(), ProductType.DIAMOND)

    assert result.success
    assert result.message_ref == "101"
    payload = bot_api.sent()[0]
    assert payload["chat_id"] == "1001"
    assert "Ktp P1 240" in payload["text"]
    assert payload["reply_markup"]["inline_keyboard"][0][0]["callback_data"] == "deliver:ABC123"


def test_notify_failure_is_reported_not_raised(notifier, bot_api):
    bot_api.failures["sendMessage"] = httpx.Response(500, json={"ok": False, "description": "Internal"})

    result = notifier.notify(_payment(), ProductType.DIAMOND)

    assert not result.success
    assert result.error == "Internal"


def test_missing_admin_chat_is_a_failed_result(bot_api):
    service = NotificationService(_client(bot_api), admin_chat_id="")

    result = service.notify(_payment(), ProductType.DIAMOND)

    assert not result.success
    assert bot_api.calls == []


def test_edit_requires_message_ref(notifier, bot_api):
    payment = _payment()
    payment.notification_message_ref = None
    payment.status = "completed"

    assert not notifier.edit_payment_message(payment).success
    assert bot_api.calls == []
