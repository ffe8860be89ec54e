"""Operator commands and inline button callbacks from the bot webhook."""

import pytest

from topup.services.notification.commands import STATUS_USAGE, TelegramCommandHandler
from topup.services.notification.templates import WELCOME_TEXT
from topup.services.payments.schemas import PaymentVerifyRequest

OPERATOR_CHAT = 555


@pytest.fixture
def handler(payment_service, notifier):
    return TelegramCommandHandler(payment_service, notifier)


@pytest.fixture
def submitted(payment_service):
    return payment_service.submit_payment(
        PaymentVerifyRequest(
            transaction_id="ABC123",
            amount=185,
            player_id="P1",
            product_id="p2",
            product_name="240 Diamond",
            diamonds=240,
        )
    )


def _message(text: str) -> dict:
    return {"update_id": 1, "message": {"message_id": 7, "chat": {"id": OPERATOR_CHAT}, "text": text}}


def _callback(data: str) -> dict:
    return {
        "update_id": 2,
        "callback_query": {"id": "cb-1", "from": {"id": 9, "username": "ops"}, "data": data},
    }


def _replies(bot_api) -> list[str]:
    return [p["text"] for p in bot_api.sent() if p["chat_id"] == OPERATOR_CHAT]


def test_start_sends_welcome(handler, bot_api):
    handler.handle_update(_message("/start"))

    assert _replies(bot_api) == [WELCOME_TEXT]


def test_test_command_sends_sample_and_confirms(handler, bot_api):
    handler.handle_update(_message("/test@relay_bot"))

    sample = [p for p in bot_api.sent() if p["chat_id"] == "1001"]
    assert len(sample) == 1
    assert "161" in sample[0]["text"]
    assert _replies(bot_api) == ["✅ Test notification sent!"]


def test_status_without_argument_replies_usage(handler, bot_api):
    handler.handle_update(_message("/status"))

    assert _replies(bot_api) == [STATUS_USAGE]


def test_status_unknown_transaction(handler, bot_api):
    handler.handle_update(_message("/status NOPE"))

    assert _replies(bot_api) == ["❌ Transaction ID not found: NOPE"]


def test_status_known_transaction(handler, bot_api, submitted):
    handler.handle_update(_message("/status abc123"))

    reply = _replies(bot_api)[0]
    assert "Transaction: ABC123" in reply
    assert "⏳ Status: verified" in reply


def test_plain_text_is_ignored(handler, bot_api):
    handler.handle_update(_message("hello"))

    assert bot_api.calls == []


def test_deliver_button_completes_payment(handler, bot_api, submitted, payment_service):
    handler.handle_update(_callback("deliver:ABC123"))

    assert payment_service.query_status("ABC123").status == "completed"
    answer = bot_api.sent("answerCallbackQuery")[0]
    assert answer["callback_query_id"] == "cb-1"
    assert "marked as delivered" in answer["text"]
    assert len(bot_api.sent("editMessageText")) == 1


def test_fail_button_fails_payment(handler, bot_api, submitted, payment_service):
    handler.handle_update(_callback("fail:ABC123"))

    payment = payment_service.query_status("ABC123")
    assert payment.status == "failed"
    assert payment.failed_reason == "Manual cancellation"
    assert "marked as failed" in bot_api.sent("answerCallbackQuery")[0]["text"]


def test_button_for_unknown_transaction(handler, bot_api):
    handler.handle_update(_callback("deliver:NOPE"))

    assert bot_api.sent("answerCallbackQuery")[0]["text"] == "Transaction not found: NOPE"


def test_malformed_update_is_swallowed(handler, bot_api):
    handler.handle_update({"update_id": 3, "message": {"text": "/start"}})

    assert bot_api.calls == []
