"""Shared fixtures: in-memory store, fake Bot API and an app wired to both."""

import json
import os

os.environ.setdefault("POSTGRES_DSN", "sqlite://")
os.environ.setdefault("TRACING_ENABLED", "false")

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from topup.common.db import Base
from topup.services.catalog import models as catalog_models  # noqa: F401
from topup.services.notification.service import NotificationService
from topup.services.notification.telegram import TelegramClient
from topup.services.payments import models as payment_models  # noqa: F401
from topup.services.payments.service import PaymentService
from topup.services.sms import models as sms_models  # noqa: F401

ADMIN_CHAT_ID = "1001"


class FakeBotApi:
    """Records Bot API calls and answers them like Telegram would.

    `failures` maps a method name to either an `httpx.Response` to return or an
    `httpx.TransportError` subclass to raise.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []
        self.failures: dict[str, object] = {}
        self._message_id = 100

    def handler(self, request: httpx.Request) -> httpx.Response:
        method = request.url.path.rsplit("/", 1)[-1]
        payload = json.loads(request.content or b"{}")
        self.calls.append((method, payload))

        failure = self.failures.get(method)
        if isinstance(failure, type) and issubclass(failure, httpx.TransportError):
            raise failure("simulated transport failure", request=request)
        if isinstance(failure, httpx.Response):
            return failure

        if method == "getMe":
            result = {"id": 42, "is_bot": True, "first_name": "Relay", "username": "relay_bot"}
        elif method in ("sendMessage", "editMessageText"):
            self._message_id += 1
            result = {"message_id": self._message_id, "chat": {"id": payload.get("chat_id")}}
        elif method == "getWebhookInfo":
            result = {"url": "", "pending_update_count": 0}
        else:
            result = True
        return httpx.Response(200, json={"ok": True, "result": result})

    def sent(self, method: str = "sendMessage") -> list[dict]:
        return [payload for name, payload in self.calls if name == method]


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def bot_api():
    return FakeBotApi()


@pytest.fixture
def notifier(bot_api):
    client = TelegramClient(
        "test-token",
        api_url="https://bot.test",
        timeout=1.0,
        transport=httpx.MockTransport(bot_api.handler),
    )
    yield NotificationService(client, ADMIN_CHAT_ID)
    client.close()


@pytest.fixture
def payment_service(session_factory, notifier):
    return PaymentService(session_factory, notifier, payment_number="01766325020")


@pytest.fixture
def client(session_factory, notifier):
    from topup.services.api_gateway.main import create_app

    with TestClient(create_app(session_factory=session_factory, notifier=notifier)) as test_client:
        yield test_client
