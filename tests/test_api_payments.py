"""HTTP surface for payments, the bot webhook and service probes."""

import httpx

VERIFY_BODY = {
    "transactionId": "ABC123",
    "amount": 185,
    "playerId": "P1",
    "productId": "p2",
    "productName": "240 Diamond",
    "diamonds": 240,
}


def _verify(client, **overrides):
    return client.post("/api/payments/verify", json={**VERIFY_BODY, **overrides})


def test_verify_payment(client, bot_api):
    resp = _verify(client)

    assert resp.status_code == 201
    body = resp.json()
    assert body["success"] is True
    assert body["message"] == "Payment verified successfully! Telegram notification sent."
    data = body["data"]
    assert data["transactionId"] == "ABC123"
    assert data["status"] == "verified"
    assert data["productType"] == "diamond"
    assert data["notificationSent"] is True
    assert data["notificationError"] is None
    assert len(bot_api.sent()) == 1


def test_verify_duplicate_is_conflict(client):
    _verify(client, transactionId="abc123")

    resp = _verify(client)

    assert resp.status_code == 409
    assert resp.json() == {"success": False, "message": "Transaction ID already exists: ABC123"}


def test_verify_missing_fields_is_bad_request(client, bot_api):
    resp = client.post("/api/payments/verify", json={"amount": 185})

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    fields = {e["field"] for e in body["errors"]}
    assert {"transactionId", "playerId", "productId"} <= fields
    assert bot_api.calls == []


def test_verify_rejects_non_positive_amount(client):
    assert _verify(client, amount=0).status_code == 400
    assert _verify(client, transactionId="   ").status_code == 400


def test_verify_survives_notification_outage(client, bot_api):
    bot_api.failures["sendMessage"] = httpx.Response(503, text="unavailable")

    resp = _verify(client)

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["status"] == "verified"
    assert data["notificationSent"] is False
    assert data["notificationError"]


def test_status_lookup_and_list(client):
    _verify(client)
    _verify(client, transactionId="XYZ789")

    status = client.get("/api/payments/status/abc123")
    listing = client.get("/api/payments", params={"limit": 1})

    assert status.status_code == 200
    assert status.json()["data"]["transactionId"] == "ABC123"
    assert listing.json()["count"] == 1
    assert listing.json()["data"][0]["transactionId"] == "XYZ789"


def test_status_unknown_is_not_found(client):
    resp = client.get("/api/payments/status/NOPE")

    assert resp.status_code == 404
    assert resp.json()["success"] is False


def test_deliver_by_payment_id(client, bot_api):
    payment_id = _verify(client).json()["data"]["paymentId"]

    resp = client.post(f"/api/payments/{payment_id}/deliver", json={"notes": "done", "deliveredBy": "ops"})

    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == "completed"
    assert resp.json()["data"]["completedAt"] is not None
    assert client.post("/api/payments/missing/deliver").status_code == 404


def test_mark_endpoints(client):
    _verify(client)

    delivered = client.post("/api/telegram/mark-delivered/abc123")
    failed = client.post("/api/telegram/mark-failed/ABC123", json={"reason": "Refunded"})

    assert delivered.json()["data"]["transactionId"] == "ABC123"
    assert failed.json()["data"]["reason"] == "Refunded"
    assert client.get("/api/payments/status/ABC123").json()["data"]["status"] == "failed"
    assert client.post("/api/telegram/mark-failed/NOPE").status_code == 404


def test_test_telegram_sends_one_sample_per_type(client, bot_api):
    resp = client.get("/api/payments/test-telegram")

    body = resp.json()
    assert body["success"] is True
    assert body["data"]["botUsername"] == "relay_bot"
    assert body["data"]["testResults"] == {"weekly": True, "monthly": True, "diamond": True}
    assert len(bot_api.sent()) == 3


def test_test_telegram_reports_bad_token(client, bot_api):
    bot_api.failures["getMe"] = httpx.Response(401, json={"ok": False, "description": "Unauthorized"})

    resp = client.get("/api/payments/test-telegram")

    assert resp.status_code == 400
    assert resp.json()["error"] == "Unauthorized"
    assert bot_api.sent() == []


def test_test_format(client):
    resp = client.post("/api/payments/test-format", json={"productType": "monthly"})

    assert resp.json()["data"]["productType"] == "monthly"
    assert resp.json()["data"]["redemptionCode"].endswith(" 800")
    assert client.post("/api/payments/test-format", json={}).status_code == 400


def test_webhook_always_acknowledges(client, bot_api):
    bad = client.post("/api/telegram/webhook", content=b"not json", headers={"content-type": "application/json"})
    not_utf8 = client.post(
        "/api/telegram/webhook", content=b'{"a": "\xff\xfe"}', headers={"content-type": "application/json"}
    )
    start = client.post("/api/telegram/webhook", json={"update_id": 1, "message": {"chat": {"id": 5}, "text": "/start"}})
    broken = client.post("/api/telegram/webhook", json={"update_id": 2, "callback_query": {"data": "deliver:X"}})

    assert bad.json() == {"ok": True}
    assert not_utf8.status_code == 200
    assert not_utf8.json() == {"ok": True}
    assert start.json() == {"ok": True}
    assert broken.json() == {"ok": True}
    assert len(bot_api.sent()) == 1


def test_set_webhook_uses_request_base_url(client, bot_api):
    resp = client.post("/api/telegram/set-webhook")

    assert resp.json()["data"]["url"] == "http://testserver/api/telegram/webhook"
    assert bot_api.sent("setWebhook") == [{"url": "http://testserver/api/telegram/webhook"}]


def test_probes_and_unknown_route(client):
    health = client.get("/api/health")
    db = client.get("/health/db")
    metrics = client.get("/metrics")
    missing = client.get("/api/nowhere")

    assert health.json()["status"] == "OK"
    assert health.headers["x-trace-id"]
    assert db.json()["success"] is True
    assert "payment_submissions_total" in metrics.text
    assert missing.status_code == 404
    assert missing.json()["path"] == "/api/nowhere"
    assert "POST /api/payments/verify" in missing.json()["availableEndpoints"]
