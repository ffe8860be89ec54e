"""SMS inbox endpoints."""

from uuid import uuid4


def _receive(client, **body):
    payload = {"message": "You have received Tk 185.00. TrxID ABC123", **body}
    resp = client.post("/api/sms/receive", json=payload)
    assert resp.status_code == 201
    return resp.json()["data"]


def test_receive_applies_defaults(client):
    sms = _receive(client)

    assert sms["sender"] == "Unknown"
    assert sms["deviceId"] == "unknown-device"
    assert sms["status"] == "received"
    assert sms["forwarded"] is False


def test_receive_requires_message(client):
    assert client.post("/api/sms/receive", json={"sender": "bKash"}).status_code == 400
    assert client.post("/api/sms/receive", json={"message": ""}).status_code == 400


def test_list_paginates_and_filters(client):
    _receive(client, sender="bKash", deviceId="phone-1")
    _receive(client, sender="Nagad", deviceId="phone-1")
    _receive(client, sender="BKASH", deviceId="phone-2")

    page = client.get("/api/sms", params={"limit": 2}).json()
    by_sender = client.get("/api/sms", params={"sender": "bkash"}).json()
    by_device = client.get("/api/sms", params={"deviceId": "phone-2"}).json()

    assert page["total"] == 3
    assert page["pagination"] == {"page": 1, "limit": 2, "pages": 2, "hasNext": True, "hasPrev": False}
    assert len(page["data"]) == 2
    assert by_sender["total"] == 2
    assert [m["sender"] for m in by_device["data"]] == ["BKASH"]


def test_get_update_and_delete(client):
    sms_id = _receive(client, sender="bKash")["id"]

    fetched = client.get(f"/api/sms/{sms_id}")
    updated = client.patch(f"/api/sms/{sms_id}/status", json={"status": "forwarded", "forwarded": True, "notes": "ok"})
    deleted = client.delete(f"/api/sms/{sms_id}")

    assert fetched.json()["data"]["sender"] == "bKash"
    assert updated.json()["data"]["forwarded"] is True
    assert updated.json()["data"]["forwardedAt"] is not None
    assert updated.json()["data"]["notes"] == "ok"
    assert deleted.json()["success"] is True
    assert client.get(f"/api/sms/{sms_id}").status_code == 404


def test_invalid_and_unknown_ids(client):
    assert client.get("/api/sms/not-a-uuid").status_code == 400
    assert client.get(f"/api/sms/{uuid4()}").status_code == 404
    assert client.patch("/api/sms/not-a-uuid/status", json={"status": "failed"}).status_code == 400


def test_stats_overview(client):
    first = _receive(client, sender="bKash", deviceId="phone-1")["id"]
    second = _receive(client, sender="bKash", deviceId="phone-1")["id"]
    _receive(client, sender="Nagad", deviceId="phone-2")
    client.patch(f"/api/sms/{first}/status", json={"forwarded": True, "status": "forwarded"})
    client.patch(f"/api/sms/{second}/status", json={"status": "failed"})

    stats = client.get("/api/sms/stats/overview").json()["data"]

    assert stats["overview"] == {"total": 3, "forwarded": 1, "failed": 1, "pending": 1}
    assert stats["timeBased"]["last24Hours"] == 3
    assert sum(h["count"] for h in stats["timeBased"]["hourlyDistribution"]) == 3
    assert stats["byDevice"][0]["deviceId"] == "phone-1"
    assert stats["byDevice"][0]["count"] == 2
    assert stats["bySender"][0]["sender"] == "bKash"


def test_search(client):
    _receive(client, sender="bKash", message="Cash In Tk 500 TrxID QWE777")
    _receive(client, sender="Nagad", message="Your OTP is 1234")

    found = client.get("/api/sms/search/text", params={"q": "qwe777"}).json()
    by_sender = client.get("/api/sms/search/text", params={"q": "nagad"}).json()

    assert found["count"] == 1
    assert by_sender["data"][0]["sender"] == "Nagad"
    assert client.get("/api/sms/search/text", params={"q": "a"}).status_code == 400


def test_health_test_receive_and_clear(client):
    test_sms = client.post("/api/sms/test/receive")
    health = client.get("/api/sms/health/check").json()["data"]
    cleared = client.delete("/api/sms/admin/clear-all").json()["data"]

    assert test_sms.status_code == 201
    assert test_sms.json()["data"]["deviceId"] == "test-device"
    assert health["totalMessages"] == 1
    assert health["latestMessage"] is not None
    assert cleared == {"deletedCount": 1}
    assert client.get("/api/sms").json()["total"] == 0
