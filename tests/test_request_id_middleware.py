from __future__ import annotations


def test_preserves_incoming_request_id_header(client):
    incoming_id = "test-request-id-123"
    resp = client.get("/health", headers={"X-Request-ID": incoming_id})

    assert resp.status_code == 200
    assert resp.headers.get("X-Request-ID") == incoming_id


def test_generates_request_id_when_missing(client):
    resp = client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}
    assert resp.headers.get("X-Request-ID")
    assert resp.headers.get("X-Request-Duration-ms") is not None


def test_request_id_on_rejected_webhook_response(client):
    resp = client.post(
        "/api/webhooks/session-completed",
        content=b"{}",
        headers={"X-Request-ID": "req-abc"},
    )

    assert resp.status_code == 401
    assert resp.headers.get("X-Request-ID") == "req-abc"
