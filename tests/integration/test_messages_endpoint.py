"""HTTP surface: POST /v1/messages."""

from __future__ import annotations


def _post(client, text, user_id="6281234567890", **extra):
    return client.post("/v1/messages", json={"user_id": user_id, "text": text, **extra})


def test_guided_capture_over_http(client):
    first = _post(client, "catat pengeluaran", message_id="wamid-1")
    assert first.status_code == 200
    assert first.json()["text"] == "Berapa jumlah pengeluarannya?"
    assert first.json()["type"] == "dialogue"

    for text in ("50rb", "makan"):
        assert _post(client, text).status_code == 200
    saved = _post(client, "ya").json()
    assert saved["type"] == "command"
    assert saved["text"].startswith("Transaksi berhasil dicatat!")
    assert saved["action"]["type"] == "transaction_created"


def test_response_carries_correlation_id(client):
    response = _post(client, "bantuan", message_id="wamid-2")
    assert response.headers["x-correlation-id"]

    response = client.post(
        "/v1/messages",
        json={"user_id": "u1", "text": "bantuan"},
        headers={"x-correlation-id": "req-42"},
    )
    assert response.headers["x-correlation-id"] == "req-42"


def test_rejects_missing_user(client):
    response = client.post("/v1/messages", json={"user_id": "", "text": "halo"})
    assert response.status_code == 422


def test_accepts_timestamp(client):
    response = _post(client, "apa itu saham", timestamp="2026-01-15T09:00:00+07:00")
    assert response.status_code == 200
    assert response.json()["type"] == "financial_guidance"
