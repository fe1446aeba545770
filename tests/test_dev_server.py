import pytest

from backend.dev_server import app


@pytest.fixture
def client():
    app.config["TESTING"] = True
    return app.test_client()


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.get_json() == {"status": "ok"}


def test_preflight(client):
    res = client.options("/api/create-crypto-invoice")
    assert res.status_code == 200
    assert res.get_data() == b""
    assert res.headers["Access-Control-Allow-Origin"] == "*"


def test_get_is_method_not_allowed(client):
    res = client.get("/api/create-stripe-session")
    assert res.status_code == 405
    assert res.get_json() == {"error": "Method not allowed"}


def test_crypto_invoice_round_trip(client, outbound, credentials, form_data):
    outbound.reply(200, {"id": "42", "invoice_url": "https://nowpayments.io/payment/?iid=42", "order_id": "WSI-1001"})
    res = client.post(
        "/api/create-crypto-invoice",
        json={"formData": form_data},
        headers={"Origin": "http://localhost:3000"},
    )
    assert res.status_code == 200
    assert res.get_json()["invoice_id"] == "42"
    assert outbound.calls[0].json["cancel_url"] == "http://localhost:3000/payment.html"


def test_stripe_session_missing_form_data(client, outbound, credentials):
    res = client.post("/api/create-stripe-session", json={})
    assert res.status_code == 400
    assert res.get_json() == {"error": "Missing required form data"}
    assert outbound.calls == []
