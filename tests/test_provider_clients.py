import pytest
import requests

from storefront_checkout import nowpayments_client, stripe_client
from storefront_checkout.config import Config
from storefront_checkout.stripe_client import encode_form


def test_create_invoice_posts_json_with_api_key(outbound):
    outbound.reply(200, {"id": "1", "invoice_url": "https://nowpayments.io/payment/?iid=1"})
    reply = nowpayments_client.create_invoice({"order_id": "WSI-1"}, "np-key", base_url="https://np.test/")

    call = outbound.calls[0]
    assert call.url == "https://np.test/v1/invoice"
    assert call.headers["x-api-key"] == "np-key"
    assert call.json == {"order_id": "WSI-1"}
    assert call.timeout == Config.HTTP_TIMEOUT_SECONDS
    assert reply.ok and reply.parsed
    assert reply.body["invoice_url"].endswith("iid=1")


def test_unparsable_reply_is_flagged(outbound):
    outbound.reply(502, text="<html>Bad gateway</html>")
    reply = nowpayments_client.create_invoice({}, "np-key")
    assert reply.status_code == 502
    assert reply.parsed is False
    assert reply.body is None


def test_network_errors_propagate(outbound):
    outbound.fail(requests.ConnectionError("Name or service not known"))
    with pytest.raises(requests.ConnectionError):
        nowpayments_client.create_invoice({}, "np-key")


def test_encode_form_bracket_notation():
    params = {
        "mode": "payment",
        "line_items": [
            {"price_data": {"currency": "usd", "unit_amount": 1999}, "quantity": 1},
        ],
        "customer_email": None,
        "metadata": {"orderRef": "WSI-1", "phone": None},
        "payment_method_types": ["card"],
        "flag": True,
        "description": "",
    }
    assert encode_form(params) == [
        ("mode", "payment"),
        ("line_items[0][price_data][currency]", "usd"),
        ("line_items[0][price_data][unit_amount]", "1999"),
        ("line_items[0][quantity]", "1"),
        ("metadata[orderRef]", "WSI-1"),
        ("payment_method_types[0]", "card"),
        ("flag", "true"),
    ]


def test_create_checkout_session_form_encodes(outbound, monkeypatch):
    monkeypatch.setattr(Config, "STRIPE_API_VERSION", "2024-06-20")
    outbound.reply(200, {"id": "cs_1", "url": "https://checkout.stripe.com/c/pay/cs_1"})
    reply = stripe_client.create_checkout_session(
        {"mode": "payment", "payment_method_types": ["card"]}, "sk_test_1", base_url="https://stripe.test"
    )

    call = outbound.calls[0]
    assert call.url == "https://stripe.test/v1/checkout/sessions"
    assert call.headers["Authorization"] == "Bearer sk_test_1"
    assert call.headers["Stripe-Version"] == "2024-06-20"
    assert call.data == [("mode", "payment"), ("payment_method_types[0]", "card")]
    assert reply.body["id"] == "cs_1"


def test_stripe_version_header_is_optional(outbound, monkeypatch):
    monkeypatch.setattr(Config, "STRIPE_API_VERSION", "")
    stripe_client.create_checkout_session({"mode": "payment"}, "sk_test_1")
    assert "Stripe-Version" not in outbound.calls[0].headers
