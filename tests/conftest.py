"""Pytest fixtures for the checkout handlers."""

import json
import pathlib
import sys
from types import SimpleNamespace

import pytest
import requests

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))


class FakeResponse:
    """requests.Response 대역: status_code + text 만 사용."""

    def __init__(self, status_code, payload=None, text=None):
        self.status_code = status_code
        if text is None:
            text = json.dumps(payload)
        self.text = text


class OutboundRecorder:
    """requests.post 대체. 호출을 기록하고 준비된 응답/예외를 돌려준다."""

    def __init__(self):
        self.calls = []
        self.response = FakeResponse(200, {})
        self.error = None

    def reply(self, status_code, payload=None, text=None):
        self.response = FakeResponse(status_code, payload, text)

    def fail(self, exc):
        self.error = exc

    def __call__(self, url, **kwargs):
        self.calls.append(SimpleNamespace(url=url, **kwargs))
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def outbound(monkeypatch):
    recorder = OutboundRecorder()
    monkeypatch.setattr(requests, "post", recorder)
    return recorder


@pytest.fixture
def credentials(monkeypatch):
    monkeypatch.setenv("NOWPAYMENTS_API_KEY", "np-test-key")
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("VERCEL_ENV", raising=False)


def _make_request(method="POST", body=None, headers=None):
    raw = b"" if body is None else json.dumps(body).encode("utf-8")
    return SimpleNamespace(method=method, headers=headers or {}, body=raw)


@pytest.fixture
def make_request():
    return _make_request


@pytest.fixture
def form_data():
    return {
        "pricing": {
            "total": 1049.0,
            "currency": "USD",
            "subtotal": 999.98,
            "shipping": 29.0,
            "insurance": 20.02,
        },
        "product": {
            "name": "iPhone 15 Pro",
            "specs": "256GB Natural Titanium",
            "quantity": 2,
            "basePrice": 499.99,
            "imageUrl": "https://cdn.example.com/iphone15.png",
        },
        "customer": {
            "firstName": "Alex",
            "lastName": "Kim",
            "email": "alex@example.com",
            "phone": "+1 555 0100",
        },
        "orderRef": "WSI-1001",
        "shipping": {"method": "express"},
    }
