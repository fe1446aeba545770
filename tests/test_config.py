import json
import logging
import os

import pytest

from storefront_checkout.config import Config, _env_number, load_local_env
from storefront_checkout.utils import ConfigurationError


def test_require_returns_stripped_value(monkeypatch):
    monkeypatch.setenv("NOWPAYMENTS_API_KEY", "  np-key  ")
    assert Config.require("NOWPAYMENTS_API_KEY") == "np-key"


@pytest.mark.parametrize("value", [None, "", "   "])
def test_require_raises_when_unset(monkeypatch, value):
    if value is None:
        monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    else:
        monkeypatch.setenv("STRIPE_SECRET_KEY", value)
    with pytest.raises(ConfigurationError) as exc:
        Config.require("STRIPE_SECRET_KEY")
    assert "STRIPE_SECRET_KEY" in exc.value.message


def test_is_development(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.setenv("VERCEL_ENV", "production")
    assert Config.is_development() is False
    monkeypatch.setenv("VERCEL_ENV", "development")
    assert Config.is_development() is True


def test_numeric_settings_fall_back_on_bad_values(monkeypatch, caplog):
    monkeypatch.setenv("PAYMENT_HTTP_TIMEOUT_SECONDS", "twenty")
    monkeypatch.setenv("DEV_SERVER_PORT", "5000x")
    with caplog.at_level(logging.WARNING):
        assert _env_number("PAYMENT_HTTP_TIMEOUT_SECONDS", 20.0, float) == 20.0
        assert _env_number("DEV_SERVER_PORT", 5000, int) == 5000
    assert "PAYMENT_HTTP_TIMEOUT_SECONDS" in caplog.text


def test_numeric_settings_parse_valid_values(monkeypatch):
    monkeypatch.setenv("PAYMENT_HTTP_TIMEOUT_SECONDS", " 7.5 ")
    monkeypatch.delenv("DEV_SERVER_PORT", raising=False)
    assert _env_number("PAYMENT_HTTP_TIMEOUT_SECONDS", 20.0, float) == 7.5
    assert _env_number("DEV_SERVER_PORT", 5000, int) == 5000


def test_load_local_env_reads_dotenv_and_secrets(tmp_path, monkeypatch):
    monkeypatch.delenv("VERCEL", raising=False)
    monkeypatch.delenv("NOW_REGION", raising=False)
    monkeypatch.delenv("CHECKOUT_TEST_DOTENV", raising=False)
    monkeypatch.delenv("CHECKOUT_TEST_SECRET", raising=False)
    monkeypatch.setenv("CHECKOUT_TEST_KEEP", "from-env")

    (tmp_path / ".env").write_text("CHECKOUT_TEST_DOTENV=from-dotenv\n", encoding="utf-8")
    (tmp_path / "data").mkdir()
    (tmp_path / "data" / "secrets.json").write_text(
        json.dumps({"CHECKOUT_TEST_SECRET": "from-secrets", "CHECKOUT_TEST_KEEP": "ignored", "N": 1}),
        encoding="utf-8",
    )

    try:
        load_local_env(tmp_path)
        assert os.environ["CHECKOUT_TEST_DOTENV"] == "from-dotenv"
        assert os.environ["CHECKOUT_TEST_SECRET"] == "from-secrets"
        assert os.environ["CHECKOUT_TEST_KEEP"] == "from-env"
        assert "N" not in os.environ
    finally:
        os.environ.pop("CHECKOUT_TEST_DOTENV", None)
        os.environ.pop("CHECKOUT_TEST_SECRET", None)


def test_load_local_env_skipped_on_vercel(tmp_path, monkeypatch):
    monkeypatch.setenv("VERCEL", "1")
    monkeypatch.delenv("CHECKOUT_TEST_DOTENV", raising=False)
    (tmp_path / ".env").write_text("CHECKOUT_TEST_DOTENV=from-dotenv\n", encoding="utf-8")
    load_local_env(tmp_path)
    assert "CHECKOUT_TEST_DOTENV" not in os.environ
