# -*- coding: utf-8 -*-
"""
api/create_crypto_invoice.py

POST /api/create-crypto-invoice
- body: { formData: { pricing, product, customer, orderRef, shipping? } }
- NOWPayments 호스팅 invoice 를 만들고 invoice_url 을 돌려준다.

응답:
- 200 { invoice_url, invoice_id, order_id, created_at, pay_address?, pay_amount?, pay_currency? }
- 4xx/5xx { error, details? }
"""

from http.server import BaseHTTPRequestHandler
import sys
from pathlib import Path
from typing import Any, Dict

# Add project root to sys.path for Vercel
_root = str(Path(__file__).resolve().parents[1])
if _root not in sys.path:
    sys.path.insert(0, _root)

from api._http import send
from api._vercel_common import _base_url, _empty, _get_method, _outcome_resp, _read_json
from storefront_checkout import nowpayments_client
from storefront_checkout.config import Config
from storefront_checkout.outcome import MISSING_FIELD, NOWPAYMENTS, classify, method_not_allowed
from storefront_checkout.payloads import CRYPTO_SECTIONS, build_invoice_data, require_form_data
from storefront_checkout.utils import CheckoutError, get_logger

logger = get_logger(__name__)


def create_crypto_invoice(req: Any) -> Dict[str, Any]:
    """요청 객체 -> {statusCode, headers, body}. 예외를 밖으로 던지지 않는다."""
    method = _get_method(req)
    if method == "OPTIONS":
        return _empty(200)
    if method != "POST":
        return _outcome_resp(method_not_allowed())

    try:
        body = _read_json(req)
        form_data = require_form_data(body.get("formData"), CRYPTO_SECTIONS)
        api_key = Config.require("NOWPAYMENTS_API_KEY")

        invoice_data = build_invoice_data(form_data, _base_url(req))
        logger.info(
            f"Creating NOWPayments invoice: order_id={invoice_data['order_id']} "
            f"amount={invoice_data['price_amount']} currency={invoice_data['price_currency']}"
        )

        reply = nowpayments_client.create_invoice(invoice_data, api_key)
        outcome = classify(NOWPAYMENTS, reply=reply)
    except CheckoutError as e:
        outcome = classify(NOWPAYMENTS, exc=e)
    except Exception as e:
        logger.exception(f"Crypto payment error: {type(e).__name__}: {e}")
        outcome = classify(NOWPAYMENTS, exc=e, development=Config.is_development())

    if outcome.kind == MISSING_FIELD:
        logger.error(f"Invalid NOWPayments response - missing invoice_url: {reply.body}")
    elif outcome.is_success:
        logger.info(
            f"NOWPayments invoice created: invoice_id={outcome.body.get('invoice_id')} "
            f"order_id={outcome.body.get('order_id')} invoice_url={outcome.body.get('invoice_url')}"
        )
    return _outcome_resp(outcome)


class handler(BaseHTTPRequestHandler):
    def _dispatch(self):
        send(self, create_crypto_invoice(self))

    do_OPTIONS = _dispatch
    do_POST = _dispatch
    do_GET = _dispatch
    do_PUT = _dispatch
    do_PATCH = _dispatch
    do_DELETE = _dispatch
    do_HEAD = _dispatch
    do_TRACE = _dispatch
    do_CONNECT = _dispatch

    def __getattr__(self, name):
        # 그 밖의 임의 메서드(PROPFIND 등)도 501 대신 405 로 응답
        if name.startswith("do_"):
            return self._dispatch
        raise AttributeError(name)
