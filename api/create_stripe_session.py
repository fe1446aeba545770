# -*- coding: utf-8 -*-
"""
api/create_stripe_session.py

POST /api/create-stripe-session
- body: { formData: {...}, paymentType?: "card" | "ach" }
- Stripe Checkout Session 을 만들고 호스팅 결제 페이지 URL 을 돌려준다.
- ACH(us_bank_account)는 USD 만 지원.

응답:
- 200 { url, sessionId }
- 4xx/5xx { error, details?, type?, param? }
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
from storefront_checkout import stripe_client
from storefront_checkout.config import Config
from storefront_checkout.outcome import STRIPE, classify, method_not_allowed
from storefront_checkout.payloads import STRIPE_SECTIONS, build_session_config, require_form_data
from storefront_checkout.utils import CheckoutError, get_logger

logger = get_logger(__name__)


def create_stripe_session(req: Any) -> Dict[str, Any]:
    """요청 객체 -> {statusCode, headers, body}. 예외를 밖으로 던지지 않는다."""
    method = _get_method(req)
    if method == "OPTIONS":
        return _empty(200)
    if method != "POST":
        return _outcome_resp(method_not_allowed())

    try:
        body = _read_json(req)
        payment_type = body.get("paymentType") or "card"
        form_data = require_form_data(body.get("formData"), STRIPE_SECTIONS)
        secret_key = Config.require("STRIPE_SECRET_KEY")

        session_config = build_session_config(form_data, _base_url(req), payment_type)
        logger.info(
            f"Creating Stripe checkout session: orderRef={form_data.get('orderRef')} "
            f"paymentType={payment_type} items={len(session_config['line_items'])}"
        )

        reply = stripe_client.create_checkout_session(session_config, secret_key)
        outcome = classify(STRIPE, reply=reply)
    except CheckoutError as e:
        outcome = classify(STRIPE, exc=e)
    except Exception as e:
        logger.exception(f"Stripe error: {type(e).__name__}: {e}")
        outcome = classify(STRIPE, exc=e, development=Config.is_development())

    if outcome.is_success:
        logger.info(f"Stripe checkout session created: sessionId={outcome.body.get('sessionId')}")
    return _outcome_resp(outcome)


class handler(BaseHTTPRequestHandler):
    def _dispatch(self):
        send(self, create_stripe_session(self))

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
