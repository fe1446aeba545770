# -*- coding: utf-8 -*-
"""
stripe_client.py

목적:
- Stripe Checkout Session 생성 API 를 SDK 없이 requests 로 호출한다.
- Stripe 는 JSON 이 아니라 form-encoded 파라미터를 받는다.
  중첩 dict/list 는 bracket 표기로 펼친다:
    line_items[0][price_data][currency]=usd
- 응답 처리는 nowpayments_client 와 동일하게 ProviderReply 로 통일.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

import requests

from .config import Config
from .outcome import ProviderReply
from .utils import get_logger

logger = get_logger(__name__)


def _flatten(value: Any, prefix: str, out: List[Tuple[str, str]]) -> None:
    # Stripe 는 빈 문자열을 "unset" 으로 해석하므로 None 과 함께 제외
    if value is None or value == "":
        return
    if isinstance(value, dict):
        for k, v in value.items():
            _flatten(v, f"{prefix}[{k}]" if prefix else str(k), out)
    elif isinstance(value, (list, tuple)):
        for i, v in enumerate(value):
            _flatten(v, f"{prefix}[{i}]", out)
    elif isinstance(value, bool):
        out.append((prefix, "true" if value else "false"))
    else:
        out.append((prefix, str(value)))


def encode_form(params: Dict[str, Any]) -> List[Tuple[str, str]]:
    """중첩 파라미터 -> (key, value) 목록. None / 빈 문자열은 제외."""
    out: List[Tuple[str, str]] = []
    _flatten(params, "", out)
    return out


def _headers(secret_key: str) -> Dict[str, str]:
    headers = {
        "Authorization": f"Bearer {secret_key}",
        "Content-Type": "application/x-www-form-urlencoded",
    }
    if Config.STRIPE_API_VERSION:
        headers["Stripe-Version"] = Config.STRIPE_API_VERSION
    return headers


def create_checkout_session(
    params: Dict[str, Any],
    secret_key: str,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ProviderReply:
    """Checkout Session 생성."""
    url = f"{(base_url or Config.STRIPE_API_BASE).rstrip('/')}/v1/checkout/sessions"
    r = requests.post(
        url,
        headers=_headers(secret_key),
        data=encode_form(params),
        timeout=timeout or Config.HTTP_TIMEOUT_SECONDS,
    )
    reply = ProviderReply.from_response(r)
    if not reply.parsed:
        logger.error(f"Failed to parse Stripe response: {reply.text[:500]}")
    if not reply.ok:
        logger.error(
            f"Stripe API error: status={r.status_code} orderRef={params.get('metadata', {}).get('orderRef')} body={reply.text[:500]}"
        )
    return reply
