# -*- coding: utf-8 -*-
"""
nowpayments_client.py

목적:
- NOWPayments invoice 생성 API 를 "얇게" 래핑한다.
- HTTP 오류 status 는 예외로 바꾸지 않고 ProviderReply 로 돌려준다.
  (status -> 클라이언트 응답 매핑은 outcome.classify 담당)
- 네트워크 예외(requests.ConnectionError / Timeout)는 호출자에게 그대로 전파.

참고:
- NOWPayments 는 API 키 기반(x-api-key 헤더).
- invoice 는 NOWPayments 호스팅 결제 페이지(invoice_url)를 만든다.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from .config import Config
from .outcome import ProviderReply
from .utils import get_logger

logger = get_logger(__name__)


def _headers(api_key: str) -> Dict[str, str]:
    return {
        "x-api-key": api_key,
        "Content-Type": "application/json",
    }


def create_invoice(
    invoice_data: Dict[str, Any],
    api_key: str,
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ProviderReply:
    """invoice 생성."""
    url = f"{(base_url or Config.NOWPAYMENTS_BASE_URL).rstrip('/')}/v1/invoice"
    r = requests.post(
        url,
        headers=_headers(api_key),
        json=invoice_data,
        timeout=timeout or Config.HTTP_TIMEOUT_SECONDS,
    )
    reply = ProviderReply.from_response(r)
    if not reply.parsed:
        logger.error(f"Failed to parse NOWPayments response: {reply.text[:500]}")
    if not reply.ok:
        logger.error(
            f"NOWPayments API error: status={r.status_code} order_id={invoice_data.get('order_id')} body={reply.text[:500]}"
        )
    return reply
