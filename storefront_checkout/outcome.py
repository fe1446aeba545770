# -*- coding: utf-8 -*-
"""
storefront_checkout/outcome.py

목적:
- 결제사 응답(HTTP status + 파싱된 body) 또는 호출 중 발생한 예외를
  클라이언트에게 돌려줄 (status, JSON body) 한 쌍으로 정규화한다.
- 상태 없는 순수 함수 + 결제사별 프로파일(메시지/성공 필드/성공 body)로 구성.

분류표:
- configuration_error   : 자격 증명 없음                  -> 500
- validation_error      : 로컬 필드 누락 / 결제사 400      -> 400
- authentication_error  : 결제사 401                       -> 500
- upstream_error        : 그 외 non-2xx                    -> 결제사 status 그대로
- malformed_response    : body 가 JSON 이 아님             -> 500
- missing_field         : 2xx 인데 성공 필드 없음          -> 500
- network_unavailable   : DNS / 연결 거부 / 타임아웃       -> 503
- internal_error        : 그 밖의 예외                     -> 500
- success               : 2xx + 성공 필드                  -> 200
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

import requests

from .utils import CheckoutError, ConfigurationError, FormDataError

SUCCESS = "success"
CONFIGURATION_ERROR = "configuration_error"
VALIDATION_ERROR = "validation_error"
AUTHENTICATION_ERROR = "authentication_error"
UPSTREAM_ERROR = "upstream_error"
MALFORMED_RESPONSE = "malformed_response"
MISSING_FIELD = "missing_field"
NETWORK_UNAVAILABLE = "network_unavailable"
INTERNAL_ERROR = "internal_error"
METHOD_NOT_ALLOWED = "method_not_allowed"

MSG_CONFIGURATION = "Payment system configuration error"
MSG_AUTHENTICATION = "Payment system authentication failed. Please contact support."
MSG_MALFORMED = "Invalid response from payment processor"
MSG_MISSING_FIELD = "Invalid payment response received"
MSG_UNAVAILABLE = "Payment service temporarily unavailable. Please try again."
MSG_TIMEOUT = "Connection timeout. Please check your internet connection and try again."
MSG_METHOD_NOT_ALLOWED = "Method not allowed"


@dataclass
class ProviderReply:
    """결제사 HTTP 응답 요약."""

    status_code: int
    body: Any = None
    text: str = ""
    parsed: bool = True  # False 이면 body 가 JSON 으로 파싱되지 않았음

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    @classmethod
    def from_response(cls, r: requests.Response) -> "ProviderReply":
        text = r.text or ""
        try:
            body = json.loads(text)
        except ValueError:
            return cls(status_code=r.status_code, body=None, text=text, parsed=False)
        return cls(status_code=r.status_code, body=body, text=text)


@dataclass
class Outcome:
    kind: str
    status: int
    body: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        return self.kind == SUCCESS


@dataclass(frozen=True)
class ProviderProfile:
    """결제사별 메시지/필드 규칙."""

    name: str
    success_field: str
    failure_message: str
    internal_message: str
    success_body: Callable[[Dict[str, Any]], Dict[str, Any]]
    upstream_message: Callable[[Any], Optional[str]]
    upstream_extra: Callable[[Any], Dict[str, Any]] = lambda body: {}
    # None 이면 결제사 메시지를 그대로 error 로 사용
    validation_message: Optional[str] = None
    validation_details_default: Optional[str] = None
    failure_details_default: Optional[str] = None


def _compact(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


def _nowpayments_message(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        return body.get("message") or None
    return None


_NOWPAYMENTS_FIELDS = (
    ("invoice_url", "invoice_url"),
    ("invoice_id", "id"),
    ("order_id", "order_id"),
    ("created_at", "created_at"),
    # QR 코드 생성용 (결제사가 줄 때만)
    ("pay_address", "pay_address"),
    ("pay_amount", "pay_amount"),
    ("pay_currency", "pay_currency"),
)


def _nowpayments_success(data: Dict[str, Any]) -> Dict[str, Any]:
    return {out: data[src] for out, src in _NOWPAYMENTS_FIELDS if src in data}


def _stripe_error(body: Any) -> Dict[str, Any]:
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"]
    return {}


def _stripe_message(body: Any) -> Optional[str]:
    return _stripe_error(body).get("message") or None


def _stripe_extra(body: Any) -> Dict[str, Any]:
    err = _stripe_error(body)
    return {"type": err.get("type"), "param": err.get("param")}


def _stripe_success(data: Dict[str, Any]) -> Dict[str, Any]:
    return {"url": data.get("url"), "sessionId": data.get("id")}


NOWPAYMENTS = ProviderProfile(
    name="NOWPayments",
    success_field="invoice_url",
    failure_message="Failed to create crypto payment",
    internal_message="Failed to process crypto payment. Please try again.",
    success_body=_nowpayments_success,
    upstream_message=_nowpayments_message,
    validation_message="Invalid payment details. Please check your information.",
    validation_details_default="Invalid request parameters",
    failure_details_default="Please try again or contact support",
)

STRIPE = ProviderProfile(
    name="Stripe",
    success_field="url",
    failure_message="Payment processing failed",
    internal_message="Payment processing failed",
    success_body=_stripe_success,
    upstream_message=_stripe_message,
    upstream_extra=_stripe_extra,
)


def configuration_error() -> Outcome:
    return Outcome(CONFIGURATION_ERROR, 500, {"error": MSG_CONFIGURATION})


def validation_error(message: str) -> Outcome:
    return Outcome(VALIDATION_ERROR, 400, {"error": message})


def method_not_allowed() -> Outcome:
    return Outcome(METHOD_NOT_ALLOWED, 405, {"error": MSG_METHOD_NOT_ALLOWED})


def from_checkout_error(err: CheckoutError) -> Outcome:
    """로컬에서 발생한 CheckoutError 를 Outcome 으로 변환."""
    if isinstance(err, ConfigurationError):
        return configuration_error()
    if isinstance(err, FormDataError):
        return validation_error(err.message)
    return Outcome(INTERNAL_ERROR, err.status, {"error": err.message})


def _exception_chain(exc: BaseException):
    """exc 와 그 원인들 (args / reason / __cause__ / __context__) 을 순회."""
    seen = set()
    stack = [exc]
    while stack:
        cur = stack.pop()
        if id(cur) in seen:
            continue
        seen.add(id(cur))
        yield cur
        # requests -> urllib3 MaxRetryError(reason=NewConnectionError) -> OSError
        linked = [cur.__cause__, cur.__context__, getattr(cur, "reason", None)]
        linked.extend(cur.args)
        stack.extend(e for e in linked if isinstance(e, BaseException))


def _is_connection_refused(exc: BaseException) -> bool:
    if any(isinstance(e, ConnectionRefusedError) for e in _exception_chain(exc)):
        return True
    # 원인 체인이 없는 경우에만 메시지로 판단
    text = str(exc).lower()
    return "refused" in text or "errno 111" in text or "winerror 10061" in text


def classify_exception(
    profile: ProviderProfile, exc: BaseException, development: bool = False
) -> Outcome:
    if isinstance(exc, CheckoutError):
        return from_checkout_error(exc)
    if isinstance(exc, requests.Timeout):
        return Outcome(NETWORK_UNAVAILABLE, 503, {"error": MSG_TIMEOUT})
    if isinstance(exc, requests.ConnectionError):
        if _is_connection_refused(exc):
            return Outcome(NETWORK_UNAVAILABLE, 503, {"error": MSG_TIMEOUT})
        return Outcome(NETWORK_UNAVAILABLE, 503, {"error": MSG_UNAVAILABLE})
    body = {"error": profile.internal_message}
    if development:
        body["details"] = str(exc)
    return Outcome(INTERNAL_ERROR, 500, body)


def classify_reply(profile: ProviderProfile, reply: ProviderReply) -> Outcome:
    # 파싱 실패는 status 보다 먼저 확인 (HTML 502 페이지 등)
    if not reply.parsed:
        return Outcome(MALFORMED_RESPONSE, 500, {"error": MSG_MALFORMED})

    body = reply.body
    if not reply.ok:
        if reply.status_code == 401:
            return Outcome(AUTHENTICATION_ERROR, 500, {"error": MSG_AUTHENTICATION})

        upstream = profile.upstream_message(body)
        extra = profile.upstream_extra(body)
        if reply.status_code == 400:
            error = profile.validation_message or upstream or profile.failure_message
            details = upstream or profile.validation_details_default
            return Outcome(
                VALIDATION_ERROR,
                400,
                _compact({"error": error, "details": details, **extra}),
            )
        details = upstream or profile.failure_details_default
        return Outcome(
            UPSTREAM_ERROR,
            reply.status_code,
            _compact({"error": profile.failure_message, "details": details, **extra}),
        )

    if not isinstance(body, dict) or not body.get(profile.success_field):
        return Outcome(MISSING_FIELD, 500, {"error": MSG_MISSING_FIELD})

    return Outcome(SUCCESS, 200, profile.success_body(body))


def classify(
    profile: ProviderProfile,
    reply: Optional[ProviderReply] = None,
    exc: Optional[BaseException] = None,
    development: bool = False,
) -> Outcome:
    """(reply | exc) -> Outcome. 둘 중 하나는 반드시 주어져야 한다."""
    if exc is not None:
        return classify_exception(profile, exc, development=development)
    if reply is None:
        raise ValueError("classify() needs a reply or an exception")
    return classify_reply(profile, reply)
