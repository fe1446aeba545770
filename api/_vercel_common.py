# -*- coding: utf-8 -*-
"""
Vercel Python Serverless Function helper.

- 일부 런타임은 request.body (bytes) + request.method 를 제공한다.
- 일부는 BaseHTTPRequestHandler 스타일로 들어올 수 있다.
- 로컬 Flask dev server 는 werkzeug Request 를 넘긴다.

이 helper는 세 케이스를 모두 처리하고,
반환은 dict {statusCode, headers, body} 스타일로 통일한다.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# Add project root to sys.path for Vercel
_root = str(Path(__file__).resolve().parents[1])
if _root not in sys.path:
    sys.path.insert(0, _root)

from storefront_checkout.config import Config
from storefront_checkout.outcome import Outcome
from storefront_checkout.payloads import resolve_base_url

ALLOW_METHODS = "POST, OPTIONS"


def _cors_headers(allow_methods: str = ALLOW_METHODS) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": allow_methods,
        "Access-Control-Allow-Headers": "Content-Type",
    }


def _get_method(req: Any) -> str:
    # 1. Try .method (Flask/Werkzeug)
    m = getattr(req, "method", "")
    if m:
        return str(m).upper()

    # 2. Try .command (BaseHTTPRequestHandler / Vercel legacy)
    c = getattr(req, "command", "")
    if c:
        return str(c).upper()

    # 3. Try .environ (WSGI)
    env = getattr(req, "environ", {})
    if isinstance(env, dict):
        e = env.get("REQUEST_METHOD", "")
        if e:
            return str(e).upper()

    return ""


def _get_header(req: Any, name: str) -> Optional[str]:
    headers = getattr(req, "headers", None)
    if headers is None:
        return None
    # plain dict 는 대소문자 구분 -> 직접 비교
    if isinstance(headers, dict):
        lname = name.lower()
        for k, v in headers.items():
            if str(k).lower() == lname:
                return v
        return None
    # email.message.Message / werkzeug Headers 는 대소문자 무시
    return headers.get(name)


def _read_raw(req: Any) -> Any:
    # 1. Try .body (Vercel legacy raw / test doubles)
    raw = getattr(req, "body", None)
    if raw:
        return raw

    # 2. Try get_data() (Flask/Werkzeug)
    get_data = getattr(req, "get_data", None)
    if callable(get_data):
        return get_data()

    # 3. Try .rfile (BaseHTTPRequestHandler)
    if hasattr(req, "rfile") and hasattr(req, "headers"):
        try:
            cl = int(_get_header(req, "Content-Length") or 0)
        except ValueError:
            cl = 0
        if cl > 0:
            return req.rfile.read(cl)
    return b""


def _read_json(req: Any) -> Dict[str, Any]:
    """요청 body 를 dict 로. 비어 있거나 JSON 객체가 아니면 {}."""
    raw = _read_raw(req)
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    if not raw:
        return {}
    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _base_url(req: Any) -> str:
    """success/cancel/webhook URL 의 기준 주소."""
    return resolve_base_url(
        _get_header(req, "Origin"), _get_header(req, "Referer"), Config.SITE_URL
    )


def _resp(status: int, body: Any, allow: str = ALLOW_METHODS) -> Dict[str, Any]:
    if isinstance(body, dict):
        body_str = json.dumps(body, ensure_ascii=False)
    else:
        body_str = str(body)

    headers = _cors_headers(allow)
    headers["Content-Type"] = "application/json; charset=utf-8"

    return {
        "statusCode": status,
        "headers": headers,
        "body": body_str,
    }


def _empty(status: int = 200, allow: str = ALLOW_METHODS) -> Dict[str, Any]:
    # preflight 응답: body 없음
    return {"statusCode": status, "headers": _cors_headers(allow), "body": ""}


def _outcome_resp(outcome: Outcome, allow: str = ALLOW_METHODS) -> Dict[str, Any]:
    return _resp(outcome.status, outcome.body, allow)
