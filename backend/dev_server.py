# -*- coding: utf-8 -*-
"""
backend/dev_server.py

목적:
- Vercel CLI 없이 로컬에서 체크아웃 엔드포인트를 띄우기 위한 Flask 서버입니다.
- api/ 의 핸들러 함수를 그대로 호출하고, dict 응답을 Flask Response 로 바꿉니다.
  (로직은 api/ 쪽 하나만 존재)

제공 API:
- GET  /health
- *    /api/create-crypto-invoice   (OPTIONS / POST, 그 외 405)
- *    /api/create-stripe-session   (OPTIONS / POST, 그 외 405)

실행:
    python backend/dev_server.py
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict

PROJECT_ROOT: Path = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from flask import Flask, Response, jsonify, request

from api.create_crypto_invoice import create_crypto_invoice
from api.create_stripe_session import create_stripe_session
from storefront_checkout.config import Config
from storefront_checkout.utils import get_logger

logger = get_logger(__name__)

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

app = Flask(__name__)


def _to_flask(resp: Dict[str, Any]) -> Response:
    """{statusCode, headers, body} -> Flask Response."""
    out = Response(resp.get("body") or "", status=int(resp.get("statusCode", 200)))
    for k, v in (resp.get("headers") or {}).items():
        out.headers[k] = v
    return out


@app.route("/health", methods=["GET"])
def health() -> Response:
    return jsonify({"status": "ok"})


@app.route("/api/create-crypto-invoice", methods=ALL_METHODS)
def crypto_invoice() -> Response:
    return _to_flask(create_crypto_invoice(request))


@app.route("/api/create-stripe-session", methods=ALL_METHODS)
def stripe_session() -> Response:
    return _to_flask(create_stripe_session(request))


if __name__ == "__main__":
    port = Config.DEV_SERVER_PORT
    logger.info(f"Starting checkout dev server on http://127.0.0.1:{port}")
    app.run(host="127.0.0.1", port=port, debug=False)
