# api/_http.py
# Vercel Python 런타임(WSGI/Handler 혼재)에서 공통으로 응답을 내보내는 유틸
# - 핸들러 로직은 항상 dict({statusCode, headers, body}) 를 만든다
# - BaseHTTPRequestHandler 스타일 런타임이면 여기서 wfile 로 직접 쓴다

from typing import Any, Dict


def _is_handler(obj: Any) -> bool:
    # BaseHTTPRequestHandler 유사 객체인지 확인
    return (
        hasattr(obj, "send_response")
        and hasattr(obj, "send_header")
        and hasattr(obj, "end_headers")
        and hasattr(obj, "wfile")
    )


def send(req_or_handler: Any, resp: Dict[str, Any]):
    """dict 응답을 런타임에 맞게 내보낸다."""
    if not _is_handler(req_or_handler):
        # dict 반환 타입
        return resp

    h = req_or_handler
    body = str(resp.get("body") or "").encode("utf-8")
    h.send_response(int(resp.get("statusCode", 200)))
    for k, v in (resp.get("headers") or {}).items():
        h.send_header(k, v)
    h.send_header("Content-Length", str(len(body)))
    h.end_headers()
    if body:
        h.wfile.write(body)
    return None
