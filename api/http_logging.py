from __future__ import annotations

import json
import logging
import time
import uuid
from typing import Any, Dict, Iterable, List, Optional, Tuple

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from template_forms.config import _env_bool, _env_int

logger = logging.getLogger("api.http")

Headers = Iterable[Tuple[bytes, bytes]]

_SENSITIVE_KEYS = {
    "authorization",
    "cookie",
    "set-cookie",
    "x-api-key",
    "apikey",
    "api_key",
    "access_token",
    "refresh_token",
    "token",
    "password",
    "secret",
    "supabase_service_role_key",
}


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: ("***" if str(k).lower() in _SENSITIVE_KEYS else _redact(v)) for k, v in value.items()}
    if isinstance(value, list):
        return [_redact(v) for v in value]
    return value


def _header_map(headers: Optional[Headers]) -> Dict[str, str]:
    out: Dict[str, str] = {}
    for k, v in headers or []:
        key = k.decode("latin-1").lower()
        out[key] = "***" if key in _SENSITIVE_KEYS else v.decode("latin-1")
    return out


def _header(headers: Optional[Headers], name: bytes) -> str:
    for k, v in headers or []:
        if k.lower() == name:
            return v.decode("latin-1")
    return ""


class _BodyCapture:
    """Keeps the first `limit` bytes of a streamed body."""

    def __init__(self, limit: int) -> None:
        self.limit = limit
        self.buf = bytearray()
        self.truncated = False

    def feed(self, chunk: bytes) -> None:
        if not chunk or self.limit <= 0 or self.truncated:
            return
        room = self.limit - len(self.buf)
        self.buf.extend(chunk[: max(0, room)])
        if len(chunk) > room:
            self.truncated = True

    def render(self, content_type: str) -> Any:
        if self.limit <= 0:
            return ""
        body = bytes(self.buf)
        ct = (content_type or "").lower()
        text = body.decode("utf-8", errors="replace")
        if "application/json" in ct:
            try:
                return _redact(json.loads(text))
            except ValueError:
                return text
        if ct.startswith("text/") or "x-www-form-urlencoded" in ct:
            return text
        if "multipart/form-data" in ct:
            return "<multipart>"
        return "" if not body else "<binary>"


class HttpLoggingMiddleware:
    """One JSON log line per HTTP exchange on the `api.http` logger."""

    def __init__(self, app: ASGIApp, *, log_headers: bool, max_body_bytes: int) -> None:
        self.app = app
        self.log_headers = log_headers
        self.max_body_bytes = max(0, max_body_bytes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope.get("type") != "http":
            await self.app(scope, receive, send)
            return

        started_at = time.perf_counter()
        req_headers: List[Tuple[bytes, bytes]] = list(scope.get("headers") or [])
        request_id = _header(req_headers, b"x-request-id") or uuid.uuid4().hex[:12]
        req_body = _BodyCapture(self.max_body_bytes)
        res_body = _BodyCapture(self.max_body_bytes)
        res: Dict[str, Any] = {"status": None, "headers": []}

        async def receive_wrapped() -> Message:
            message = await receive()
            if message.get("type") == "http.request":
                req_body.feed(message.get("body") or b"")
            return message

        async def send_wrapped(message: Message) -> None:
            if message.get("type") == "http.response.start":
                res["status"] = int(message.get("status") or 0)
                res["headers"] = list(message.get("headers") or [])
            elif message.get("type") == "http.response.body":
                res_body.feed(message.get("body") or b"")
            await send(message)

        err: Optional[BaseException] = None
        try:
            await self.app(scope, receive_wrapped, send_wrapped)
        except BaseException as e:  # noqa: BLE001 - logged, then re-raised
            err = e
            raise
        finally:
            req_ct = _header(req_headers, b"content-type")
            res_ct = _header(res["headers"], b"content-type")
            record: Dict[str, Any] = {
                "id": request_id,
                "method": str(scope.get("method") or "").upper(),
                "path": str(scope.get("path") or ""),
                "query": (scope.get("query_string") or b"").decode("latin-1", errors="ignore"),
                "status": res["status"],
                "dur_ms": int((time.perf_counter() - started_at) * 1000),
                "request": {
                    "content_type": req_ct,
                    "headers": _header_map(req_headers) if self.log_headers else {},
                    "body": req_body.render(req_ct),
                    "body_truncated": req_body.truncated,
                },
                "response": {
                    "content_type": res_ct,
                    "headers": _header_map(res["headers"]) if self.log_headers else {},
                    "body": res_body.render(res_ct),
                    "body_truncated": res_body.truncated,
                },
            }
            if err is not None:
                record["error"] = {"type": type(err).__name__, "message": str(err)}
            logger.info(json.dumps(record, ensure_ascii=False, separators=(",", ":"), default=str))


def install_http_logging(app: Any) -> None:
    """
    Enable request/response logging via env vars.

    - `TEMPLATE_FORMS_HTTP_LOG=1` enables the middleware
    - `TEMPLATE_FORMS_HTTP_LOG_HEADERS=1` logs request/response headers (redacted)
    - `TEMPLATE_FORMS_HTTP_LOG_BODY_MAX_BYTES=4096` caps body bytes captured per request/response
    """
    if not _env_bool("TEMPLATE_FORMS_HTTP_LOG", default=False):
        return
    log_headers = _env_bool("TEMPLATE_FORMS_HTTP_LOG_HEADERS", default=False)
    max_body_bytes = _env_int("TEMPLATE_FORMS_HTTP_LOG_BODY_MAX_BYTES", default=4096)
    app.add_middleware(HttpLoggingMiddleware, log_headers=log_headers, max_body_bytes=max_body_bytes)
