import json
import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, TextIO

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
session_id_ctx: ContextVar[str | None] = ContextVar("session_id", default=None)

# Third-party loggers that are chatty at DEBUG (one line per HTTP request).
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


class ContextFilter(logging.Filter):
    """Stamp records with the current request and swap session ids."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.request_id = request_id_ctx.get() or "-"
        record.session_id = session_id_ctx.get() or "-"
        return True


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: Dict[str, Any] = {
            "time": stamp.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
            "session_id": getattr(record, "session_id", "-"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def init_logging(debug: bool = False, stream: Optional[TextIO] = None) -> None:
    level = logging.DEBUG if debug else logging.INFO
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setLevel(level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@contextmanager
def bind_session(session_id: str) -> Iterator[None]:
    """Attach a swap session id to every log record emitted inside the block."""
    token = session_id_ctx.set(session_id)
    try:
        yield
    finally:
        session_id_ctx.reset(token)


async def request_context_middleware(request, call_next):  # type: ignore
    """Assign (or accept) an ``x-request-id`` and echo it on the response."""
    rid = request.headers.get("x-request-id") or uuid.uuid4().hex
    token = request_id_ctx.set(rid)
    logger = logging.getLogger("tokenswap.request")
    logger.debug("-> %s %s", request.method, request.url.path)
    try:
        response = await call_next(request)
    finally:
        request_id_ctx.reset(token)
    response.headers["x-request-id"] = rid
    logger.debug("<- %s %s %d", request.method, request.url.path, response.status_code)
    return response
