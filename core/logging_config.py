"""Structured JSON logging.

Every record is one JSON object on stdout. Fields passed through ``extra``
with a ``ctx_`` prefix are grouped under ``context``; the id of the request
being served (if any) is attached to every record logged while it runs.
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
import time
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import uuid4

REQUEST_ID_HEADER = "X-Request-ID"

_request_id_var: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar("request_id", default=None)

_NOISY_LOGGERS = ("sqlalchemy.engine", "alembic", "httpx", "anthropic")


def get_request_id() -> Optional[str]:
    return _request_id_var.get()


def set_request_id(value: Optional[str]) -> contextvars.Token:
    return _request_id_var.set(value)


def reset_request_id(token: contextvars.Token) -> None:
    _request_id_var.reset(token)


def new_request_id() -> str:
    return uuid4().hex


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }
        context = {k: v for k, v in record.__dict__.items() if k.startswith("ctx_")}
        if context:
            entry["context"] = context
        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO") -> None:
    """Install the JSON handler on the root logger (once per process)."""
    root = logging.getLogger()
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if any(isinstance(h.formatter, JSONFormatter) for h in root.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    # uvicorn installs its own handlers; route its records through ours instead
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uv_logger = logging.getLogger(name)
        uv_logger.handlers.clear()
        uv_logger.propagate = True


def request_log_fields(*, method: str, path: str, status_code: int, duration_ms: float) -> dict[str, Any]:
    return {
        "ctx_method": method,
        "ctx_path": path,
        "ctx_status": int(status_code),
        "ctx_duration_ms": round(float(duration_ms), 2),
    }


def monotonic_ms() -> float:
    return time.perf_counter() * 1000.0


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
