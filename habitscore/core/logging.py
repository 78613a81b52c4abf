"""
Structured logging for habitscore.

- One JSON object per line in production, a readable line elsewhere.
- request_id bound per request through a ContextVar.
- log_event emits score-engine events (score.calculated, leaderboard.computed,
  ...) whose extra fields are carried through to both formatters.
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, Tuple

LOGGER_NAME = "habitscore"
MAX_FIELD_LENGTH = 500

request_id_ctx_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Attributes every LogRecord carries; anything else arrived through extra=
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

_CORE_FIELDS = ("request_id", "user_id", "event_type", "error_code")


def get_request_id(default: Optional[str] = None) -> Optional[str]:
    """Fetch the current request_id from context (if any)."""
    rid = request_id_ctx_var.get()
    return rid if rid is not None else default


def _timestamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z")


def latency_bucket_ms(latency_ms: Optional[float]) -> str:
    if latency_ms is None:
        return "unknown"
    for bound, label in ((10, "<10ms"), (100, "10-100ms"), (500, "100-500ms"), (1000, "500-1000ms")):
        if latency_ms < bound:
            return label
    return ">=1000ms"


def event_fields(record: logging.LogRecord) -> Iterator[Tuple[str, Any]]:
    """Extra fields attached to a record, excluding the correlation fields."""
    for key, value in record.__dict__.items():
        if key in _RECORD_ATTRS or key in _CORE_FIELDS or key.startswith("_"):
            continue
        yield key, value


class RequestIdFilter(logging.Filter):
    """Inject request_id into log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = get_request_id()
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        for key in _CORE_FIELDS[1:]:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        for key, value in event_fields(record):
            payload.setdefault(key, value)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class PrettyFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        parts = [_timestamp(record), record.levelname, f"[{LOGGER_NAME}]"]
        rid = getattr(record, "request_id", None)
        if rid:
            parts.append(f"[rid={rid}]")
        uid = getattr(record, "user_id", None)
        if uid:
            parts.append(f"[user={uid}]")
        parts.append(record.getMessage())
        parts.extend(f"{key}={value}" for key, value in event_fields(record))
        line = " ".join(parts)
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def configure_logging(env: str = "development") -> None:
    """Configure structured logging based on environment."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if env.lower() == "production" else PrettyFormatter())
    handler.addFilter(RequestIdFilter())

    logger.handlers = [handler]
    logger.propagate = True

    # Reduce noise from uvicorn loggers but keep error output
    logging.getLogger("uvicorn").propagate = False
    logging.getLogger("uvicorn.error").propagate = False


def _field_value(value: Any) -> Any:
    # Numbers and flags stay typed in the JSON output; everything else is a bounded string
    if value is None or isinstance(value, (bool, int, float)):
        return value
    try:
        text = str(value)
    except Exception:
        return "<unserializable>"
    if len(text) <= MAX_FIELD_LENGTH:
        return text
    return text[:MAX_FIELD_LENGTH] + "...<truncated>"


def log_event(
    level: str,
    msg: str,
    *,
    request_id: Optional[str] = None,
    user_id: Optional[str] = None,
    event_type: Optional[str] = None,
    error_code: Optional[str] = None,
    extra: Optional[Dict[str, object]] = None,
):
    """
    Emit a structured event on the habitscore logger.

    Keys in extra become top-level fields of the record (and of the JSON
    line). Keys that collide with LogRecord attributes are prefixed with
    "field_" instead of raising.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not logger.handlers:
        configure_logging(os.getenv("ENV", "development"))

    payload: Dict[str, Any] = {
        "request_id": request_id or get_request_id(),
        "user_id": user_id,
    }
    if event_type:
        payload["event_type"] = event_type
    if error_code:
        payload["error_code"] = error_code
    for key, value in (extra or {}).items():
        name = f"field_{key}" if key in _RECORD_ATTRS or key in payload else key
        payload[name] = _field_value(value)

    log_fn = getattr(logger, level, logger.info)
    log_fn(msg, extra=payload)
