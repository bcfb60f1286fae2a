from __future__ import annotations

import json
import logging
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Iterator

run_id_ctx_var: ContextVar[str | None] = ContextVar("run_id", default=None)

_RESERVED_RECORD_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
}


class RunIdFilter(logging.Filter):
    """Attach the current cleaner run id from contextvars to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        record.run_id = run_id_ctx_var.get() or "-"
        return True


@contextmanager
def cleaner_run(run_id: str | None = None) -> Iterator[str]:
    """Bind a run id for the duration of one cleaner execution."""
    value = run_id or uuid.uuid4().hex[:12]
    token = run_id_ctx_var.set(value)
    try:
        yield value
    finally:
        run_id_ctx_var.reset(token)


def _json_default(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return list(value)
    return str(value)


def _base_log_record_payload(record: logging.LogRecord) -> dict[str, Any]:
    ts = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
    return {
        "ts": ts,
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
        "run_id": getattr(record, "run_id", "-"),
    }


def _append_non_reserved_extras(payload: dict[str, Any], record: logging.LogRecord) -> None:
    extras = getattr(record, "__dict__", {}) or {}
    for key, value in extras.items():
        if key in _RESERVED_RECORD_KEYS or key in payload:
            continue
        if key.startswith("_"):
            continue
        payload[key] = value


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:
        base = _base_log_record_payload(record)
        _append_non_reserved_extras(base, record)
        if record.exc_info:
            base["exception"] = self.formatException(record.exc_info)
        return json.dumps(base, ensure_ascii=False, default=_json_default)


def configure_logging(json_logs: bool = False) -> None:
    """Configure root logger with run-id aware formatter."""
    handler = logging.StreamHandler()
    handler.addFilter(RunIdFilter())
    if json_logs:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s [%(run_id)s] %(message)s")
        )

    logging.basicConfig(level=logging.INFO, handlers=[handler], force=True)
