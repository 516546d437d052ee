"""Structured logging helpers built on the standard logging module."""

from __future__ import annotations

import json
import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RESERVED_ATTRS = frozenset(logging.LogRecord("", 0, "", 0, "", (), None).__dict__) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
        }
        # merge extra dict if provided via logger.info(event, extra={...})
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key.startswith("_"):
                continue
            if key in payload:
                continue
            payload[key] = value
        if record.exc_info and "stack" not in payload:
            payload["stack"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def configure_logging(level_name: str = "INFO", json_enabled: bool = False) -> None:
    level = getattr(logging, level_name.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    # Clear existing handlers to avoid duplicates when reconfiguring
    for h in list(root.handlers):
        root.removeHandler(h)
    handler = logging.StreamHandler()
    if json_enabled:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def format_stack(exc: BaseException) -> str:
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))


def log_ingest_error(
    logger: logging.Logger,
    event: str,
    fallback_code: str,
    exc: BaseException,
    *,
    force_code: bool = False,
    **context: Any,
) -> None:
    """Emit an error event with a machine-readable code, the stack and context ids.

    The error's own ``IngestError.code`` wins over ``fallback_code`` unless
    ``force_code`` is set, in which case it is kept as ``cause_code``.
    """
    from newsfeed.errors import IngestError

    own_code = exc.code if isinstance(exc, IngestError) else None
    details = dict(exc.details) if isinstance(exc, IngestError) else {}
    extra: Dict[str, Any] = {**details, **context}
    if force_code or own_code is None:
        extra["code"] = fallback_code
        if own_code is not None:
            extra["cause_code"] = own_code
    else:
        extra["code"] = own_code
    extra.update({"error": str(exc) or type(exc).__name__, "stack": format_stack(exc)})
    logger.error(event, extra=extra)
