from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from app.core.settings import settings

_LOGGER_NAME = "currencies"
_configured = False


class _JsonFormatter(logging.Formatter):
    """
    One JSON object per line; structured fields ride on `record.fields`.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts_ms": int(record.created * 1000),
            "level": record.levelname.lower(),
            "service": settings.SERVICE_NAME,
            "version": settings.VERSION,
            "event": record.getMessage(),
        }
        fields = getattr(record, "fields", None)
        if isinstance(fields, dict):
            payload.update(fields)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, sort_keys=True, default=str)


def get_logger() -> logging.Logger:
    """
    Package logger. A handler is attached once; applications that configure
    logging themselves can disable it with LOG_JSON=false.
    """
    global _configured
    logger = logging.getLogger(_LOGGER_NAME)
    if not _configured:
        logger.setLevel(settings.LOG_LEVEL.upper())
        if settings.LOG_JSON:
            handler = logging.StreamHandler()
            handler.setFormatter(_JsonFormatter())
            logger.addHandler(handler)
            logger.propagate = False
        _configured = True
    return logger


def build_log_context(
    *,
    currency: Optional[str] = None,
    tx_id: Optional[str] = None,
    **extra: Any,
) -> Dict[str, Any]:
    ctx: Dict[str, Any] = {}
    if currency:
        ctx["currency"] = currency
    if tx_id:
        ctx["tx_id"] = tx_id
    for k, v in extra.items():
        if v is not None:
            ctx[k] = v
    return ctx


def log_event(event: str, *, level: str = "info", **fields: Any) -> None:
    logger = get_logger()
    lvl = logging.getLevelName(level.upper())
    if not isinstance(lvl, int):
        lvl = logging.INFO
    logger.log(lvl, event, extra={"fields": fields})
