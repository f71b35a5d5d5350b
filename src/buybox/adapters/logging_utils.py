import json
import logging
import sys
import time
from typing import Any, MutableMapping

from .config import config

# context keys emitted right after the base fields, in this order
DEAL_CONTEXT_KEYS = ("deal_id", "property_id", "status")


class JsonLogFormatter(logging.Formatter):
    """One JSON object per line; `record.context` keys are lifted to the top level."""

    def format(self, record):
        payload: dict[str, Any] = {
            "ts": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        ctx = getattr(record, "context", None)
        if isinstance(ctx, dict):
            for key in DEAL_CONTEXT_KEYS:
                if key in ctx:
                    payload[key] = ctx[key]
            for key, value in ctx.items():
                # the base fields above win over a colliding context key
                payload.setdefault(key, value)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class DealLogAdapter(logging.LoggerAdapter):
    """
    Carries deal-scoped context (deal_id, property_id, ...) on every call.

    Per-call `extra={"context": {...}}` is merged on top of the bound
    context, so a call can add keys or override a bound one.
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        context = {**self.extra, **(extra.get("context") or {})}
        extra["context"] = context
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **context: Any) -> "DealLogAdapter":
        return DealLogAdapter(self.logger, {**self.extra, **context})


def bind(logger: logging.Logger | DealLogAdapter, **context: Any) -> DealLogAdapter:
    """Return `logger` with `context` attached to every record it emits."""
    if isinstance(logger, DealLogAdapter):
        return logger.bind(**context)
    return DealLogAdapter(logger, context)


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonLogFormatter())
        logger.addHandler(handler)
        logger.setLevel(config.LOG_LEVEL)
        logger.propagate = False
    return logger
