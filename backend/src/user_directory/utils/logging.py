"""Structured logging utilities for the user directory Lambda.

Log lines are emitted as JSON so they can be queried with CloudWatch Logs
Insights. Each line carries the Lambda request id and the resolver field
being served, when set.

SECURITY NOTES:
- Use mask_email() when logging email addresses
- Never log temporary passwords or tokens
"""

from __future__ import annotations

import json
import logging
import os
import sys
import traceback
from contextvars import ContextVar
from datetime import datetime
from datetime import timezone
from typing import Any
from typing import Mapping
from typing import MutableMapping
from typing import Optional


def mask_email(email: str) -> str:
    """Mask an email address for safe logging.

    Examples:
        >>> mask_email("john.doe@example.com")
        'jo***@***.com'
        >>> mask_email("a@b.co")
        'a***@***.co'
    """
    if not email or "@" not in email:
        return "***"

    local, domain = email.rsplit("@", 1)
    domain_parts = domain.rsplit(".", 1)
    visible_local = local[:2] if len(local) > 2 else local[:1]
    tld = domain_parts[-1] if len(domain_parts) > 1 else ""

    return f"{visible_local}***@***.{tld}" if tld else f"{visible_local}***@***"


request_id: ContextVar[str] = ContextVar("request_id", default="")
resolver_field: ContextVar[str] = ContextVar("resolver_field", default="")


class StructuredLogFormatter(logging.Formatter):
    """JSON formatter including invocation context and exception details."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "source": {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            },
        }

        if request_id.get():
            log_data["request_id"] = request_id.get()
        if resolver_field.get():
            log_data["field_name"] = resolver_field.get()

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            log_data["exception"] = {
                "type": exc_type.__name__ if exc_type else None,
                "message": str(exc_value) if exc_value else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }

        context = getattr(record, "context", None)
        if isinstance(context, dict) and context:
            log_data["context"] = context

        return json.dumps(log_data, default=str)


class ContextLogger(logging.LoggerAdapter):
    """Logger adapter that collects call-site ``extra`` into one ``context`` field."""

    def process(
        self,
        msg: str,
        kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        context = dict(self.extra or {})
        context.update(kwargs.get("extra") or {})
        kwargs["extra"] = {"context": context}
        return msg, kwargs


def configure_logging(level: Optional[str] = None) -> None:
    """Install the JSON handler on the root logger.

    Args:
        level: Log level name. Defaults to LOG_LEVEL or INFO.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level or os.getenv("LOG_LEVEL") or "INFO")

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(StructuredLogFormatter())
    root_logger.addHandler(handler)

    for noisy in ("boto3", "botocore", "urllib3"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def get_logger(name: str) -> ContextLogger:
    return ContextLogger(logging.getLogger(name), {})


def set_request_context(
    req_id: Optional[str] = None,
    field_name: Optional[str] = None,
) -> None:
    """Attach the Lambda request id and/or resolver field to later log lines."""
    if req_id:
        request_id.set(req_id)
    if field_name:
        resolver_field.set(field_name)


def clear_request_context() -> None:
    request_id.set("")
    resolver_field.set("")


def log_resolver_event(logger: ContextLogger, event: Mapping[str, Any]) -> None:
    """Log the resolver field and argument names at DEBUG level.

    Argument values are left out because they may contain PII.
    """
    info = event.get("info")
    arguments = event.get("arguments")
    logger.debug(
        "Resolver event received",
        extra={
            "field_name": info.get("fieldName") if isinstance(info, Mapping) else None,
            "argument_names": sorted(arguments) if isinstance(arguments, Mapping) else [],
        },
    )
