from __future__ import annotations

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional, Union

# Request-scoped values stamped onto every log line
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
principal_var: ContextVar[Optional[str]] = ContextVar("principal", default=None)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | principal=%(principal)s | %(message)s"

# Third-party loggers that are too chatty at INFO for an API log
_QUIET_LOGGERS = ("uvicorn.access", "passlib", "multipart")


class RequestContextFilter(logging.Filter):
    """Copy the correlation id and the ``ROLE:user_id`` principal label onto each record ("-" when unset)."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.correlation_id = correlation_id_var.get() or "-"
        record.principal = principal_var.get() or "-"
        return True


# PUBLIC_INTERFACE
@contextmanager
def request_context(correlation_id: str) -> Iterator[None]:
    """Bind a correlation id for the duration of a request; the principal starts unset."""
    cid_token = correlation_id_var.set(correlation_id)
    principal_token = principal_var.set(None)
    try:
        yield
    finally:
        correlation_id_var.reset(cid_token)
        principal_var.reset(principal_token)


# PUBLIC_INTERFACE
def bind_principal(label: Optional[str]) -> None:
    """Record the authenticated principal for the rest of the current request."""
    principal_var.set(label)


# PUBLIC_INTERFACE
def configure_logging(level: Union[int, str, None] = None) -> None:
    """
    Send all logging to stdout with the request context filter attached.

    ``level`` defaults to the LOG_LEVEL setting. Calling this again replaces
    the root handlers instead of stacking new ones.
    """
    if level is None:
        from franchise_api.core.settings import get_app_settings

        level = get_app_settings().LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
