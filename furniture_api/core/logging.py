"""
Logging setup shared by the API, the migration runner and the seed script.

Every record carries the request correlation id and the authenticated user id
(``-`` outside a request) so one checkout can be followed across services,
repositories and payment gateways.
"""
from __future__ import annotations

import logging
import sys
from contextvars import ContextVar
from typing import Optional, Union

from furniture_api.core.settings import get_app_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | cid=%(correlation_id)s | user=%(user_id)s | %(message)s"

# Third-party loggers that are chatty at INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "stripe")

correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)
user_id_var: ContextVar[Optional[str]] = ContextVar("user_id", default=None)


class LoggingContextFilter(logging.Filter):
    """Copy the request context variables onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        record.correlation_id = correlation_id_var.get() or "-"
        record.user_id = user_id_var.get() or "-"
        return True


# PUBLIC_INTERFACE
def configure_logging(level: Union[int, str, None] = None) -> None:
    """
    Install a single stdout handler on the root logger.

    Parameters:
        level: logging level name or number; defaults to AppSettings.LOG_LEVEL.

    Calling it again replaces the handler instead of stacking a second one.
    """
    if level is None:
        level = get_app_settings().LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    handler.addFilter(LoggingContextFilter())

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    quiet_level = max(logging.WARNING, level) if isinstance(level, int) else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
