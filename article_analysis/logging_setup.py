"""
Logging setup with per-request context.

Cloud Functions forward stdout to Cloud Logging, which parses single-line
JSON into structured entries. Each analysis gets a request_id that is
attached to every record emitted while it runs.

Usage:
    >>> setup_logging(settings)
    >>> set_request_context('a1b2c3')
    >>> logger.info('Fetching article')  # includes request_id
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

HANDLER_NAME = 'article_analysis'

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar('request_id', default='-')

# Attributes every LogRecord has; anything else came in through `extra=`
_RESERVED_ATTRS = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'exc_info', 'exc_text',
    'thread', 'threadName', 'taskName', 'request_id', 'message',
})


def set_request_context(request_id: str) -> contextvars.Token:
    """Set the request id for log correlation. Returns a token for reset."""
    return request_id_var.set(request_id)


def clear_request_context(token: contextvars.Token = None) -> None:
    if token is not None:
        request_id_var.reset(token)
    else:
        request_id_var.set('-')


class ContextFilter(logging.Filter):
    """Injects request_id into every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get()
        return True


class JsonFormatter(logging.Formatter):
    """
    Single-line JSON formatter.

    Uses 'severity' rather than 'level' so Cloud Logging maps it directly.
    Extra fields passed with `extra=` are included when JSON-serializable.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'severity': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'request_id': getattr(record, 'request_id', '-'),
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """Format: TIME [LEVEL] [request_id] logger: message"""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s [%(levelname)s] [%(request_id)s] %(name)s: %(message)s',
            datefmt='%H:%M:%S',
        )


def setup_logging(settings: Any) -> None:
    """
    Configure the root logger with a single stdout handler.

    Safe to call more than once; a handler installed by an earlier call is
    replaced, handlers installed by anything else are left alone.

    Args:
        settings: Object with log_level and log_format attributes
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(getattr(logging, settings.log_level, logging.INFO))
    handler.setFormatter(JsonFormatter() if settings.log_format == 'json' else TextFormatter())
    handler.addFilter(ContextFilter())
    handler.name = HANDLER_NAME

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for existing in root.handlers[:]:
        if existing.name == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)

    # Reduce noise from third-party libraries
    for lib in ('urllib3', 'requests', 'google', 'grpc'):
        logging.getLogger(lib).setLevel(logging.WARNING)
