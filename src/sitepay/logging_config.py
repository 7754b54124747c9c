"""JSON-line logging for sitepay.

Services log an event name as the message and put the details in
``extra=``; the formatter here writes those extras out next to the
standard envelope so each line carries its request ids, users and amounts.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional

_LOGGER_PREFIX = "sitepay"

_STDLIB_KEYS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()) | {"message", "taskName"}


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            exc = record.exc_info[1]
            payload["exc_type"] = type(exc).__name__
            payload["exc_message"] = str(exc)
            code = getattr(exc, "code", None)
            if code is not None:
                payload["exc_code"] = code
            payload["traceback"] = self.formatException(record.exc_info)

        # Decimal, date, enum and UUID values fall back to str()
        return json.dumps(payload, default=str)


def configure_logging(
    level: str | int = logging.INFO,
    *,
    stream: Any = None,
    handler: Optional[logging.Handler] = None,
) -> logging.Logger:
    """Route the ``sitepay`` logger tree through one structured handler.

    Calling it again replaces the handler instead of stacking another one,
    so ``create_app`` can run many times in one process.
    """

    if isinstance(level, str):
        level = level.upper()

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level)
    root.propagate = False

    for old in [h for h in root.handlers if isinstance(h.formatter, StructuredFormatter)]:
        root.removeHandler(old)

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    root.addHandler(h)
    return root
