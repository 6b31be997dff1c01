"""JSON log lines for the ballot engine and its hosts.

Ballot operations attach their context (voter, proposal id, phases, rejected
operation) with `extra=`; the formatter nests those fields under `extra` so a
line can be filtered by voter or operation without parsing the message.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import UTC, datetime
from typing import Any, TextIO

# Fields present on a bare LogRecord. Anything beyond these arrived via `extra=`.
_BUILTIN_FIELDS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _BUILTIN_FIELDS and not key.startswith("_")
    }


class JsonFormatter(logging.Formatter):
    """One JSON object per record: time, level, logger, message, then context."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context = _extra_fields(record)
        if context:
            line["extra"] = context
        if record.exc_info:
            line["exception"] = self.formatException(record.exc_info)

        # Events and enums in `extra` fall back to their str() form.
        return json.dumps(line, ensure_ascii=False, default=str)


def configure_logging(level: str, *, stream: TextIO | None = None) -> None:
    """Send every logger's output through one JSON handler at ``level``.

    Calling it again replaces the handler rather than adding a second one.
    """

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)

    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.setFormatter(JsonFormatter())
    root.addHandler(handler)
    root.setLevel(level.upper())

    # uvicorn's per-request access lines stay at INFO or above.
    logging.getLogger("uvicorn.access").setLevel(max(root.level, logging.INFO))
