"""VTN Logging: one JSON line per record, carrying entity and scope context.

Invariants:
    - Every line has timestamp (record creation time, UTC), level, logger and message
    - Only whitelisted extras are emitted: entity_kind, entity_id, scope (the resolved
      Scope.describe() text), error_code and path; anything else a caller attaches stays out
    - Extras that are not JSON-native (frozensets of ids, enums) are written as text
      rather than dropping the line
    - setup_logging replaces the handler it installed before, so a restarted lifespan
      never doubles every line

Design Decisions:
    - stdlib logging plus a formatter: services log with `extra=` and stay unaware of format
    - log_format "text" for local runs, "json" (default) for collectors
"""

import logging
import json
from datetime import datetime, timezone

EXTRA_KEYS = ("entity_kind", "entity_id", "scope", "error_code", "path")

_HANDLER_NAME = "vtn"


class JSONFormatter(logging.Formatter):
    """Format records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_KEYS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install the VTN handler on the root logger, replacing an earlier one."""
    for existing in list(logging.root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            logging.root.removeHandler(existing)
    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(entity_kind)s] %(message)s",
            defaults={"entity_kind": "-"},
        ))
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
