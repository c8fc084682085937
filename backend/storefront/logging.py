import json
import logging
import sys
from datetime import datetime, timezone

# LogRecord attributes that are not user-supplied `extra` fields
_RESERVED = {
    "msg",
    "args",
    "levelname",
    "levelno",
    "name",
    "created",
    "msecs",
    "relativeCreated",
    "pathname",
    "filename",
    "module",
    "lineno",
    "funcName",
    "exc_info",
    "exc_text",
    "stack_info",
    "thread",
    "threadName",
    "processName",
    "process",
    "taskName",
    "message",
}


class JsonFormatter(logging.Formatter):
    """JSON formatter for service logs.

    Merges time, level, logger name and message with any attributes passed via
    `extra` on the log record (e.g. event, session_id, order_id).
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED:
                continue
            try:
                json.dumps(value)
                payload.setdefault(key, value)
            except TypeError:
                payload.setdefault(key, str(value))
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def configure_logging(level: str = "INFO", json_output: bool = False) -> logging.Logger:
    """Attach a single stdout handler to the `storefront` logger tree."""
    logger = logging.getLogger("storefront")
    logger.setLevel(level.upper())
    if not logger.handlers:
        h = logging.StreamHandler(sys.stdout)
        if json_output:
            h.setFormatter(JsonFormatter())
        else:
            h.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(h)
    return logger
