import logging
import sys
import json
from datetime import datetime, timezone

# Attributes passed through `extra=` that end up as top-level JSON keys
CONTEXT_FIELDS = ("tenant_id", "branch_id", "member_id", "terminal_id", "job")


class JSONFormatter(logging.Formatter):
    """One JSON object per line, tagged with the process role (api/scheduler)"""

    def __init__(self, service: str):
        super().__init__()
        self.service = service

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value
        if record.exc_info and record.exc_info[0]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging(debug: bool = False, service: str = "api"):
    """Route every logger to stdout as JSON"""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter(f"gymdesk-{service}"))

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if debug else logging.INFO)
    root.handlers.clear()
    root.addHandler(handler)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    # every kiosk tap is an access log line otherwise
    logging.getLogger("uvicorn.access").setLevel(logging.INFO if debug else logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
