"""Logging setup for the tracker API: plain text locally, one JSON object per line in production."""

import json
import logging
import sys
from datetime import datetime, timezone

from ai_visibility.core.config import settings

SERVICE_NAME = "ai-visibility-tracker"

# Attributes callers attach through ``extra=`` that are worth indexing
CONTEXT_FIELDS = ("request_id", "project_id", "provider")

TEXT_FORMAT = f"%(asctime)s | %(levelname)-8s | {SERVICE_NAME} | %(name)s | %(message)s"


class JSONFormatter(logging.Formatter):
    def __init__(self, env: str | None = None):
        super().__init__()
        self.env = env or settings.app_env

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "env": self.env,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in CONTEXT_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_data[name] = value
        if record.exc_info and record.exc_info[1]:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, ensure_ascii=False, default=str)


def setup_logging() -> None:
    level = getattr(logging, settings.log_level.upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if settings.log_json:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)

    # Provider calls go through httpx; its per-request INFO lines would drown the check summaries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING if not settings.app_debug else level)
