"""Logging setup for the MCP server.

Installs a console handler on the root logger using either a JSON or a
plain-text format. Production deployments also get ``error.log`` and
``combined.log`` file handlers.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

SERVICE_NAME = "mcp-server"

TEXT_FORMAT = "%(asctime)s [%(levelname)s]: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            "service": SERVICE_NAME,
        }
        if record.exc_info:
            payload["stack"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def build_formatter(fmt: str) -> logging.Formatter:
    if fmt == "json":
        return JsonFormatter()
    return logging.Formatter(TEXT_FORMAT)


def configure_logging(level: str = "info", fmt: str = "json", environment: str = "development") -> None:
    """Configure the root logger.

    Safe to call more than once; previously installed handlers are replaced.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)

    formatter = build_formatter(fmt)
    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if environment == "production":
        error_handler = logging.FileHandler("error.log")
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)
        handlers.append(logging.FileHandler("combined.log"))

    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)

    root.setLevel(level.upper())
