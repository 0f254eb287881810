"""
Structured logging for the TomorrowDAO skill.

Library modules log through ``logging.getLogger(__name__)``. Front ends call
``configure_logging()`` once to emit JSON lines on stderr, keeping stdout
free for tool output.
"""
import json
import logging
import os
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

LEVELS = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

_SENSITIVE_KEYS = ("privatekey", "private_key", "accesstoken", "access_token", "authorization", "token")

_HANDLER_NAME = "tomorrowdao-json"


def parse_level(raw: Optional[str]) -> str:
    """Normalize a level name; anything unknown maps to ``error``"""
    value = (raw or "").lower()
    if value == "warning":
        value = "warn"
    return value if value in LEVELS else "error"


def sanitize(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Redact secrets from a mapping before it is logged.

    Args:
        fields: Key/value pairs to log

    Returns:
        Copy with private keys, tokens and authorization values replaced
    """
    out = {}
    for key, value in fields.items():
        if any(s in key.lower() for s in _SENSITIVE_KEYS):
            out[key] = "[REDACTED]"
        else:
            out[key] = value
    return out


class JsonLineFormatter(logging.Formatter):
    """Render records as one JSON object per line"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        fields = getattr(record, "fields", None)
        if isinstance(fields, Mapping):
            entry.update(sanitize(fields))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def configure_logging(level: Optional[str] = None) -> str:
    """
    Install the JSON stderr handler on the package logger.

    Args:
        level: error, warn, info or debug (defaults to TMRW_LOG_LEVEL)

    Returns:
        The level name that was applied
    """
    name = parse_level(level if level is not None else os.environ.get("TMRW_LOG_LEVEL", "error"))
    package_logger = logging.getLogger("tomorrowdao_skill")
    package_logger.setLevel(LEVELS[name])

    if not any(h.get_name() == _HANDLER_NAME for h in package_logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(JsonLineFormatter())
        package_logger.addHandler(handler)
        package_logger.propagate = False

    return name


def new_trace_id() -> str:
    """Generate a trace id for one tool invocation"""
    return str(uuid.uuid4())
