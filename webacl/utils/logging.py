"""Logging for webacl.

Library modules only ask for loggers through :func:`get_logger` and attach
context such as the subject id of a rule or the actor of a grant with
``extra=``. Handlers are installed solely by the ``webacl`` command, which calls
:func:`configure_logging` with the level from :class:`AclSettings`: edits end up
as JSON lines in ``webacl.log`` and the terminal gets Rich output.
"""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render a record as one JSON object per line.

    Context passed with ``extra=`` (``subject``, ``actor``, ``fragments`` and
    so on) is copied verbatim so rule edits can be traced by subject id.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="seconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update({key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS})
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def logging_config(level: str, log_dir: Path, *, rich_console: bool) -> Dict[str, Any]:
    """Build the ``dictConfig`` mapping used by :func:`configure_logging`."""

    console: Dict[str, Any]
    if rich_console:
        console = {
            "class": "rich.logging.RichHandler",
            "formatter": "plain",
            "rich_tracebacks": True,
            "show_path": False,
        }
    else:
        console = {"class": "logging.StreamHandler", "formatter": "json"}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": "webacl.utils.logging.JsonFormatter"},
            "plain": {"format": "%(message)s", "datefmt": "%H:%M:%S"},
        },
        "handlers": {
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "formatter": "json",
                "filename": str(log_dir / "webacl.log"),
                "maxBytes": 1024 * 1024,
                "backupCount": 3,
                "encoding": "utf-8",
            },
            "console": console,
        },
        "root": {"level": level.upper(), "handlers": ["file", "console"]},
    }


def configure_logging(*, level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    """Install the webacl handlers on the root logger.

    ``log_dir`` defaults to ``$WEBACL_LOG_DIR`` or ``~/.webacl/logs``. Set
    ``WEBACL_RICH=0`` to get JSON on the console too, e.g. when the CLI runs
    under a log collector. Calling it again replaces the handlers.
    """

    log_dir = log_dir or Path(os.environ.get("WEBACL_LOG_DIR", Path.home() / ".webacl" / "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)
    rich_console = os.environ.get("WEBACL_RICH", "1") != "0"
    logging.config.dictConfig(logging_config(level, log_dir, rich_console=rich_console))


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger", "logging_config", "JsonFormatter"]
