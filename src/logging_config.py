"""Configure shop logging using the Python standard library.

Sets up the root logger with a console handler and a rotating file
handler.  Records are formatted as JSON with timestamp, level, module and
message, plus ``transaction_id`` when the caller passes one and any keys
of an ``extra`` dict, e.g.::

    logger.info("Order committed", extra={"transaction_id": tx_id, "extra": {"total": "27.00"}})
"""

import json
import logging
import logging.handlers
import os
from datetime import datetime, timezone
from typing import Optional

from config import ShopSettings

LOG_FILE_NAME = "shop.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


class JsonFormatter(logging.Formatter):
    """Format log records as JSON strings."""

    def format(self, record: logging.LogRecord) -> str:
        log_record = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "module": record.module,
            "message": record.getMessage(),
        }
        if hasattr(record, "transaction_id"):
            log_record["transaction_id"] = getattr(record, "transaction_id")
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            # Merge into the top level rather than nesting under 'extra'
            log_record.update(extra)
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_record, default=str)


def configure_logging(settings: Optional[ShopSettings] = None, console_level: Optional[int] = None) -> logging.Logger:
    """Route all shop logging through JSON handlers chosen by ``settings``.

    The rotating file under ``settings.log_dir`` receives everything at
    ``settings.log_level``.  The console handler on stderr defaults to the
    same level; the interactive CLI raises it so log lines do not clutter
    the menus.  Calling this again replaces the previous handlers.
    """
    settings = settings or ShopSettings()
    level = settings.log_level_number
    os.makedirs(settings.log_dir, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    formatter = JsonFormatter()
    handlers = [
        (logging.StreamHandler(), level if console_level is None else console_level),
        (
            logging.handlers.RotatingFileHandler(
                filename=os.path.join(settings.log_dir, LOG_FILE_NAME),
                maxBytes=LOG_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8",
            ),
            level,
        ),
    ]
    for handler, handler_level in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(handler_level)
        root.addHandler(handler)
    return root
