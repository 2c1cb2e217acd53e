from __future__ import annotations

import logging
import os
import sys
from typing import Any

from config.settings import get_settings


_INITIALIZED: bool = False


class SafeExtraFormatter(logging.Formatter):
    """Formatter that tolerates missing extra fields by injecting defaults.

    Each record also carries run_id, taken from RUN_ID when the caller did not
    pass one, so log lines line up with the callout trace of the same run.
    """

    DEFAULTS: dict[str, Any] = {
        "op": "-",
        "external_id": "-",
        "record_id": "-",
        "status": "-",
        "duration_ms": "-",
        "error": "-",
        "run_id": "-",
    }

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        if not hasattr(record, "run_id") and os.getenv("RUN_ID"):
            record.run_id = os.getenv("RUN_ID")
        for key, value in self.DEFAULTS.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return super().format(record)


def init_logging(level: str | None = None) -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return

    settings = get_settings()
    log_level_str = (level or settings.log_level).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(log_level)
        formatter = SafeExtraFormatter(
            fmt=(
                "%(asctime)s %(levelname)s %(name)s [%(threadName)s] run=%(run_id)s %(message)s "
                "op=%(op)s external_id=%(external_id)s record_id=%(record_id)s "
                "status=%(status)s duration_ms=%(duration_ms)s error=%(error)s"
            )
        )
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    _INITIALIZED = True
