from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from config.settings import Settings


logger = logging.getLogger(__name__)


def log_callout(
    settings: Settings,
    *,
    operation: str,
    method: str,
    url: str,
    status_code: Optional[int] = None,
    duration_ms: Optional[int] = None,
    outcome: str = "ok",
    error: Optional[str] = None,
) -> None:
    """Append a single JSON line describing an HTTP callout if tracing is enabled."""
    if not settings.callout_trace:
        return

    payload: Dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "operation": operation,
        "method": method,
        "url": url,
        "status_code": status_code,
        "duration_ms": duration_ms,
        "outcome": outcome,
        "error": error,
    }
    run_id = os.getenv("RUN_ID")
    if run_id:
        payload["run_id"] = run_id

    log_path = Path(settings.callout_log_path)
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with log_path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False) + "\n")
    except OSError as exc:
        # Tracing must never fail a callout
        logger.warning("Could not write callout trace", extra={"op": operation, "error": str(exc)})
