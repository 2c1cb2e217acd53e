from __future__ import annotations

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional

import requests

from config.settings import Settings, get_settings
from exceptions import RemoteRejectedError, TransportFailureError
from ports import HttpClientPort, HttpResponsePort, PersonStorePort
from services.mapping import from_external_json, to_outbound_json
from utils.callout_logger import log_callout


logger = logging.getLogger(__name__)


class SyncOutcome(str, Enum):
    UPSERTED = "upserted"
    STAMPED = "stamped"
    REJECTED = "rejected"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SyncConnector:
    """Runs pull and push callouts against the profile API off the caller's thread.

    Each public operation submits one unit of work to the worker pool and
    returns its Future right away. The unit issues exactly one HTTP request.
    Transport failures, malformed bodies and missing records fail that Future;
    unexpected statuses are logged and resolve it with SyncOutcome.REJECTED.
    """

    def __init__(
        self,
        store: PersonStorePort,
        http: Optional[HttpClientPort] = None,
        settings: Optional[Settings] = None,
        executor: Optional[ThreadPoolExecutor] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.store = store
        self._owns_http = http is None
        self.http: HttpClientPort = http or requests.Session()
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(
            max_workers=self.settings.callout_concurrency,
            thread_name_prefix="callout",
        )
        self.clock = clock or _utcnow

    # --- Scheduling ---
    def pull_and_upsert(self, external_id: str) -> "Future[SyncOutcome]":
        """Schedule a pull of /users/{external_id} and an upsert of the result."""
        return self._submit("pull", self.pull_and_upsert_now, str(external_id))

    def push_and_stamp_update(self, local_id: int) -> "Future[SyncOutcome]":
        """Schedule a push of record local_id and the last-synced stamp on success.

        The Future fails with RecordNotFoundError when local_id has no row, and
        with TransportFailureError when no response arrives.
        """
        return self._submit("push", self.push_and_stamp_update_now, local_id)

    def _submit(self, op: str, fn: Callable[[Any], SyncOutcome], key: Any) -> "Future[SyncOutcome]":
        future = self.executor.submit(fn, key)
        future.add_done_callback(lambda f: self._report(op, key, f))
        return future

    def _report(self, op: str, key: Any, future: "Future[SyncOutcome]") -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is None:
            return
        key_field = "external_id" if op == "pull" else "record_id"
        logger.error("Callout failed", extra={"op": op, key_field: key, "error": repr(exc)})

    # --- Units of work ---
    def pull_and_upsert_now(self, external_id: str) -> SyncOutcome:
        url = f"{self.settings.users_url}/{external_id}"
        response = self._send("pull", "GET", url)
        try:
            self._expect(response, lambda status: status == 200)
        except RemoteRejectedError as exc:
            logger.warning(
                "Profile fetch rejected; store untouched: %s",
                exc.body,
                extra={"op": "pull", "external_id": external_id, "status": exc.status_code},
            )
            return SyncOutcome.REJECTED

        person = from_external_json(response.text)
        record_id = self.store.upsert_by_external_id(person)
        logger.info(
            "Upserted profile",
            extra={"op": "pull", "external_id": person.external_id, "record_id": record_id, "status": 200},
        )
        return SyncOutcome.UPSERTED

    def push_and_stamp_update_now(self, local_id: int) -> SyncOutcome:
        person = self.store.get_by_id(local_id)
        payload = to_outbound_json(person)
        url = f"{self.settings.users_url}/add"
        response = self._send(
            "push",
            "POST",
            url,
            json=payload,
            headers={"Content-Type": "application/json"},
        )
        try:
            self._expect(response, lambda status: 200 <= status < 300)
        except RemoteRejectedError as exc:
            logger.warning(
                "Profile push rejected; record not stamped: %s",
                exc.body,
                extra={"op": "push", "record_id": local_id, "status": exc.status_code},
            )
            return SyncOutcome.REJECTED

        # Only the timestamp changes; the response body is not merged back
        self.store.update_field(local_id, "last_synced_at", self.clock())
        logger.info(
            "Pushed record and stamped last sync",
            extra={"op": "push", "record_id": local_id, "status": response.status_code},
        )
        return SyncOutcome.STAMPED

    # --- Transport ---
    def _send(self, op: str, method: str, url: str, **kwargs: Any) -> HttpResponsePort:
        timeout = self.settings.http_timeout_seconds
        t0 = time.monotonic()
        try:
            if method == "GET":
                response = self.http.get(url, timeout=timeout, **kwargs)
            else:
                response = self.http.post(url, timeout=timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            duration_ms = int((time.monotonic() - t0) * 1000)
            log_callout(
                self.settings,
                operation=op,
                method=method,
                url=url,
                duration_ms=duration_ms,
                outcome="transport_error",
                error=str(exc),
            )
            raise TransportFailureError(f"{method} {url} failed: {exc}") from exc

        duration_ms = int((time.monotonic() - t0) * 1000)
        log_callout(
            self.settings,
            operation=op,
            method=method,
            url=url,
            status_code=response.status_code,
            duration_ms=duration_ms,
        )
        logger.debug(
            "%s %s", method, url, extra={"op": op, "status": response.status_code, "duration_ms": duration_ms}
        )
        return response

    @staticmethod
    def _expect(response: HttpResponsePort, accept: Callable[[int], bool]) -> None:
        if not accept(response.status_code):
            raise RemoteRejectedError(response.status_code, response.text)

    # --- Lifecycle ---
    def close(self, wait: bool = True) -> None:
        if self._owns_executor:
            self.executor.shutdown(wait=wait)
        if self._owns_http and hasattr(self.http, "close"):
            self.http.close()

    def __enter__(self) -> "SyncConnector":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close(wait=True)
