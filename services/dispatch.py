from __future__ import annotations

import logging
import random
from concurrent.futures import Future, wait
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from config.settings import Settings, get_settings
from exceptions import InvalidIdentifierError, SyncError
from models import PersonRecord
from ports import PersonStorePort
from services.sync_connector import SyncConnector


logger = logging.getLogger(__name__)


def parse_external_id(value: Any, record_id: Optional[int] = None) -> int:
    """Read an external-id as an integer for range routing."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise InvalidIdentifierError(value, record_id) from exc


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


@dataclass
class DispatchReport:
    pulls: List[Future] = field(default_factory=list)
    pushes: List[Future] = field(default_factory=list)
    assigned: Dict[int, str] = field(default_factory=dict)
    failures: List[Tuple[Optional[int], Exception]] = field(default_factory=list)

    @property
    def futures(self) -> List[Future]:
        return self.pulls + self.pushes

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until every scheduled callout finished (CLI/tests only)."""
        if self.futures:
            wait(self.futures, timeout=timeout)


class DispatchPolicy:
    """Routes mutated person records to the pull or push callout.

    Creation: a missing external-id gets a random value in [0, max] and is
    persisted; any external-id <= max then schedules a pull.
    Update: an external-id > max schedules a push. The boundary itself pulls
    on create and never pushes on update.
    """

    def __init__(
        self,
        connector: SyncConnector,
        store: PersonStorePort,
        rng: Optional[random.Random] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self.connector = connector
        self.store = store
        self.rng = rng or random.Random()
        self.settings = settings or connector.settings or get_settings()
        self.max_pull_id = self.settings.pull_max_external_id

    def on_create(self, records: Iterable[PersonRecord]) -> DispatchReport:
        report = DispatchReport()
        for record in records:
            self._guarded("create", record, report, self._handle_create)
        return report

    def on_update(self, records: Iterable[PersonRecord]) -> DispatchReport:
        report = DispatchReport()
        for record in records:
            self._guarded("update", record, report, self._handle_update)
        return report

    def _guarded(self, event: str, record: PersonRecord, report: DispatchReport, handler) -> None:
        # A bad record never stops the rest of the batch
        try:
            handler(record, report)
        except SyncError as exc:
            logger.warning(
                "Dispatch skipped record",
                extra={"op": event, "record_id": record.id, "external_id": record.external_id, "error": str(exc)},
            )
            report.failures.append((record.id, exc))
        except Exception as exc:
            logger.exception(
                "Dispatch failed for record",
                extra={"op": event, "record_id": record.id, "external_id": record.external_id, "error": repr(exc)},
            )
            report.failures.append((record.id, exc))

    def _handle_create(self, record: PersonRecord, report: DispatchReport) -> None:
        external_id = record.external_id
        if _is_blank(external_id):
            external_id = self._draw_external_id()
            self.store.update_field(record.id, "external_id", external_id)
            report.assigned[record.id] = external_id
            logger.info(
                "Assigned external id",
                extra={"op": "create", "record_id": record.id, "external_id": external_id},
            )

        number = parse_external_id(external_id, record.id)
        if number > self.max_pull_id:
            return
        # The upsert keys on the profile's own id, so the record must hold that exact form
        canonical = str(number)
        if external_id != canonical:
            self.store.update_field(record.id, "external_id", canonical)
            logger.info(
                "Normalized external id",
                extra={"op": "create", "record_id": record.id, "external_id": canonical},
            )
        report.pulls.append(self.connector.pull_and_upsert(canonical))

    def _draw_external_id(self) -> str:
        # Uniform start in [0, max], then probe forward past values already held
        span = self.max_pull_id + 1
        start = self.rng.randint(0, self.max_pull_id)
        for offset in range(span):
            candidate = str((start + offset) % span)
            if self.store.get_by_external_id(candidate) is None:
                return candidate
        raise SyncError(f"No free external id in [0, {self.max_pull_id}]")

    def _handle_update(self, record: PersonRecord, report: DispatchReport) -> None:
        if _is_blank(record.external_id):
            return
        if parse_external_id(record.external_id, record.id) > self.max_pull_id:
            report.pushes.append(self.connector.push_and_stamp_update(record.id))
