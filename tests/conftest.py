from __future__ import annotations

import json
import os
import sys
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest


def pytest_configure():
    # Ensure project root is on sys.path for absolute imports like 'services.mapping'
    root = Path(__file__).resolve().parents[1]
    if str(root) not in sys.path:
        sys.path.insert(0, str(root))
    # Set test environment knobs
    os.environ.setdefault("RUN_ENV", "test")


BASE_URL = "https://profiles.test"


class FakeResponse:
    def __init__(self, status_code: int, body: Any = "") -> None:
        self.status_code = status_code
        self.text = body if isinstance(body, str) else json.dumps(body)

    def json(self) -> Any:
        return json.loads(self.text)


class FakeHttp:
    """Stands in for requests.Session; unrouted URLs answer 404."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.calls: List[Dict[str, Any]] = []
        self.closed = False
        self._lock = threading.Lock()

    def respond(self, method: str, url: str, status: int, body: Any = "") -> None:
        self.routes[(method, url)] = FakeResponse(status, body)

    def fail(self, method: str, url: str, exc: Exception) -> None:
        self.routes[(method, url)] = exc

    def _handle(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        with self._lock:
            self.calls.append({"method": method, "url": url, **kwargs})
        route = self.routes.get((method, url), FakeResponse(404, "not found"))
        if isinstance(route, Exception):
            raise route
        return route

    def get(self, url: str, *, timeout: Optional[float] = None, **kwargs: Any) -> FakeResponse:
        return self._handle("GET", url, timeout=timeout, **kwargs)

    def post(self, url: str, *, json: Any = None, headers: Optional[Dict[str, str]] = None, timeout: Optional[float] = None, **kwargs: Any) -> FakeResponse:
        return self._handle("POST", url, json=json, headers=headers, timeout=timeout, **kwargs)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings(tmp_path):
    from config.settings import Settings

    return Settings(
        profile_api_base_url=BASE_URL,
        http_timeout_seconds=5,
        callout_concurrency=2,
        pull_max_external_id=100,
        db_path=str(tmp_path / "people.db"),
        run_env="test",
        log_level="DEBUG",
        callout_trace=False,
        callout_log_path=str(tmp_path / "callouts.jsonl"),
    )


@pytest.fixture
def conn(tmp_path):
    from db import schema
    from db.connection import get_connection

    connection = get_connection(str(tmp_path / "people.db"))
    schema.bootstrap(connection)
    try:
        yield connection
    finally:
        connection.close()


@pytest.fixture
def store(conn):
    from db.repos.people_repo import PeopleRepo

    return PeopleRepo(conn)


@pytest.fixture
def fake_http():
    return FakeHttp()


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="test-callout")
    try:
        yield pool
    finally:
        pool.shutdown(wait=True)


@pytest.fixture
def connector(store, fake_http, settings, executor):
    from services.sync_connector import SyncConnector

    return SyncConnector(store, http=fake_http, settings=settings, executor=executor)


@pytest.fixture
def profile_payload():
    return {
        "id": 1,
        "firstName": "A",
        "lastName": "B",
        "email": "a@b.com",
        "phone": "123",
        "birthDate": "2000-01-01",
        "address": {
            "address": "X",
            "city": "Y",
            "postalCode": "1",
            "state": "S",
            "country": "C",
        },
    }


@pytest.fixture
def db_snapshot(conn):
    def _snapshot() -> List[str]:
        return list(conn.iterdump())

    return _snapshot
