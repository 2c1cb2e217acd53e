from __future__ import annotations

import dataclasses
import json

import requests

from services.sync_connector import SyncConnector
from utils.callout_logger import log_callout


def test_callout_trace_writes_jsonl(tmp_path, monkeypatch, settings):
    log_file = tmp_path / "trace" / "callouts.jsonl"
    monkeypatch.setenv("RUN_ID", "test-run-123")
    traced = dataclasses.replace(settings, callout_trace=True, callout_log_path=str(log_file))

    log_callout(
        traced,
        operation="pull",
        method="GET",
        url="https://profiles.test/users/1",
        status_code=200,
        duration_ms=42,
    )

    assert log_file.exists()
    rec = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert rec["operation"] == "pull"
    assert rec["status_code"] == 200
    assert rec["outcome"] == "ok"
    assert rec["run_id"] == "test-run-123"


def test_callout_trace_disabled_writes_nothing(tmp_path, settings):
    log_callout(settings, operation="push", method="POST", url="https://profiles.test/users/add")
    assert not (tmp_path / "callouts.jsonl").exists()


def test_connector_traces_every_callout(tmp_path, store, fake_http, settings, executor, profile_payload):
    log_file = tmp_path / "callouts.jsonl"
    traced = dataclasses.replace(settings, callout_trace=True, callout_log_path=str(log_file))
    fake_http.respond("GET", "https://profiles.test/users/1", 200, profile_payload)
    fake_http.fail("GET", "https://profiles.test/users/2", requests.exceptions.ConnectionError("down"))
    connector = SyncConnector(store, http=fake_http, settings=traced, executor=executor)

    connector.pull_and_upsert("1").result(timeout=5)
    connector.pull_and_upsert("2").exception(timeout=5)

    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    by_url = {r["url"]: r for r in records}
    assert by_url["https://profiles.test/users/1"]["status_code"] == 200
    failed = by_url["https://profiles.test/users/2"]
    assert failed["outcome"] == "transport_error"
    assert failed["status_code"] is None
    assert "down" in failed["error"]
