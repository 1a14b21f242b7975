import asyncio
import json

import pytest

from automation_router.errors import RouterExecutionError
from automation_router.models.schemas.credentials import RouterCredentials
from automation_router.services.router_engine import AutomationRouter


def run(router, records, config):
    return asyncio.run(router.run(records, config))


# 1. One stored trx_id -> held back, the rest delivered and recorded
def test_regular_run_skips_duplicates_and_records_deliveries(make_router, router_config, record_factory, pixel, seed_tokens, stored_trx_ids):
    seed_tokens("T2")
    records = [record_factory("T1"), record_factory("T2"), record_factory("T3")]

    report = run(make_router(), records, router_config())

    assert report["execution"]["mode"] == "regular"
    assert report["execution"]["dry_run"] is False
    assert report["execution"]["timestamp"] == "2026-01-15T12:30:00.000Z"
    assert report["summary"] == {
        "total_input": 3,
        "duplicates_found": 1,
        "sent_to_pixel": 2,
        "pixel_success": 2,
        "pixel_failed": 0,
        "inserted_to_db": 2,
    }
    assert report["details"]["duplicate_trx_ids"] == ["T2"]
    assert report["details"]["failed_sends"] == []
    assert set(report["metrics"]) == {"mysql_check_ms", "pixel_send_ms", "mysql_insert_ms"}
    assert [p["trxId"] for p in pixel.sent] == ["T1", "T3"]
    assert stored_trx_ids() == {"T1", "T2", "T3"}
    # Inputs are not mutated by delivery
    assert "status" not in records[0]


# 2. Dry run: lookups only, nothing sent or inserted
def test_regular_dry_run_reports_preview_without_side_effects(make_router, router_config, record_factory, pixel, seed_tokens, stored_trx_ids):
    seed_tokens("T0")
    records = [record_factory(f"T{i}") for i in range(12)]

    report = run(make_router(), records, router_config(dryRun=True))

    assert report["execution"]["dry_run"] is True
    assert report["summary"] == {
        "total_input": 12,
        "duplicates_found": 1,
        "would_send_to_pixel": 11,
        "status": "DRY_RUN_SKIPPED",
    }
    assert report["details"]["new_events_total"] == 11
    assert [r["trx_id"] for r in report["details"]["new_events_preview"]] == [f"T{i}" for i in range(1, 11)]
    assert "failed_sends" not in report["details"]
    assert set(report["metrics"]) == {"mysql_check_ms"}
    assert pixel.sent == []
    assert stored_trx_ids() == {"T0"}


# 4. Pixel rejects one record -> it is reported, the others still go out
def test_regular_run_reports_rejected_records(make_router, router_config, record_factory, pixel, stored_trx_ids):
    pixel.responses["T2"] = json.dumps({"status": "ERROR", "error": "bad trx"})
    records = [record_factory("T1"), record_factory("T2", io_id="IO7"), record_factory("T3")]

    report = run(make_router(), records, router_config())

    assert report["summary"]["pixel_success"] == 2
    assert report["summary"]["pixel_failed"] == 1
    assert report["details"]["failed_sends"] == [{
        "trx_id": "T2",
        "io_id": "IO7",
        "error": "bad trx",
        "amount": "100.00",
        "commission_amount": "10.00",
    }]
    assert [p["trxId"] for p in pixel.sent] == ["T1", "T2", "T3"]
    # Only delivered records are recorded
    assert stored_trx_ids() == {"T1", "T3"}


def test_skip_dedup_sends_everything(make_router, router_config, record_factory, pixel, seed_tokens, stored_trx_ids):
    seed_tokens("T1")
    report = run(make_router(), [record_factory("T1"), record_factory("T2")], router_config(skipDedup=True))

    assert report["summary"]["duplicates_found"] == 0
    assert report["summary"]["sent_to_pixel"] == 2
    assert [p["trxId"] for p in pixel.sent] == ["T1", "T2"]
    assert stored_trx_ids() == {"T1", "T2"}


def test_all_duplicates_sends_nothing(make_router, router_config, record_factory, pixel, seed_tokens):
    seed_tokens("T1", "T2")
    report = run(make_router(), [record_factory("T1"), record_factory("T2")], router_config())

    assert report["summary"]["sent_to_pixel"] == 0
    assert report["summary"]["inserted_to_db"] == 0
    assert report["details"]["duplicate_trx_ids"] == ["T1", "T2"]
    assert pixel.sent == []


def test_auto_mode_resolves_to_regular(make_router, router_config, record_factory, pixel):
    report = run(make_router(), [record_factory("T1")], router_config("auto"))
    assert report["execution"]["mode"] == "regular"


def test_empty_batch_produces_zero_report(make_router, router_config, pixel):
    report = run(make_router(), [], router_config())
    assert report["summary"]["total_input"] == 0
    assert report["summary"]["sent_to_pixel"] == 0
    assert pixel.sent == []


def test_missing_pixel_credentials_abort_the_run(store, router_config, record_factory):
    router = AutomationRouter(RouterCredentials(), store=store)
    with pytest.raises(RouterExecutionError) as excinfo:
        run(router, [record_factory("T1")], router_config())
    assert excinfo.value.message == "Automation router failed: Missing credentials: trafficpoint"
    assert excinfo.value.item_index == 0
    assert "trafficpoint" in excinfo.value.description


def test_store_failure_is_wrapped(credentials, router_config, record_factory):
    class BrokenStore:
        def session_scope(self, database):
            raise RuntimeError("connection refused")

    router = AutomationRouter(credentials, store=BrokenStore())  # type: ignore[arg-type]
    with pytest.raises(RouterExecutionError) as excinfo:
        run(router, [record_factory("T1")], router_config())
    assert excinfo.value.message == "Automation router failed: connection refused"
    assert excinfo.value.description == "An error occurred during execution"
    assert isinstance(excinfo.value.__cause__, RuntimeError)
