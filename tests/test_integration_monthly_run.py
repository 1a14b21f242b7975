import asyncio

import pytest

from automation_router.errors import RouterExecutionError


def run(router, records, config):
    return asyncio.run(router.run(records, config))


# 3. Two io_id groups, no translated data -> two Processed uploads under 2025/12
def test_monthly_run_uploads_one_file_per_group(make_router, router_config, record_factory, seed_brand, s3_client):
    seed_brand("A", 42, "Casino Brands")
    seed_brand("B", 7, "Finance")
    records = [record_factory("T1", io_id="A"), record_factory("T2", io_id="B"), record_factory("T3", io_id="A")]

    report = run(make_router(), records, router_config("forceMonthly"))

    assert report["execution"]["mode"] == "monthly"
    assert report["summary"] == {
        "translated_rows": 0,
        "processed_rows": 3,
        "brands_processed": 2,
        "files_created": 2,
    }
    uploads = report["uploads"]
    assert [u["type"] for u in uploads] == ["Processed", "Processed"]
    assert [(u["io_id"], u["rows"]) for u in uploads] == [("A", 2), ("B", 1)]
    assert uploads[0]["path"] == "AutomationDiscrepancy/2025/12/42/A_S1_Processed.csv"
    assert uploads[0]["s3_url"] == "s3://ryze-data-brand-performance/AutomationDiscrepancy/2025/12/42/A_S1_Processed.csv"
    assert uploads[0]["brand_group_name"] == "Casino Brands"
    assert uploads[1]["path"] == "AutomationDiscrepancy/2025/12/7/B_S1_Processed.csv"
    assert set(report["metrics"]) == {"mysql_queries_ms", "csv_generation_ms", "s3_upload_total_ms"}

    body = s3_client.objects[uploads[0]["path"]]["Body"].decode("utf-8")
    lines = body.split("\n")
    assert lines[0] == "trx_id,io_id,amount,commission_amount,currency,event,date,token"
    assert [line.split(",")[0] for line in lines[1:]] == ["T1", "T3"]
    assert uploads[0]["size_bytes"] == len(body.encode("utf-8"))


# 5. Unknown brand -> fallback group 0 in both report and path
def test_unknown_brand_uses_fallback_group(make_router, router_config, record_factory, s3_client):
    report = run(make_router(), [record_factory("T1", io_id="ZZZ")], router_config("forceMonthly"))

    upload = report["uploads"][0]
    assert upload["brand_group_id"] == 0
    assert upload["brand_group_name"] == "Unknown"
    assert upload["path"] == "AutomationDiscrepancy/2025/12/0/ZZZ_S1_Processed.csv"
    assert upload["path"] in s3_client.objects


def test_translated_dataset_is_uploaded_first_under_main_io_id(make_router, router_config, record_factory, seed_brand, s3_client):
    seed_brand("IO-MAIN", 3, "Main Group")
    translated = [{"brand": "x", "clicks": 4}, {"brand": "y", "clicks": 1}]

    report = run(
        make_router(upstream={"Translator": translated}),
        [record_factory("T1", io_id="A")],
        router_config("forceMonthly"),
    )

    assert report["summary"]["translated_rows"] == 2
    assert report["summary"]["files_created"] == 2
    first = report["uploads"][0]
    assert first["type"] == "Translated"
    assert first["io_id"] == "IO-MAIN"
    assert first["path"] == "AutomationDiscrepancy/2025/12/3/IO-MAIN_S1_Translated.csv"
    assert s3_client.objects[first["path"]]["Body"] == b"brand,clicks\nx,4\ny,1"


def test_custom_translator_node_and_bucket(make_router, router_config, s3_client):
    report = run(
        make_router(upstream={"Mapper": [{"a": 1}], "Translator": [{"b": 2}]}),
        [],
        router_config("forceMonthly", translatorNodeName="Mapper", s3Bucket="other-bucket"),
    )
    assert len(report["uploads"]) == 1
    assert report["uploads"][0]["s3_url"].startswith("s3://other-bucket/")
    assert s3_client.calls[0]["Bucket"] == "other-bucket"
    assert s3_client.objects[report["uploads"][0]["path"]]["Body"] == b"a\n1"


def test_monthly_dry_run_estimates_without_uploading(make_router, router_config, record_factory, seed_brand, s3_client):
    seed_brand("A", 42, "Casino Brands")
    records = [record_factory("T1", io_id="A"), record_factory("T2", io_id="B")]

    report = run(make_router(), records, router_config("forceMonthly", dryRun=True))

    assert report["summary"]["would_create_files"] == 2
    assert report["summary"]["status"] == "DRY_RUN_SKIPPED"
    assert "files_created" not in report["summary"]
    first = report["uploads"][0]
    assert first["would_upload_to"] == "AutomationDiscrepancy/2025/12/42/A_S1_Processed.csv"
    assert first["status"] == "DRY_RUN_SKIPPED"
    assert "estimated_size_kb" in first
    assert "path" not in first and "s3_url" not in first
    assert "s3_upload_total_ms" not in report["metrics"]
    assert s3_client.calls == []


def test_empty_monthly_run_creates_no_files(make_router, router_config, s3_client):
    report = run(make_router(), [], router_config("forceMonthly"))
    assert report["uploads"] == []
    assert report["summary"]["files_created"] == 0
    assert s3_client.calls == []


def test_auto_mode_on_configured_day_is_monthly(make_router, router_config, record_factory):
    report = run(make_router(monthly_day=15), [record_factory("T1", io_id="A")], router_config("auto"))
    assert report["execution"]["mode"] == "monthly"


def test_missing_io_id_aborts_before_any_upload(make_router, router_config, record_factory, s3_client):
    records = [record_factory("T1", io_id="A"), record_factory("T2", io_id=None)]
    with pytest.raises(RouterExecutionError) as excinfo:
        run(make_router(), records, router_config("forceMonthly"))
    assert excinfo.value.message == "Automation router failed: Missing grouping key 'io_id' on 1 record(s)"
    assert "[1]" in excinfo.value.description
    assert s3_client.calls == []


def test_upload_failure_aborts_the_run(make_router, router_config, record_factory, denied_s3_client):
    records = [record_factory("T1", io_id="IO1"), record_factory("T2", io_id="IO2"), record_factory("T3", io_id="IO3")]
    with pytest.raises(RouterExecutionError) as excinfo:
        run(make_router(s3=denied_s3_client), records, router_config("forceMonthly"))
    assert "AccessDenied" in excinfo.value.message
    # Earlier uploads are not rolled back; later ones never start
    assert [c["Key"].rsplit("/", 1)[-1] for c in denied_s3_client.calls] == ["IO1_S1_Processed.csv", "IO2_S1_Processed.csv"]


def test_numeric_and_text_io_ids_land_in_one_file(make_router, router_config, record_factory, s3_client):
    records = [record_factory("T1", io_id=5), record_factory("T2", io_id="5")]

    report = run(make_router(), records, router_config("forceMonthly"))

    assert report["summary"]["files_created"] == 1
    assert report["summary"]["brands_processed"] == 1
    upload = report["uploads"][0]
    assert upload["io_id"] == "5"
    assert upload["rows"] == 2
    assert list(s3_client.objects) == ["AutomationDiscrepancy/2025/12/0/5_S1_Processed.csv"]
    body = s3_client.objects[upload["path"]]["Body"].decode("utf-8")
    assert [line.split(",")[0] for line in body.split("\n")[1:]] == ["T1", "T2"]
