import sys
from datetime import datetime, timezone
from pathlib import Path
import pytest
from fastapi.testclient import TestClient

# Ensure project root on sys.path so 'automation_router' resolves without an install
ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from automation_router.main import app  # type: ignore
from automation_router.database import Base, StoreConnector  # type: ignore
from automation_router.api import deps  # type: ignore
"""Pytest fixtures and factories.

Important: model modules must be imported before Base.metadata.create_all(),
otherwise their tables are not registered on the metadata yet.
"""
from automation_router.models.db import ScraperToken, BrandsGroup, OutBrand
from automation_router.models.schemas.credentials import AwsCredentials, RouterCredentials, TrafficPointCredentials
from automation_router.models.schemas.router import RouterConfig
from automation_router.integrations.s3 import S3Publisher
from automation_router.integrations.trafficpoint import TrafficPointClient
from automation_router.integrations.upstream import StaticDatasetProvider
from automation_router.services.router_engine import AutomationRouter

# Mid-month so `auto` stays regular and the monthly partition is 2025/12
FIXED_NOW = datetime(2026, 1, 15, 12, 30, tzinfo=timezone.utc)
TEST_DATABASES = ("cms", "bo")

class FakeS3Client:
    """Records put_object calls; optionally fails for keys containing `fail_on`."""

    def __init__(self, fail_on: str | None = None):
        self.objects: dict[str, dict] = {}
        self.calls: list[dict] = []
        self.fail_on = fail_on

    def put_object(self, **kwargs):
        self.calls.append(kwargs)
        if self.fail_on and self.fail_on in kwargs["Key"]:
            raise RuntimeError(f"AccessDenied for {kwargs['Key']}")
        self.objects[kwargs["Key"]] = kwargs
        return {"ETag": '"fake"'}

@pytest.fixture()
def store(tmp_path):
    # One file-based SQLite database per logical MySQL database name
    connector = StoreConnector(url_for=lambda database: f"sqlite+pysqlite:///{tmp_path / (database + '.db')}")
    for database in TEST_DATABASES:
        Base.metadata.create_all(bind=connector.engine(database))
    yield connector
    connector.dispose()

@pytest.fixture()
def credentials():
    return RouterCredentials(
        aws=AwsCredentials(access_key_id="AKIATEST", secret_access_key="secret", region="us-east-1"),
        trafficpoint=TrafficPointCredentials(cookie_header="SES_TOKEN=abc; VIEWER_TOKEN=def"),
    )

@pytest.fixture()
def s3_client():
    return FakeS3Client()

@pytest.fixture()
def make_router(store, credentials, s3_client):
    def _create(*, upstream: dict | None = None, now: datetime = FIXED_NOW, monthly_day: int | None = None, s3=None):
        client = s3 or s3_client
        return AutomationRouter(
            credentials,
            store=store,
            publisher_factory=lambda bucket: S3Publisher(bucket, credentials.aws, client=client),
            upstream=StaticDatasetProvider(upstream or {}),
            clock=lambda: now,
            monthly_day=monthly_day,
        )
    return _create

@pytest.fixture()
def pixel(monkeypatch):
    """Fake pixel endpoint keyed by trxId.

    `pixel.responses[trx_id]` may hold a response body (str) or an exception
    instance to raise; unknown ids answer {"status": "OK"}.
    """
    import json

    class _Pixel:
        def __init__(self):
            self.responses: dict[str, object] = {}
            self.sent: list[dict] = []

    fake = _Pixel()

    async def _send(self, session, payload):
        body = json.loads(payload)
        fake.sent.append(body)
        response = fake.responses.get(body["trxId"], '{"status":"OK"}')
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(TrafficPointClient, "_send", _send)
    return fake

@pytest.fixture()
def client(make_router):
    def _override_router_factory():
        def build(upstream=None):
            return make_router(upstream=upstream)
        return build

    app.dependency_overrides[deps.get_router_factory] = _override_router_factory
    yield TestClient(app)
    app.dependency_overrides.pop(deps.get_router_factory, None)

# ---------- Data factory helpers ----------

@pytest.fixture()
def router_config():
    def _create(mode: str = "forceRegular", **options) -> RouterConfig:
        return RouterConfig.model_validate({
            "scriptId": "S1",
            "mainIoId": "IO-MAIN",
            "executionMode": mode,
            "options": options,
        })
    return _create

@pytest.fixture()
def record_factory():
    def _create(trx_id: str | None, io_id: str | None = "IO1", **extra) -> dict:
        record = {
            "trx_id": trx_id,
            "io_id": io_id,
            "amount": "100.00",
            "commission_amount": "10.00",
            "currency": "USD",
            "event": "Sale",
            "date": "2026-01-14",
            "token": "tok-1",
        }
        record.update(extra)
        return record
    return _create

@pytest.fixture()
def seed_tokens(store):
    def _create(*trx_ids: str):
        with store.session_scope("cms") as session:
            for trx_id in trx_ids:
                session.add(ScraperToken(trx_id=trx_id, amount="1", commission_amount="0.1", stream="scraper"))
    return _create

@pytest.fixture()
def seed_brand(store):
    def _create(mongodb_id: str, group_id: int | None, group_name: str | None = None):
        with store.session_scope("bo") as session:
            if group_id is not None and session.get(BrandsGroup, group_id) is None:
                session.add(BrandsGroup(id=group_id, name=group_name or f"Group {group_id}"))
                session.flush()
            session.add(OutBrand(mongodb_id=mongodb_id, brands_group_id=group_id))
    return _create

@pytest.fixture()
def stored_trx_ids(store):
    def _read() -> set[str]:
        with store.session_scope("cms") as session:
            return {row[0] for row in session.query(ScraperToken.trx_id).all()}
    return _read

@pytest.fixture()
def denied_s3_client():
    """S3 double that rejects uploads for io_id IO2."""
    return FakeS3Client(fail_on="IO2_")
