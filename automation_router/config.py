"""Core application configuration & routing defaults.

Every default that the router falls back to (bucket, databases, pixel URL,
storage layout, timeouts, logging) is centralized here so it can be adjusted
without diving into service logic. Values are module constants read from the
environment once at import time; tests monkeypatch them where needed.
"""
from __future__ import annotations

import os


def _env_int(name: str) -> int | None:
	raw = os.getenv(name, "").strip()
	return int(raw) if raw.isdigit() else None


# ------------------------------ Router options ---------------------------- #
# Defaults for the recognized `options` bag of a router invocation.
ROUTER_DEFAULTS: dict[str, str | bool] = {
	"dry_run": False,
	"translator_node_name": "Translator",
	"skip_dedup": False,
	"s3_bucket": os.getenv("ROUTER_S3_BUCKET", "ryze-data-brand-performance"),
	"verbose": False,
	"mysql_database": os.getenv("ROUTER_MYSQL_DATABASE", "cms"),
	"bo_database": os.getenv("ROUTER_BO_DATABASE", "bo"),
}

# Day of month on which `auto` resolves to the monthly path. Unset means
# `auto` always resolves to the regular path.
AUTO_MONTHLY_DAY: int | None = _env_int("ROUTER_AUTO_MONTHLY_DAY")

# Number of pending events echoed back in a dry-run regular report.
DRY_RUN_PREVIEW_SIZE: int = int(os.getenv("ROUTER_DRY_RUN_PREVIEW_SIZE", "10"))

# ------------------------------- TrafficPoint ----------------------------- #
TRAFFICPOINT_SETTINGS: dict[str, str | float] = {
	"pixel_url": os.getenv("TRAFFICPOINT_PIXEL_URL", "https://pixel.trafficpointltd.com/scraper"),
	"request_timeout_seconds": float(os.getenv("TRAFFICPOINT_REQUEST_TIMEOUT", "30")),
	"track_type": "event",
}

# ------------------------------- Scraper store ---------------------------- #
SCRAPER_STREAM: str = "scraper"
MYSQL_DEFAULT_PORT: int = 3306
MYSQL_DRIVER: str = os.getenv("ROUTER_MYSQL_DRIVER", "mysql+pymysql")

# ------------------------------ Object storage ---------------------------- #
STORAGE_SETTINGS: dict[str, str] = {
	"prefix": os.getenv("ROUTER_S3_PREFIX", "AutomationDiscrepancy"),
	"content_type": "text/csv",
	"default_region": "us-east-1",
}

# --------------------------------- Logging -------------------------------- #
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE: str | None = os.getenv("LOG_FILE") or None

__all__ = [
	"ROUTER_DEFAULTS",
	"AUTO_MONTHLY_DAY",
	"DRY_RUN_PREVIEW_SIZE",
	"TRAFFICPOINT_SETTINGS",
	"SCRAPER_STREAM",
	"MYSQL_DEFAULT_PORT",
	"MYSQL_DRIVER",
	"STORAGE_SETTINGS",
	"LOG_LEVEL",
	"LOG_FILE",
]
