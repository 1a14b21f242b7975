"""
TrafficPoint pixel integration.
Sends tracked events one at a time and classifies each as delivered or failed.
A failing record never stops the batch and never raises out of `deliver`.
"""
import asyncio
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

import aiohttp

from automation_router.config import TRAFFICPOINT_SETTINGS
from automation_router.models.db.enums import DeliveryStatus
from automation_router.models.schemas.credentials import TrafficPointCredentials
from automation_router.utils import get_logger
from automation_router.utils.time import iso_timestamp

logger = get_logger(__name__)

UNKNOWN_ERROR = "Unknown error"
MISSING_EVENT_ERROR = "Missing event name"


@dataclass
class DeliveryOutcome:
    success: List[Dict[str, Any]] = field(default_factory=list)
    failed: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.success) + len(self.failed)


def build_pixel_payload(record: Mapping[str, Any], timestamp: Optional[str] = None) -> str:
    """Serialize one record into the JSON document the pixel expects in its `data` form field.

    Raises ValueError when the record has no event name.
    """
    event = record.get("event")
    if event is None:
        raise ValueError(MISSING_EVENT_ERROR)
    payload = {
        "trackInfo": {
            "tokenId": "",
            "track_type": TRAFFICPOINT_SETTINGS["track_type"],
            "date": record.get("date"),
            "timestamp": timestamp or iso_timestamp(),
        },
        "params": {
            "commission_amount": record.get("commission_amount"),
            "currency": record.get("currency"),
            "amount": record.get("amount"),
            "ioId": record.get("io_id"),
        },
        "trxId": record.get("trx_id"),
        "eventName": str(event).lower(),
        "source_token": "" if record.get("token") is None else str(record.get("token")),
        "parent_api_call": json.dumps({"parent_api_call": record.get("parent_api_call")}),
    }
    return json.dumps(payload)


def failed_entry(record: Mapping[str, Any], error: str) -> Dict[str, Any]:
    return {
        "trx_id": record.get("trx_id"),
        "io_id": record.get("io_id"),
        "error": error or UNKNOWN_ERROR,
        "amount": record.get("amount"),
        "commission_amount": record.get("commission_amount"),
    }


class TrafficPointClient:
    """Pixel delivery client bound to one set of TrafficPoint credentials."""

    def __init__(self, credentials: TrafficPointCredentials, *, timeout_seconds: Optional[float] = None):
        self.pixel_url = credentials.pixel_url
        self._cookie_header = credentials.cookie_header.get_secret_value()
        self.timeout = aiohttp.ClientTimeout(
            total=float(timeout_seconds if timeout_seconds is not None else TRAFFICPOINT_SETTINGS["request_timeout_seconds"])
        )
        self.logger = get_logger("integration.trafficpoint")

    def _headers(self) -> Dict[str, str]:
        return {
            "Cookie": self._cookie_header,
            "Content-Type": "application/x-www-form-urlencoded",
        }

    async def _send(self, session: aiohttp.ClientSession, payload: str) -> str:
        """POST one payload and return the raw response body."""
        async with session.post(self.pixel_url, data={"data": payload}, headers=self._headers()) as response:
            response.raise_for_status()
            return await response.text()

    async def deliver_one(self, session: aiohttp.ClientSession, record: Mapping[str, Any], *, verbose: bool = False) -> tuple[bool, Dict[str, Any]]:
        """Deliver a single record. Returns (delivered, output_entry)."""
        if record.get("event") is None:
            self.logger.warning("Event name missing; not sent", trx_id=record.get("trx_id"))
            return False, failed_entry(record, MISSING_EVENT_ERROR)
        try:
            body = await self._send(session, build_pixel_payload(record))
            result = json.loads(body)
            if not isinstance(result, dict):
                return False, failed_entry(record, UNKNOWN_ERROR)
            if result.get("status") == DeliveryStatus.OK.value:
                self.logger.detail(verbose, "Pixel accepted event", trx_id=record.get("trx_id"))
                return True, {**record, "status": DeliveryStatus.OK.value}
            error = result.get("error") or UNKNOWN_ERROR
            self.logger.warning("Pixel rejected event", trx_id=record.get("trx_id"), error=str(error))
            return False, failed_entry(record, str(error))
        except asyncio.TimeoutError:
            self.logger.error("Pixel request timed out", trx_id=record.get("trx_id"))
            return False, failed_entry(record, "Pixel request timed out")
        except aiohttp.ClientError as e:
            self.logger.error("Pixel client error", trx_id=record.get("trx_id"), error=str(e))
            return False, failed_entry(record, str(e))
        except Exception as e:  # per-record isolation: classify, never propagate
            self.logger.error("Pixel delivery failed", trx_id=record.get("trx_id"), error=str(e), exc_info=True)
            return False, failed_entry(record, str(e))

    async def deliver(self, records: Sequence[Mapping[str, Any]], *, verbose: bool = False) -> DeliveryOutcome:
        """Deliver records sequentially, preserving input order in both outcome lists."""
        outcome = DeliveryOutcome()
        if not records:
            return outcome
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            for record in records:
                delivered, entry = await self.deliver_one(session, record, verbose=verbose)
                if delivered:
                    outcome.success.append(entry)
                else:
                    outcome.failed.append(entry)

        self.logger.info(
            "Pixel delivery finished",
            total=outcome.total,
            success=len(outcome.success),
            failed=len(outcome.failed),
        )
        return outcome


__all__ = ["DeliveryOutcome", "TrafficPointClient", "build_pixel_payload", "failed_entry", "UNKNOWN_ERROR", "MISSING_EVENT_ERROR"]
