"""Automation router orchestrator.

Single public entry point `AutomationRouter.run(records, config)` that:
1. Resolves the execution mode (regular or monthly) from the override and clock.
2. Regular path: dedups the batch against scraper_tokens (unless skipped),
   delivers new events to the TrafficPoint pixel one by one, then upserts the
   delivered ones back into scraper_tokens.
3. Monthly path: fetches the upstream (translated) dataset, groups the batch
   by io_id, resolves brand groups in one lookup, serializes each group to CSV
   and uploads it under the previous month's partition.
4. Assembles exactly one report with per-phase timings.

Dry runs keep the read-only lookups (dedup, brand groups) and skip delivery,
insert and upload, reporting previews and estimates instead.

Any exception that escapes a phase aborts the invocation and is re-raised as a
single RouterExecutionError (item_index 0); no partial report is produced.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from automation_router import config as router_config
from automation_router.database import StoreConnector
from automation_router.errors import RouterExecutionError
from automation_router.integrations.s3 import S3Publisher, build_object_key
from automation_router.integrations.trafficpoint import DeliveryOutcome, TrafficPointClient
from automation_router.integrations.upstream import EmptyDatasetProvider, UpstreamDatasetProvider
from automation_router.models.db.enums import ResolvedMode, RunStatus, UploadKind
from automation_router.models.schemas.credentials import RouterCredentials
from automation_router.models.schemas.report import (
    ExecutionInfo,
    FailedSend,
    MonthlyMetrics,
    MonthlyReport,
    MonthlySummary,
    RegularDetails,
    RegularMetrics,
    RegularReport,
    RegularSummary,
    ReportBase,
    UploadRecord,
)
from automation_router.models.schemas.router import Record, RouterConfig
from automation_router.services.csv_export import to_csv
from automation_router.services.deduplication import find_existing_trx_ids, split_duplicates
from automation_router.services.grouping import group_by
from automation_router.services.mode_resolver import resolve_mode
from automation_router.services.persistence import BrandInfo, lookup_brand_groups, upsert_scraper_tokens
from automation_router.utils import get_logger, log_business_event, log_performance
from automation_router.utils.metrics import byte_size, elapsed_ms, monotonic_ms, size_kb
from automation_router.utils.time import iso_timestamp, previous_month, utc_now

logger = get_logger(__name__)

ERROR_PREFIX = "Automation router failed"


@dataclass
class _RunContext:
    config: RouterConfig
    now: datetime
    started_ms: float
    request_id: Optional[str] = None
    store: Optional[StoreConnector] = None
    owns_store: bool = False


class AutomationRouter:
    """Routes a processed record batch to the pixel endpoint or to S3.

    Collaborators default to the real implementations built from
    `credentials`; tests and callers may inject their own.
    """

    def __init__(
        self,
        credentials: RouterCredentials,
        *,
        store: Optional[StoreConnector] = None,
        pixel_client: Optional[TrafficPointClient] = None,
        publisher_factory: Optional[Callable[[str], S3Publisher]] = None,
        upstream: Optional[UpstreamDatasetProvider] = None,
        clock: Callable[[], datetime] = utc_now,
        monthly_day: Optional[int] = None,
    ):
        self.credentials = credentials
        self._store = store
        self._pixel_client = pixel_client
        self._publisher_factory = publisher_factory
        self.upstream: UpstreamDatasetProvider = upstream or EmptyDatasetProvider()
        self._clock = clock
        self._monthly_day = monthly_day if monthly_day is not None else router_config.AUTO_MONTHLY_DAY

    # ------------------------------------------------------------------ #
    # Collaborator resolution
    # ------------------------------------------------------------------ #

    def _store_for(self, ctx: _RunContext) -> StoreConnector:
        if ctx.store is None:
            if self._store is not None:
                ctx.store = self._store
            else:
                ctx.store = StoreConnector(self.credentials.require("mysql"))
                ctx.owns_store = True
        return ctx.store

    def _pixel(self) -> TrafficPointClient:
        if self._pixel_client is not None:
            return self._pixel_client
        return TrafficPointClient(self.credentials.require("trafficpoint"))

    def _publisher(self, bucket: str) -> S3Publisher:
        if self._publisher_factory is not None:
            return self._publisher_factory(bucket)
        return S3Publisher(bucket, self.credentials.require("aws"))

    def _execution(self, ctx: _RunContext, mode: ResolvedMode) -> ExecutionInfo:
        return ExecutionInfo(
            mode=mode,
            dry_run=ctx.config.options.dry_run,
            timestamp=iso_timestamp(self._clock()),
            duration_ms=elapsed_ms(ctx.started_ms),
        )

    # ------------------------------------------------------------------ #
    # Entry point
    # ------------------------------------------------------------------ #

    async def run(
        self,
        records: Sequence[Mapping[str, Any]],
        config: RouterConfig,
        *,
        request_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Process one batch and return its report as a JSON-ready dict."""
        ctx = _RunContext(config=config, now=self._clock(), started_ms=monotonic_ms(), request_id=request_id)
        try:
            mode = resolve_mode(ctx.now, config.execution_mode, self._monthly_day)
            items: List[Record] = [dict(r) for r in records]
            logger.info(
                "Router invocation started",
                script_id=config.script_id,
                requested_mode=config.execution_mode.value,
                resolved_mode=mode.value,
                dry_run=config.options.dry_run,
                items=len(items),
                request_id=request_id,
            )
            report: ReportBase
            if mode == ResolvedMode.MONTHLY:
                report = await self._run_monthly(ctx, items)
            else:
                report = await self._run_regular(ctx, items)
            log_performance(
                operation=f"router_{mode.value}_run",
                duration_ms=report.execution.duration_ms,
                additional_data={"script_id": config.script_id, "dry_run": config.options.dry_run},
            )
            return report.to_output()
        except Exception as exc:
            logger.error(
                "Router invocation failed",
                script_id=config.script_id,
                error=str(exc),
                error_type=type(exc).__name__,
                request_id=request_id,
                exc_info=True,
            )
            raise RouterExecutionError(
                f"{ERROR_PREFIX}: {exc}",
                description=getattr(exc, "description", None),
                item_index=0,
            ) from exc
        finally:
            if ctx.owns_store and ctx.store is not None:
                ctx.store.dispose()

    # ------------------------------------------------------------------ #
    # Regular path: dedup -> pixel -> scraper_tokens
    # ------------------------------------------------------------------ #

    async def _run_regular(self, ctx: _RunContext, records: List[Record]) -> RegularReport:
        opts = ctx.config.options

        check_start = monotonic_ms()
        to_send: List[Record] = list(records)
        duplicates: List[Any] = []
        if not opts.skip_dedup:
            with self._store_for(ctx).session_scope(opts.mysql_database) as session:
                existing = find_existing_trx_ids(session, (r.get("trx_id") for r in records))
            to_send, duplicates = split_duplicates(records, existing)  # type: ignore[assignment]
        mysql_check_ms = elapsed_ms(check_start)
        logger.info(
            "Dedup phase completed",
            skipped=opts.skip_dedup,
            duplicates=len(duplicates),
            to_send=len(to_send),
            request_id=ctx.request_id,
        )

        outcome = DeliveryOutcome()
        pixel_send_ms = 0
        if not opts.dry_run and to_send:
            pixel_start = monotonic_ms()
            outcome = await self._pixel().deliver(to_send, verbose=opts.verbose)
            pixel_send_ms = elapsed_ms(pixel_start)

        inserted = 0
        mysql_insert_ms = 0
        if not opts.dry_run and outcome.success:
            insert_start = monotonic_ms()
            with self._store_for(ctx).session_scope(opts.mysql_database) as session:
                inserted = upsert_scraper_tokens(session, outcome.success)
            mysql_insert_ms = elapsed_ms(insert_start)

        summary = RegularSummary(total_input=len(records), duplicates_found=len(duplicates))
        details = RegularDetails(duplicate_trx_ids=duplicates)
        metrics = RegularMetrics(mysql_check_ms=mysql_check_ms)

        if opts.dry_run:
            summary.would_send_to_pixel = len(to_send)
            summary.status = RunStatus.DRY_RUN_SKIPPED.value
            details.new_events_preview = [dict(r) for r in to_send[: router_config.DRY_RUN_PREVIEW_SIZE]]
            details.new_events_total = len(to_send)
        else:
            summary.sent_to_pixel = len(to_send)
            summary.pixel_success = len(outcome.success)
            summary.pixel_failed = len(outcome.failed)
            summary.inserted_to_db = inserted
            details.failed_sends = [FailedSend(**entry) for entry in outcome.failed]
            metrics.pixel_send_ms = pixel_send_ms
            metrics.mysql_insert_ms = mysql_insert_ms

        log_business_event(
            event_type="regular_run_completed",
            details={
                "dry_run": opts.dry_run,
                "total_input": len(records),
                "duplicates_found": len(duplicates),
                "pixel_success": len(outcome.success),
                "pixel_failed": len(outcome.failed),
                "inserted_to_db": inserted,
            },
            script_id=ctx.config.script_id,
            request_id=ctx.request_id,
        )
        return RegularReport(
            execution=self._execution(ctx, ResolvedMode.REGULAR),
            summary=summary,
            details=details,
            metrics=metrics,
        )

    # ------------------------------------------------------------------ #
    # Monthly path: group -> brand lookup -> CSV -> S3
    # ------------------------------------------------------------------ #

    async def _run_monthly(self, ctx: _RunContext, records: List[Record]) -> MonthlyReport:
        opts = ctx.config.options
        script_id = ctx.config.script_id
        main_io_id = ctx.config.main_io_id

        translated = [dict(r) for r in self.upstream.fetch(opts.translator_node_name)]
        grouped = group_by(records)

        batches: List[tuple[UploadKind, Any, List[Record]]] = []
        if translated:
            batches.append((UploadKind.TRANSLATED, main_io_id, translated))
        batches.extend((UploadKind.PROCESSED, io_id, list(rows)) for io_id, rows in grouped.items())

        lookup_start = monotonic_ms()
        brands: Dict[Any, BrandInfo] = {}
        if batches:
            with self._store_for(ctx).session_scope(opts.bo_database) as session:
                brands = lookup_brand_groups(session, [io_id for _, io_id, _ in batches])
        mysql_queries_ms = elapsed_ms(lookup_start)

        year, month = previous_month(ctx.now)
        publisher = None if opts.dry_run else self._publisher(opts.s3_bucket)

        uploads: List[UploadRecord] = []
        csv_ms = 0.0
        upload_ms = 0.0
        for kind, io_id, rows in batches:
            brand = brands.get(io_id, BrandInfo.unknown())
            csv_start = monotonic_ms()
            content = to_csv(rows)
            csv_ms += monotonic_ms() - csv_start

            key = build_object_key(year, month, brand.brand_group_id, io_id, script_id, kind)
            size_bytes = byte_size(content)
            base = {
                "type": kind,
                "io_id": io_id,
                "brand_group_id": brand.brand_group_id,
                "brand_group_name": brand.brand_group_name,
                "rows": len(rows),
            }
            if publisher is None:
                uploads.append(UploadRecord(
                    **base,
                    would_upload_to=key,
                    estimated_size_kb=size_kb(size_bytes),
                    status=RunStatus.DRY_RUN_SKIPPED.value,
                ))
                logger.detail(opts.verbose, "Dry run upload skipped", kind=kind.value, io_id=io_id, key=key)
                continue

            upload_start = monotonic_ms()
            s3_url = publisher.publish(key, content)
            duration = elapsed_ms(upload_start)
            upload_ms += duration
            uploads.append(UploadRecord(
                **base,
                path=key,
                s3_url=s3_url,
                size_bytes=size_bytes,
                size_kb=size_kb(size_bytes),
                upload_duration_ms=duration,
            ))
            logger.detail(opts.verbose, "Monthly file uploaded", kind=kind.value, io_id=io_id, key=key, rows=len(rows))

        summary = MonthlySummary(
            translated_rows=len(translated),
            processed_rows=len(records),
            brands_processed=len(grouped),
        )
        metrics = MonthlyMetrics(mysql_queries_ms=mysql_queries_ms, csv_generation_ms=int(round(csv_ms)))
        if opts.dry_run:
            summary.would_create_files = len(uploads)
            summary.status = RunStatus.DRY_RUN_SKIPPED.value
        else:
            summary.files_created = len(uploads)
            metrics.s3_upload_total_ms = int(round(upload_ms))

        log_business_event(
            event_type="monthly_run_completed",
            details={
                "dry_run": opts.dry_run,
                "partition": f"{year}/{month}",
                "files": len(uploads),
                "translated_rows": len(translated),
                "processed_rows": len(records),
            },
            script_id=script_id,
            request_id=ctx.request_id,
        )
        return MonthlyReport(
            execution=self._execution(ctx, ResolvedMode.MONTHLY),
            summary=summary,
            uploads=uploads,
            metrics=metrics,
        )


__all__ = ["AutomationRouter", "ERROR_PREFIX"]
