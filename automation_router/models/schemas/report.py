"""
Pydantic schemas for the single report emitted per router invocation.
Fields that only apply to dry runs or live runs default to None and are
dropped by `to_output()`.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from automation_router.models.db.enums import ResolvedMode, UploadKind

class ExecutionInfo(BaseModel):
    mode: ResolvedMode
    dry_run: bool
    timestamp: str = Field(description="ISO-8601 UTC time the report was built")
    duration_ms: int

class ReportBase(BaseModel):
    execution: ExecutionInfo

    def to_output(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

# ------------------------------ Regular path ------------------------------ #

class FailedSend(BaseModel):
    trx_id: Any = None
    io_id: Any = None
    error: str
    amount: Any = None
    commission_amount: Any = None

class RegularSummary(BaseModel):
    total_input: int
    duplicates_found: int
    would_send_to_pixel: Optional[int] = None
    status: Optional[str] = None
    sent_to_pixel: Optional[int] = None
    pixel_success: Optional[int] = None
    pixel_failed: Optional[int] = None
    inserted_to_db: Optional[int] = None

class RegularDetails(BaseModel):
    duplicate_trx_ids: List[Any] = Field(default_factory=list)
    new_events_preview: Optional[List[Dict[str, Any]]] = None
    new_events_total: Optional[int] = None
    failed_sends: Optional[List[FailedSend]] = None

class RegularMetrics(BaseModel):
    mysql_check_ms: int
    pixel_send_ms: Optional[int] = None
    mysql_insert_ms: Optional[int] = None

class RegularReport(ReportBase):
    summary: RegularSummary
    details: RegularDetails
    metrics: RegularMetrics

# ------------------------------ Monthly path ------------------------------ #

class UploadRecord(BaseModel):
    """One file placement (or, in a dry run, the placement that would happen)."""
    type: UploadKind
    io_id: Any
    brand_group_id: int
    brand_group_name: str
    path: Optional[str] = None
    s3_url: Optional[str] = None
    would_upload_to: Optional[str] = None
    rows: int
    size_bytes: Optional[int] = None
    size_kb: Optional[int] = None
    estimated_size_kb: Optional[int] = None
    upload_duration_ms: Optional[int] = None
    status: Optional[str] = None

class MonthlySummary(BaseModel):
    translated_rows: int
    processed_rows: int
    brands_processed: int
    would_create_files: Optional[int] = None
    files_created: Optional[int] = None
    status: Optional[str] = None

class MonthlyMetrics(BaseModel):
    mysql_queries_ms: int
    csv_generation_ms: int
    s3_upload_total_ms: Optional[int] = None

class MonthlyReport(ReportBase):
    summary: MonthlySummary
    uploads: List[UploadRecord] = Field(default_factory=list)
    metrics: MonthlyMetrics
