from .base import ErrorResponse
from .credentials import MySQLCredentials, AwsCredentials, TrafficPointCredentials, RouterCredentials
from .router import Record, RouterOptions, RouterConfig, RouterRunRequest
from .report import (
    ExecutionInfo,
    FailedSend,
    RegularSummary,
    RegularDetails,
    RegularMetrics,
    RegularReport,
    UploadRecord,
    MonthlySummary,
    MonthlyMetrics,
    MonthlyReport,
)

__all__ = [
    # Base
    "ErrorResponse",

    # Credentials
    "MySQLCredentials",
    "AwsCredentials",
    "TrafficPointCredentials",
    "RouterCredentials",

    # Invocation
    "Record",
    "RouterOptions",
    "RouterConfig",
    "RouterRunRequest",

    # Report
    "ExecutionInfo",
    "FailedSend",
    "RegularSummary",
    "RegularDetails",
    "RegularMetrics",
    "RegularReport",
    "UploadRecord",
    "MonthlySummary",
    "MonthlyMetrics",
    "MonthlyReport",
]
