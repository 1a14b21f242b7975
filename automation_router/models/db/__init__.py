from .scraper_tokens import ScraperToken
from .brands import BrandsGroup, OutBrand
from .enums import ExecutionMode, ResolvedMode, UploadKind, RunStatus, DeliveryStatus

__all__ = [
    "ScraperToken",
    "BrandsGroup",
    "OutBrand",
    "ExecutionMode",
    "ResolvedMode",
    "UploadKind",
    "RunStatus",
    "DeliveryStatus",
]
