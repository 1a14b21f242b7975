"""
Integrations package initialization.
Exports the delivery, storage and upstream data collaborators.
"""
from .trafficpoint import TrafficPointClient, DeliveryOutcome
from .s3 import S3Publisher, build_object_key
from .upstream import UpstreamDatasetProvider, EmptyDatasetProvider, StaticDatasetProvider

__all__ = [
    "TrafficPointClient",
    "DeliveryOutcome",
    "S3Publisher",
    "build_object_key",
    "UpstreamDatasetProvider",
    "EmptyDatasetProvider",
    "StaticDatasetProvider",
]
