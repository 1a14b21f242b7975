"""
Upstream dataset sources for the monthly path.
The router asks for a named dataset (by default the 'Translator' step's
output) and uploads it as the Translated file when it is non-empty.
"""
from typing import Dict, List, Mapping, Optional, Protocol, Sequence

from automation_router.models.schemas.router import Record
from automation_router.utils import get_logger

logger = get_logger(__name__)


class UpstreamDatasetProvider(Protocol):
    def fetch(self, node_name: str) -> List[Record]: ...


class EmptyDatasetProvider:
    """No upstream data is wired in; every lookup yields an empty dataset."""

    def fetch(self, node_name: str) -> List[Record]:
        logger.debug("No upstream dataset source configured", node_name=node_name)
        return []


class StaticDatasetProvider:
    """Serves datasets handed over by the caller, keyed by node name."""

    def __init__(self, datasets: Optional[Mapping[str, Sequence[Record]]] = None):
        self._datasets: Dict[str, List[Record]] = {name: list(rows) for name, rows in (datasets or {}).items()}

    def fetch(self, node_name: str) -> List[Record]:
        rows = self._datasets.get(node_name)
        if rows is None:
            logger.info("Upstream dataset not supplied", node_name=node_name, available=list(self._datasets))
            return []
        return list(rows)


__all__ = ["UpstreamDatasetProvider", "EmptyDatasetProvider", "StaticDatasetProvider"]
