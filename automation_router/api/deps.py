"""
Dependencies for credentials and router construction.
"""
from typing import Callable, Dict, List, Optional
from fastapi import Depends

from automation_router.integrations.upstream import EmptyDatasetProvider, StaticDatasetProvider, UpstreamDatasetProvider
from automation_router.models.schemas.credentials import RouterCredentials
from automation_router.models.schemas.router import Record
from automation_router.services.router_engine import AutomationRouter
from automation_router.utils import get_logger

logger = get_logger(__name__)

RouterFactory = Callable[[Optional[Dict[str, List[Record]]]], AutomationRouter]

def get_credentials() -> RouterCredentials:
    """
    Credential dependency.
    Reads the MySQL, AWS and TrafficPoint blocks from the environment on each
    request; blocks that are not configured stay empty and are only required
    by the phase that needs them.

    Returns:
        RouterCredentials: Possibly partial credential set
    """
    credentials = RouterCredentials.from_env()
    logger.debug(
        "Router credentials loaded",
        mysql=credentials.mysql is not None,
        aws=credentials.aws is not None,
        trafficpoint=credentials.trafficpoint is not None,
    )
    return credentials

def get_router_factory(credentials: RouterCredentials = Depends(get_credentials)) -> RouterFactory:
    """
    Router factory dependency.
    Each invocation gets its own router so upstream datasets and store
    connections never leak between requests.
    """
    def build(upstream: Optional[Dict[str, List[Record]]] = None) -> AutomationRouter:
        provider: UpstreamDatasetProvider = StaticDatasetProvider(upstream) if upstream else EmptyDatasetProvider()
        return AutomationRouter(credentials, upstream=provider)

    return build
