"""
Router invocation endpoint.
"""
from typing import Any, Dict
from fastapi import APIRouter, Depends, Request

from automation_router.api.deps import RouterFactory, get_router_factory
from automation_router.models.schemas.router import RouterRunRequest
from automation_router.utils import get_logger

router = APIRouter()
logger = get_logger(__name__)

@router.post(
    "/run",
    summary="Route a processed batch to the pixel endpoint or to S3"
)
async def run_router(
    run_request: RouterRunRequest,
    request: Request,
    build_router: RouterFactory = Depends(get_router_factory)
) -> Dict[str, Any]:
    """Run one router invocation and return its report.

    The execution mode comes from `config.executionMode` (auto, forceRegular,
    forceMonthly). Monthly runs read the translated dataset from
    `upstream[config.options.translatorNodeName]` when it is supplied.
    Failures surface as a 500 with `message`, `description` and `item_index`.
    """
    request_id = getattr(request.state, "request_id", None)
    logger.info(
        "Router run requested",
        script_id=run_request.config.script_id,
        execution_mode=run_request.config.execution_mode.value,
        items=len(run_request.items),
        request_id=request_id
    )
    runner = build_router(run_request.upstream)
    return await runner.run(run_request.items, run_request.config, request_id=request_id)
