"""
Pydantic schemas for router invocations.
Field aliases keep the camelCase parameter names callers already use
(scriptId, executionMode, dryRun, ...).
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict

from automation_router.config import ROUTER_DEFAULTS
from automation_router.models.db.enums import ExecutionMode

Record = Dict[str, Any]

class RouterOptions(BaseModel):
    """Optional knobs of a router invocation."""
    model_config = ConfigDict(populate_by_name=True)

    dry_run: bool = Field(bool(ROUTER_DEFAULTS["dry_run"]), alias="dryRun", description="Test without sending or uploading")
    translator_node_name: str = Field(str(ROUTER_DEFAULTS["translator_node_name"]), alias="translatorNodeName")
    skip_dedup: bool = Field(bool(ROUTER_DEFAULTS["skip_dedup"]), alias="skipDedup", description="Send all items without the store dedup check")
    s3_bucket: str = Field(str(ROUTER_DEFAULTS["s3_bucket"]), alias="s3Bucket", min_length=1)
    verbose: bool = Field(bool(ROUTER_DEFAULTS["verbose"]), alias="verbose")
    mysql_database: str = Field(str(ROUTER_DEFAULTS["mysql_database"]), alias="mysqlDatabase", min_length=1)
    bo_database: str = Field(str(ROUTER_DEFAULTS["bo_database"]), alias="boDatabase", min_length=1)

class RouterConfig(BaseModel):
    """Required parameters plus the options bag."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    script_id: str = Field(alias="scriptId", min_length=1, description="Scraper script ID")
    main_io_id: str = Field(alias="mainIoId", min_length=1, description="Primary brand IO ID (used for translated data)")
    execution_mode: ExecutionMode = Field(ExecutionMode.AUTO, alias="executionMode")
    options: RouterOptions = Field(default_factory=RouterOptions)

class RouterRunRequest(BaseModel):
    """HTTP body for POST /router/run."""
    items: List[Record] = Field(default_factory=list, description="Processed tracking records")
    config: RouterConfig
    upstream: Optional[Dict[str, List[Record]]] = Field(
        None, description="Named upstream datasets, e.g. {'Translator': [...]}"
    )
