"""
S3 publisher for monthly discrepancy exports.
Object keys follow <prefix>/<YYYY>/<MM>/<brand_group_id>/<io_id>_<script_id>_<kind>.csv
"""
from typing import Any, Optional

from automation_router.config import STORAGE_SETTINGS
from automation_router.models.db.enums import UploadKind
from automation_router.models.schemas.credentials import AwsCredentials
from automation_router.utils import get_logger

logger = get_logger(__name__)


def build_object_key(
    year: str,
    month: str,
    brand_group_id: int,
    io_id: Any,
    script_id: str,
    kind: UploadKind,
    *,
    prefix: Optional[str] = None,
) -> str:
    root = (prefix if prefix is not None else STORAGE_SETTINGS["prefix"]).strip("/")
    filename = f"{io_id}_{script_id}_{UploadKind(kind).value}.csv"
    return f"{root}/{year}/{month}/{brand_group_id}/{filename}"


class S3Publisher:
    """Writes CSV text to one bucket. Upload errors propagate to the caller."""

    def __init__(self, bucket: str, credentials: AwsCredentials, *, client: Any = None) -> None:
        self.bucket = bucket
        self._credentials = credentials
        self._client = client
        self.content_type = STORAGE_SETTINGS["content_type"]

    @property
    def client(self) -> Any:
        if self._client is None:
            import boto3

            self._client = boto3.client(
                "s3",
                aws_access_key_id=self._credentials.access_key_id,
                aws_secret_access_key=self._credentials.secret_access_key.get_secret_value(),
                region_name=self._credentials.region,
            )
        return self._client

    def url_for(self, key: str) -> str:
        return f"s3://{self.bucket}/{key}"

    def publish(self, key: str, content: str) -> str:
        """Upload `content` under `key` and return its s3:// URL."""
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=content.encode("utf-8"),
            ContentType=self.content_type,
        )
        logger.info("Uploaded object", bucket=self.bucket, key=key)
        return self.url_for(key)


__all__ = ["S3Publisher", "build_object_key"]
