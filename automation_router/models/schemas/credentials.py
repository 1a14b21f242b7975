"""
Credential structs handed to the router explicitly.
Each block is optional; a phase that needs a missing block raises a
ConfigurationError at the point of use.
"""
import os
from typing import Optional
from pydantic import BaseModel, Field, SecretStr

from automation_router.config import MYSQL_DEFAULT_PORT, STORAGE_SETTINGS, TRAFFICPOINT_SETTINGS
from automation_router.errors import ConfigurationError

class MySQLCredentials(BaseModel):
    """Relational store credentials shared by the scraper and back-office databases."""
    host: str = Field(min_length=1)
    port: int = Field(MYSQL_DEFAULT_PORT, gt=0)
    user: str = Field(min_length=1)
    password: str = ""

class AwsCredentials(BaseModel):
    access_key_id: str = Field(min_length=1)
    secret_access_key: SecretStr
    region: str = STORAGE_SETTINGS["default_region"]

class TrafficPointCredentials(BaseModel):
    cookie_header: SecretStr = Field(description="Full cookie header, e.g. SES_TOKEN=...; VIEWER_TOKEN=...")
    pixel_url: str = Field(str(TRAFFICPOINT_SETTINGS["pixel_url"]), min_length=1)

class RouterCredentials(BaseModel):
    mysql: Optional[MySQLCredentials] = None
    aws: Optional[AwsCredentials] = None
    trafficpoint: Optional[TrafficPointCredentials] = None

    def require(self, name: str):
        """Return the named credential block or raise ConfigurationError."""
        value = getattr(self, name, None)
        if value is None:
            raise ConfigurationError(
                f"Missing credentials: {name}",
                description=f"Credentials '{name}' are required for this execution mode",
            )
        return value

    @classmethod
    def from_env(cls) -> "RouterCredentials":
        """Build credentials from environment variables, skipping incomplete blocks."""
        mysql = None
        if os.getenv("MYSQL_HOST") and os.getenv("MYSQL_USER"):
            mysql = MySQLCredentials(
                host=os.environ["MYSQL_HOST"],
                port=int(os.getenv("MYSQL_PORT", str(MYSQL_DEFAULT_PORT))),
                user=os.environ["MYSQL_USER"],
                password=os.getenv("MYSQL_PASSWORD", ""),
            )
        aws = None
        if os.getenv("AWS_ACCESS_KEY_ID") and os.getenv("AWS_SECRET_ACCESS_KEY"):
            aws = AwsCredentials(
                access_key_id=os.environ["AWS_ACCESS_KEY_ID"],
                secret_access_key=os.environ["AWS_SECRET_ACCESS_KEY"],
                region=os.getenv("AWS_REGION") or STORAGE_SETTINGS["default_region"],
            )
        trafficpoint = None
        if os.getenv("TRAFFICPOINT_COOKIE_HEADER"):
            trafficpoint = TrafficPointCredentials(
                cookie_header=os.environ["TRAFFICPOINT_COOKIE_HEADER"],
                pixel_url=os.getenv("TRAFFICPOINT_PIXEL_URL") or str(TRAFFICPOINT_SETTINGS["pixel_url"]),
            )
        return cls(mysql=mysql, aws=aws, trafficpoint=trafficpoint)
