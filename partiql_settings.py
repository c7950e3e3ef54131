"""Configuration for the movie table scenario.

Values are read from ``MOVIES_*`` environment variables. Anything left unset
falls back to boto3's own credential and region chain.
"""

from typing import Literal

import boto3
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class PartiQLSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MOVIES_",
        case_sensitive=False,
        extra="ignore",
    )

    region_name: str | None = Field(default=None, description="AWS region")
    endpoint_url: str | None = Field(
        default=None, description="DynamoDB endpoint, e.g. a local emulator"
    )
    table_name_prefix: str = Field(default="doc-example-table-movies-partiql")
    read_capacity: int = Field(default=10, ge=1)
    write_capacity: int = Field(default=10, ge=1)
    fixture_path: str = Field(default="moviedata.json")
    log_level: LogLevel = Field(default="INFO")

    def table_name_for(self, unique_id: str) -> str:
        """Name of a run-scoped table, e.g. ``<prefix>-1a2b3c``."""
        return f"{self.table_name_prefix}-{unique_id}"


def make_resource(settings: PartiQLSettings | None = None):
    """Creates a Boto3 DynamoDB resource from the given settings."""
    settings = settings or PartiQLSettings()
    kwargs = {}
    if settings.region_name:
        kwargs["region_name"] = settings.region_name
    if settings.endpoint_url:
        kwargs["endpoint_url"] = settings.endpoint_url
    return boto3.resource("dynamodb", **kwargs)
