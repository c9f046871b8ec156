from dataclasses import dataclass, field
from typing import Any

import boto3
from pydantic import BaseModel, ConfigDict

from .schema import WireType


@dataclass(frozen=True)
class RecordOptions:
    """
    Internal container for record kind metadata.
    Populated by the metaclass during class creation.
    """

    table_name: str
    hash_key: str
    range_key: str | None = None
    schema: dict[str, WireType] = field(default_factory=dict)

    def has_range_key(self) -> bool:
        return bool(self.range_key)

    def key_fields(self) -> tuple[str, ...]:
        """Returns the primary key field names (hash, then range if defined)."""
        if self.has_range_key():
            return (self.hash_key, self.range_key)
        return (self.hash_key,)


class KettleConfig(BaseModel):
    """
    Connection and diagnostics settings.

    Immutable once built; pass it to Record.factory() together with (or
    instead of) an explicit client.

    Attributes:
        region_name: AWS region of the table
        aws_access_key_id: Explicit credentials (default credential chain if None)
        aws_secret_access_key: Explicit credentials (default credential chain if None)
        endpoint_url: Override endpoint, e.g. DynamoDB Local
        logging: Record every store call in the query log
        log_responses: Also keep the raw responses in the query log
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    region_name: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    endpoint_url: str | None = None
    logging: bool = False
    log_responses: bool = False

    def client_kwargs(self) -> dict[str, Any]:
        """Returns the non-empty boto3.client() keyword arguments."""
        kwargs = {
            "region_name": self.region_name,
            "aws_access_key_id": self.aws_access_key_id,
            "aws_secret_access_key": self.aws_secret_access_key,
            "endpoint_url": self.endpoint_url,
        }
        return {k: v for k, v in kwargs.items() if v is not None}


def create_client(config: KettleConfig | None = None) -> Any:
    """Builds a boto3 DynamoDB low-level client from a config."""
    config = config or KettleConfig()
    return boto3.client("dynamodb", **config.client_kwargs())
