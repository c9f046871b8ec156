"""
Per-operation option structs.

Each store operation takes an immutable options model listing exactly the
settings it understands, instead of a free-form dict.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .updates import UpdateAction

ReturnValues = Literal["NONE", "ALL_OLD", "UPDATED_OLD", "ALL_NEW", "UPDATED_NEW"]
ReturnConsumedCapacity = Literal["INDEXES", "TOTAL", "NONE"]
ReturnItemCollectionMetrics = Literal["SIZE", "NONE"]


class _Options(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class GetOptions(_Options):
    """Options for a direct key fetch (GetItem)."""

    consistent_read: bool = True
    attributes_to_get: list[str] | None = None
    return_consumed_capacity: ReturnConsumedCapacity = "TOTAL"


class QueryOptions(_Options):
    """
    Options for a key-condition query.

    consistent_read=None keeps whatever the record's query state requested.
    """

    scan_index_forward: bool = True
    consistent_read: bool | None = None


class SaveOptions(_Options):
    """
    Options for conditional writes (PutItem).

    Attributes:
        force_update: Skip the optimistic-concurrency Expected clause
        exists: Extra field -> must-exist expectations merged into the clause
    """

    force_update: bool = False
    exists: dict[str, bool] = Field(default_factory=dict)
    return_values: ReturnValues | None = None
    return_consumed_capacity: ReturnConsumedCapacity = "TOTAL"
    return_item_collection_metrics: ReturnItemCollectionMetrics = "SIZE"


class UpdateOptions(_Options):
    """Options for UpdateItem with legacy AttributeUpdates."""

    actions: dict[str, UpdateAction] = Field(default_factory=dict)
    exists: dict[str, bool] = Field(default_factory=dict)
    return_values: ReturnValues = "ALL_NEW"
    return_consumed_capacity: ReturnConsumedCapacity = "TOTAL"
    return_item_collection_metrics: ReturnItemCollectionMetrics = "SIZE"
