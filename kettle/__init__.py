from ._logging import QueryLogEntry, clear_query_log, get_last_query, get_query_log
from .base import Record
from .conditions import ComparisonOperator, Condition, ConditionBuilder, normalize_operator
from .config import KettleConfig, RecordOptions, create_client
from .exceptions import (
    AttributeSerializationError,
    ConditionalCheckFailedError,
    ItemCollectionSizeLimitError,
    KettleError,
    ProvisionedThroughputExceededError,
    RangeKeyNotDefinedError,
    RequestTimeoutError,
    SchemaDefinitionError,
    TableNotFoundError,
    ValidationError,
)
from .expected import build_expected
from .options import GetOptions, QueryOptions, SaveOptions, UpdateOptions
from .pagination import PageResult, QueryState
from .query import QueryExecutor
from .schema import WireType, resolve_type
from .serializer import AttributeCodec
from .updates import UpdateAction

__all__ = [
    "Record",
    "RecordOptions",
    "KettleConfig",
    "create_client",
    "WireType",
    "resolve_type",
    "AttributeCodec",
    "PageResult",
    "QueryState",
    "QueryExecutor",
    # Conditions
    "ComparisonOperator",
    "Condition",
    "ConditionBuilder",
    "normalize_operator",
    "build_expected",
    "UpdateAction",
    # Options
    "GetOptions",
    "QueryOptions",
    "SaveOptions",
    "UpdateOptions",
    # Query log
    "QueryLogEntry",
    "get_query_log",
    "get_last_query",
    "clear_query_log",
    # Exceptions
    "KettleError",
    "SchemaDefinitionError",
    "RangeKeyNotDefinedError",
    "TableNotFoundError",
    "ConditionalCheckFailedError",
    "ProvisionedThroughputExceededError",
    "ItemCollectionSizeLimitError",
    "RequestTimeoutError",
    "ValidationError",
    "AttributeSerializationError",
]
