from typing import Any

from ._logging import log_query, logger, redact_key
from .conditions import ConditionBuilder
from .config import KettleConfig, RecordOptions
from .exceptions import RangeKeyNotDefinedError, handle_dynamo_errors
from .options import GetOptions, QueryOptions
from .pagination import PageResult, QueryState
from .serializer import AttributeCodec


class QueryExecutor:
    """
    Runs direct key fetches and key-condition queries for one record kind.

    Two query strategies:
    - bounded (limit set): a single Query call honoring Limit and
      ExclusiveStartKey, returning the decoded LastEvaluatedKey as cursor.
    - unbounded: a Query paginator that follows LastEvaluatedKey until the
      result set is exhausted; no cursor is returned.
    """

    def __init__(
        self,
        client: Any,
        meta: RecordOptions,
        codec: AttributeCodec,
        config: KettleConfig | None = None,
    ) -> None:
        self.client = client
        self.meta = meta
        self.codec = codec
        self.config = config or KettleConfig()

    def _log_query(self, operation: str, args: dict[str, Any], response: Any) -> None:
        log_query(
            operation,
            args,
            response,
            enabled=self.config.logging,
            include_response=self.config.log_responses,
        )

    def get_one(
        self,
        hash_value: Any,
        range_value: Any | None = None,
        options: GetOptions | None = None,
    ) -> dict[str, Any] | None:
        """
        Fetches an item by primary key.

        Returns:
            The decoded item, or None if no item matches.

        Raises:
            RangeKeyNotDefinedError: If range_value is given but the record kind
                has no range key.
        """
        options = options or GetOptions()
        meta = self.meta

        key_dict = {meta.hash_key: hash_value}
        if range_value is not None:
            if not meta.has_range_key():
                raise RangeKeyNotDefinedError(meta.table_name)
            key_dict[meta.range_key] = range_value

        args: dict[str, Any] = {
            "TableName": meta.table_name,
            "Key": self.codec.encode(meta.schema, key_dict),
            "ConsistentRead": options.consistent_read,
            "ReturnConsumedCapacity": options.return_consumed_capacity,
        }
        if options.attributes_to_get:
            args["AttributesToGet"] = list(options.attributes_to_get)

        logger.debug(
            "Fetching item",
            extra={
                "table": meta.table_name,
                "key_hash": redact_key(key_dict),
                "operation": "get",
            },
        )

        with handle_dynamo_errors(table_name=meta.table_name):
            response = self.client.get_item(**args)
        self._log_query("get_item", args, response)

        item = response.get("Item")
        if not item:
            logger.info("Item not found", extra={"table": meta.table_name, "operation": "get"})
            return None

        logger.info("Item found", extra={"table": meta.table_name, "operation": "get"})
        return self.codec.decode(item)

    def build_query_args(
        self,
        conditions: ConditionBuilder,
        state: QueryState,
        options: QueryOptions | None = None,
    ) -> dict[str, Any]:
        """Builds the Query request shared by both execution strategies."""
        options = options or QueryOptions()
        args: dict[str, Any] = {
            "TableName": self.meta.table_name,
            "KeyConditions": conditions.build(self.meta.schema, self.codec),
            "ScanIndexForward": options.scan_index_forward,
            "Select": "ALL_ATTRIBUTES",
            "ReturnConsumedCapacity": "TOTAL",
        }

        consistent_read = state.consistent_read
        if options.consistent_read is not None:
            consistent_read = options.consistent_read
        if consistent_read:
            args["ConsistentRead"] = True

        if state.index_name:
            args["IndexName"] = state.index_name

        if state.is_bounded():
            args["Limit"] = state.limit
            if state.exclusive_start_key:
                args["ExclusiveStartKey"] = self.codec.deserialize_cursor(
                    self.meta.schema, state.exclusive_start_key
                )
        return args

    def query_many(
        self,
        conditions: ConditionBuilder,
        state: QueryState,
        options: QueryOptions | None = None,
    ) -> PageResult[dict[str, Any]]:
        """
        Executes a key-condition query.

        The returned PageResult carries the continuation cursor in bounded mode;
        in unbounded mode every page has been consumed and the cursor is None.
        """
        args = self.build_query_args(conditions, state, options)

        logger.info(
            "Executing query",
            extra={
                "table": self.meta.table_name,
                "index": state.index_name,
                "limit": state.limit,
                "bounded": state.is_bounded(),
                "has_cursor": state.exclusive_start_key is not None,
            },
        )

        if state.is_bounded():
            with handle_dynamo_errors(table_name=self.meta.table_name):
                response = self.client.query(**args)
            self._log_query("query", args, response)

            items = self.codec.decode_all(response.get("Items", []))
            raw_key = response.get("LastEvaluatedKey")
            cursor = self.codec.serialize_cursor(raw_key) if raw_key else None
            return PageResult(items=items, last_evaluated_key=cursor, count=len(items))

        raw_items: list[dict[str, Any]] = []
        with handle_dynamo_errors(table_name=self.meta.table_name):
            paginator = self.client.get_paginator("query")
            for page in paginator.paginate(**args):
                raw_items.extend(page.get("Items", []))
        self._log_query("query_paginator", args, raw_items)

        items = self.codec.decode_all(raw_items)
        return PageResult(items=items, last_evaluated_key=None, count=len(items))
