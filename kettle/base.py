import copy
from typing import Any, ClassVar, TypeVar

from ._logging import log_query, logger, redact_key
from .conditions import ComparisonOperator, ConditionBuilder
from .config import KettleConfig, RecordOptions, create_client
from .exceptions import SchemaDefinitionError, handle_dynamo_errors
from .expected import build_expected
from .options import GetOptions, QueryOptions, SaveOptions, UpdateOptions
from .pagination import PageResult, QueryState
from .query import QueryExecutor
from .schema import is_set_type, normalize_schema, resolve_type
from .serializer import AttributeCodec
from .updates import build_attribute_updates

# Generic TypeVar to allow methods like .find_one() to return the correct subclass type (User)
T = TypeVar("T", bound="Record")


class RecordMeta(type):
    """
    Reads the inner 'Meta' class once, when a record kind is defined.

    Usage:
        class User(Record):
            class Meta:
                table_name = "users"
                hash_key = "id"
                range_key = "created_at"
                schema = {"id": "S", "created_at": "N", "tags": "SS"}
    """

    def __new__(
        mcs, name: str, bases: tuple[type, ...], namespace: dict[str, Any], **kwargs: Any
    ) -> Any:
        new_cls = super().__new__(mcs, name, bases, namespace, **kwargs)

        # Stop processing for the Record base class itself
        if not any(isinstance(base, RecordMeta) for base in bases):
            return new_cls

        meta_cls = namespace.get("Meta")

        # If no Meta, inherit the configuration of the closest record kind
        if not meta_cls:
            for base in bases:
                if isinstance(getattr(base, "_meta", None), RecordOptions):
                    return new_cls
            raise SchemaDefinitionError(name, "missing a 'class Meta' with 'table_name'")

        table_name = getattr(meta_cls, "table_name", None)
        if not table_name:
            raise SchemaDefinitionError(name, "missing a 'table_name' in class Meta")

        hash_key = getattr(meta_cls, "hash_key", None)
        if not hash_key:
            raise SchemaDefinitionError(name, "missing a 'hash_key' in class Meta")

        try:
            schema = normalize_schema(getattr(meta_cls, "schema", {}))
        except ValueError as e:
            raise SchemaDefinitionError(name, str(e)) from e

        new_cls._meta = RecordOptions(  # type: ignore[attr-defined]
            table_name=table_name,
            hash_key=hash_key,
            range_key=getattr(meta_cls, "range_key", None),
            schema=schema,
        )
        return new_cls


class Record(metaclass=RecordMeta):
    """
    The base class record kinds inherit from.

    Wraps the raw field data of one item, the snapshot taken when it was
    loaded (the optimistic-concurrency baseline) and the query parameters
    used by find_many().
    """

    # Type Hinting for the configuration injected by Metaclass
    _meta: ClassVar[RecordOptions]

    _codec: ClassVar[AttributeCodec] = AttributeCodec()

    def __init__(self, client: Any, config: KettleConfig | None = None) -> None:
        self._client = client
        self._config = config or KettleConfig()
        self._data: dict[str, Any] = {}
        self._data_original: dict[str, Any] = {}
        self._is_new = False
        self._conditions = ConditionBuilder()
        self._state = QueryState()
        self._executor = QueryExecutor(client, self._meta, self._codec, self._config)

    @classmethod
    def factory(cls: type[T], client: Any | None = None, config: KettleConfig | None = None) -> T:
        """
        Returns an empty instance of this record kind.

        A boto3 client is built from the config when none is given.
        """
        if client is None:
            client = create_client(config)
        return cls(client, config)

    @property
    def client(self) -> Any:
        return self._client

    @property
    def config(self) -> KettleConfig:
        return self._config

    @property
    def is_new(self) -> bool:
        return self._is_new

    @property
    def last_evaluated_key(self) -> dict[str, Any] | None:
        """Cursor left by the last bounded find_many(), or None."""
        return self._state.last_evaluated_key

    # --- DATA ACCESS ---

    def create(self: T, data: dict[str, Any] | None = None) -> T:
        """Fills the record with data that has not been stored yet."""
        self.hydrate(data)
        self._is_new = True
        return self

    def hydrate(self: T, data: dict[str, Any] | None = None) -> T:
        """Replaces the record data and its baseline snapshot wholesale."""
        data = data or {}
        self._data = dict(data)
        self._data_original = copy.deepcopy(data)
        self._is_new = False
        return self

    def get(self, field_name: str) -> Any | None:
        return self._data.get(field_name)

    def set(self, field_name: str, value: Any) -> None:
        """
        Assigns a field value.

        Only fields declared in the schema (or key fields) are assignable;
        anything else is ignored.
        """
        if field_name not in self._meta.schema and field_name not in self._meta.key_fields():
            logger.debug(
                "Ignoring assignment to undeclared field",
                extra={"table": self._meta.table_name, "field": field_name},
            )
            return
        self._data[field_name] = value

    def unset(self, field_name: str) -> None:
        self._data.pop(field_name, None)

    def has(self, field_name: str) -> bool:
        return self._data.get(field_name) is not None

    def as_dict(self) -> dict[str, Any]:
        """Returns a copy of the current field data."""
        return dict(self._data)

    def original_data(self) -> dict[str, Any]:
        """Returns a copy of the snapshot taken at hydration."""
        return copy.deepcopy(self._data_original)

    def set_add(self, field_name: str, value: Any) -> None:
        """Appends a member to a set-typed field. No-op for other types."""
        if not is_set_type(resolve_type(self._meta.schema, field_name)):
            return
        members = list(self._data.get(field_name) or [])
        members.append(value)
        self._data[field_name] = members

    def set_remove(self, field_name: str, value: Any) -> None:
        """Removes a member from a set-typed field. No-op for other types."""
        if not is_set_type(resolve_type(self._meta.schema, field_name)):
            return
        members = list(self._data.get(field_name) or [])
        if value in members:
            members.remove(value)
        self._data[field_name] = members

    # --- QUERY STATE (Builder Interface) ---

    def where(self: T, field_name: str, *args: Any) -> T:
        """
        Adds a key condition.

        Usage:
            user.where("name", "John")
            user.where("age", ">", 20)
        """
        if len(args) == 1:
            return self.where_equals(field_name, args[0])
        if len(args) == 2:
            return self.where_op(field_name, args[0], args[1])
        raise TypeError(f"where() takes a value or an operator and a value, got {len(args)} args")

    def where_equals(self: T, field_name: str, value: Any) -> T:
        self._conditions.where_equals(field_name, value)
        return self

    def where_op(self: T, field_name: str, operator: str | ComparisonOperator, value: Any) -> T:
        self._conditions.where_op(field_name, operator, value)
        return self

    def limit(self: T, limit: int) -> T:
        """Sets the page size; find_many() then returns a single page."""
        self._state.limit = limit
        return self

    def index(self: T, index_name: str) -> T:
        """Selects a secondary index for find_many()."""
        self._state.index_name = index_name
        return self

    def consistent(self: T, consistent_read: bool = True) -> T:
        self._state.consistent_read = consistent_read
        return self

    def set_exclusive_start_key(self: T, exclusive_start_key: dict[str, Any]) -> T:
        """Resumes the next bounded find_many() from a previous cursor."""
        self._state.exclusive_start_key = dict(exclusive_start_key)
        return self

    def reset_conditions(self) -> None:
        """Clears limit, conditions, cursor, index and consistency flag."""
        self._conditions.clear()
        self._state.reset()

    # --- READS ---

    def find_one(
        self: T,
        hash_value: Any,
        range_value: Any | None = None,
        options: GetOptions | None = None,
    ) -> T | None:
        """
        Fetches a single record by primary key.

        Returns:
            A hydrated record of the same kind, or None if no item matches.
        """
        data = self._executor.get_one(hash_value, range_value, options)
        if data is None:
            return None
        return self._spawn(data)

    def find_page(self: T, options: QueryOptions | None = None) -> PageResult[T]:
        """
        Runs the accumulated query and returns records with the cursor.

        With limit() set a single page is fetched and its cursor kept in
        last_evaluated_key; without it every page is read.
        """
        page = self._executor.query_many(self._conditions, self._state, options)
        self._state.last_evaluated_key = page.last_evaluated_key
        records = [self._spawn(data) for data in page.items]
        return PageResult(
            items=records, last_evaluated_key=page.last_evaluated_key, count=len(records)
        )

    def find_many(self: T, options: QueryOptions | None = None) -> list[T]:
        return self.find_page(options).items

    def _spawn(self: T, data: dict[str, Any]) -> T:
        instance = type(self)(self._client, self._config)
        return instance.hydrate(data)

    # --- WRITES ---

    def save(self, options: SaveOptions | None = None) -> dict[str, Any]:
        """
        Persists the record with a conditional put.

        New records expect every schema field to be absent, so a save never
        overwrites an existing item. Loaded records expect the stored item to
        still match the snapshot taken at hydration. force_update skips both.

        Raises:
            ConditionalCheckFailedError: If the stored item does not match
        """
        options = options or SaveOptions()
        values = self._codec.remove_empty(self._data)
        expected: dict[str, Any] = {}
        exists: dict[str, bool] = {}

        if not options.force_update:
            if self._is_new:
                exists = {field_name: False for field_name in self._meta.schema}
            else:
                expected = self._codec.remove_empty(self._data_original)
                # Empty values are never written, so the stored item lacks them
                exists = {k: False for k in self._data_original if k not in expected}

        exists.update(options.exists)
        response = self.put_item(values, options.model_copy(update={"exists": exists}), expected)

        self._is_new = False
        self._data_original = copy.deepcopy(self._data)
        return response

    def put_item(
        self,
        values: dict[str, Any],
        options: SaveOptions | None = None,
        expected: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Writes an item, with an Expected clause when expectations are given."""
        options = options or SaveOptions()
        meta = self._meta

        args: dict[str, Any] = {
            "TableName": meta.table_name,
            "Item": self._codec.encode(meta.schema, self._codec.remove_empty(values)),
            "ReturnConsumedCapacity": options.return_consumed_capacity,
            "ReturnItemCollectionMetrics": options.return_item_collection_metrics,
        }
        if expected or options.exists:
            args["Expected"] = build_expected(meta.schema, self._codec, expected, options.exists)
        if options.return_values:
            args["ReturnValues"] = options.return_values

        logger.info(
            "Saving item",
            extra={
                "table": meta.table_name,
                "operation": "save",
                "pk_hash": redact_key(str(values.get(meta.hash_key))),
                "has_condition": "Expected" in args,
            },
        )

        with handle_dynamo_errors(table_name=meta.table_name):
            response = self._client.put_item(**args)
        self._log_query("put_item", args, response)
        logger.info("Save successful", extra={"table": meta.table_name, "operation": "save"})
        return response

    def update_item(
        self,
        values: dict[str, Any],
        options: UpdateOptions | None = None,
        expected: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Updates attributes of the stored item addressed by this record's keys.

        Usage:
            counter.update_item({"hits": 1}, UpdateOptions(actions={"hits": UpdateAction.ADD}))
        """
        options = options or UpdateOptions()
        meta = self._meta

        args: dict[str, Any] = {
            "TableName": meta.table_name,
            "Key": self._key_conditions(),
            "AttributeUpdates": build_attribute_updates(
                meta.schema,
                self._codec,
                self._codec.remove_empty(values),
                options.actions,
                key_fields=meta.key_fields(),
            ),
            "ReturnValues": options.return_values,
            "ReturnConsumedCapacity": options.return_consumed_capacity,
            "ReturnItemCollectionMetrics": options.return_item_collection_metrics,
        }
        if expected or options.exists:
            args["Expected"] = build_expected(meta.schema, self._codec, expected, options.exists)

        logger.info(
            "Updating item",
            extra={
                "table": meta.table_name,
                "operation": "update",
                "has_condition": "Expected" in args,
            },
        )

        with handle_dynamo_errors(table_name=meta.table_name):
            response = self._client.update_item(**args)
        self._log_query("update_item", args, response)
        return response

    def delete(self) -> dict[str, Any] | None:
        """
        Deletes the stored item addressed by this record's keys.

        Returns:
            The decoded attributes the item held before deletion, or None.
        """
        meta = self._meta
        args: dict[str, Any] = {
            "TableName": meta.table_name,
            "Key": self._key_conditions(),
            "ReturnValues": "ALL_OLD",
        }

        logger.info("Deleting item", extra={"table": meta.table_name, "operation": "delete"})

        with handle_dynamo_errors(table_name=meta.table_name):
            response = self._client.delete_item(**args)
        self._log_query("delete_item", args, response)
        logger.info("Delete successful", extra={"table": meta.table_name, "operation": "delete"})

        attributes = response.get("Attributes")
        return self._codec.decode(attributes) if attributes else None

    def _key_conditions(self) -> dict[str, dict[str, Any]]:
        """Returns the encoded primary key of this record."""
        meta = self._meta
        key = {meta.hash_key: self.get(meta.hash_key)}
        if meta.has_range_key() and self.get(meta.range_key) is not None:
            key[meta.range_key] = self.get(meta.range_key)
        return self._codec.encode(meta.schema, key)

    def _log_query(self, operation: str, args: dict[str, Any], response: Any) -> None:
        log_query(
            operation,
            args,
            response,
            enabled=self._config.logging,
            include_response=self._config.log_responses,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._data!r}, is_new={self._is_new})"
