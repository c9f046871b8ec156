from collections.abc import Generator
from contextlib import contextmanager

from botocore.exceptions import ClientError


class KettleError(Exception):
    """Base exception for all Kettle errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class SchemaDefinitionError(KettleError, ValueError):
    """Raised when a record kind is declared with an invalid Meta."""

    def __init__(self, record_name: str, reason: str) -> None:
        super().__init__(f"Record {record_name}: {reason}")
        self.record_name = record_name
        self.reason = reason


class RangeKeyNotDefinedError(KettleError, ValueError):
    """Raised when a range key value is given for a record kind without a range key."""

    def __init__(self, table_name: str) -> None:
        super().__init__(f"Range key is not defined on table '{table_name}'")
        self.table_name = table_name


class TableNotFoundError(KettleError):
    """Raised when the DynamoDB table does not exist."""

    def __init__(self, table_name: str, original_error: Exception | None = None) -> None:
        super().__init__(f"Table '{table_name}' not found", original_error)
        self.table_name = table_name


class ConditionalCheckFailedError(KettleError):
    """Raised when the store rejects a write because its Expected clause did not hold."""

    def __init__(
        self, table_name: str | None = None, original_error: Exception | None = None
    ) -> None:
        msg = "Conditional check failed"
        if table_name:
            msg += f" on table '{table_name}'"
        super().__init__(msg, original_error)
        self.table_name = table_name


class ProvisionedThroughputExceededError(KettleError):
    """Raised when DynamoDB throttles requests."""

    def __init__(
        self, message: str = "Request rate exceeded", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


class ItemCollectionSizeLimitError(KettleError):
    """Raised when item collection size exceeds 10GB limit."""

    def __init__(
        self,
        message: str = "Item collection size limit exceeded",
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(message, original_error)


class RequestTimeoutError(KettleError):
    """Raised when a request to DynamoDB times out."""

    def __init__(
        self, message: str = "Request timed out", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


class ValidationError(KettleError):
    """Raised for request validation errors reported by DynamoDB."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message, original_error)


class AttributeSerializationError(KettleError):
    """Raised when a value cannot be placed under its wire type tag."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message, original_error)


@contextmanager
def handle_dynamo_errors(table_name: str | None = None) -> Generator[None, None, None]:
    """
    Context manager that catches botocore.exceptions.ClientError
    and raises the appropriate KettleError subclass.

    The botocore error is kept as ``original_error`` and as the exception
    cause. Nothing is retried here.

    Args:
        table_name: Optional table name for better error messages

    Usage:
        with handle_dynamo_errors(table_name="users"):
            client.get_item(...)
    """
    try:
        yield
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        error_message = e.response.get("Error", {}).get("Message", str(e))

        if error_code == "ResourceNotFoundException":
            raise TableNotFoundError(table_name=table_name or "unknown", original_error=e) from e

        if error_code == "ConditionalCheckFailedException":
            raise ConditionalCheckFailedError(table_name=table_name, original_error=e) from e

        if error_code in (
            "ProvisionedThroughputExceededException",
            "ThrottlingException",
            "RequestLimitExceeded",
        ):
            raise ProvisionedThroughputExceededError(message=error_message, original_error=e) from e

        if error_code in ("ValidationException", "SerializationException"):
            raise ValidationError(message=error_message, original_error=e) from e

        if error_code == "ItemCollectionSizeLimitExceededException":
            raise ItemCollectionSizeLimitError(message=error_message, original_error=e) from e

        if error_code in ("RequestTimeout", "RequestTimeoutException"):
            raise RequestTimeoutError(message=error_message, original_error=e) from e

        raise KettleError(
            message=f"DynamoDB error ({error_code}): {error_message}", original_error=e
        ) from e
