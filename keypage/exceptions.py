from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from botocore.exceptions import ClientError


class KeypageError(Exception):
    """Base exception for all keypage errors."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class InvalidPaginationError(KeypageError):
    """Raised when a Pagination is built with an invalid limit or order."""

    def __init__(
        self, message: str, field: str | None = None, value: Any = None
    ) -> None:
        super().__init__(message)
        self.field = field
        self.value = value


class PageStateError(KeypageError):
    """Raised when a serialized page state or page token cannot be decoded."""


class StoreError(KeypageError):
    """Raised when the backing store fails with an error keypage does not classify."""


class TableNotFoundError(StoreError):
    """Raised when the DynamoDB table does not exist."""

    def __init__(self, table_name: str, original_error: Exception | None = None) -> None:
        super().__init__(f"Table '{table_name}' not found", original_error)
        self.table_name = table_name


class ProvisionedThroughputExceededError(StoreError):
    """Raised when DynamoDB throttles cursor reads."""

    def __init__(
        self, message: str = "Request rate exceeded", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


class ValidationError(StoreError):
    """Raised when DynamoDB rejects a cursor query (e.g. wrong key attribute type)."""

    def __init__(
        self, message: str = "Validation error", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


class RequestTimeoutError(StoreError):
    """Raised when a DynamoDB request times out."""

    def __init__(
        self, message: str = "Request timed out", original_error: Exception | None = None
    ) -> None:
        super().__init__(message, original_error)


@contextmanager
def handle_dynamo_errors(table_name: str | None = None) -> Generator[None, None, None]:
    """
    Context manager that translates botocore ClientError into keypage exceptions.

    Usage:
        with handle_dynamo_errors(table_name="kv"):
            client.query(...)
    """
    try:
        yield
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "")
        error_message = e.response.get("Error", {}).get("Message", str(e))

        if error_code == "ResourceNotFoundException":
            raise TableNotFoundError(table_name=table_name or "unknown", original_error=e) from e

        if error_code in (
            "ProvisionedThroughputExceededException",
            "ThrottlingException",
            "RequestLimitExceeded",
        ):
            raise ProvisionedThroughputExceededError(message=error_message, original_error=e) from e

        if error_code in ("ValidationException", "SerializationException"):
            raise ValidationError(message=error_message, original_error=e) from e

        if error_code in ("RequestTimeout", "RequestTimeoutException"):
            raise RequestTimeoutError(message=error_message, original_error=e) from e

        # Unknown error: wrap in generic StoreError
        raise StoreError(
            message=f"DynamoDB error ({error_code}): {error_message}", original_error=e
        ) from e
