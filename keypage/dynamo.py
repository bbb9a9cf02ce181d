from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from decimal import Decimal
from typing import Any, ClassVar

import boto3
from boto3.dynamodb.types import TypeSerializer

from ._logging import logger, redact_key
from .config import TableOptions
from .cursor import EXHAUSTED, Record
from .exceptions import ValidationError, handle_dynamo_errors

_BEFORE_FIRST = "before_first"
_AFTER_LAST = "after_last"


class DynamoCursor:
    """
    Cursor over a single DynamoDB partition used as an ordered key-value range.

    Every positioning call is one Query with Limit=1, so the cursor holds nothing
    but its current sort key between calls. Sort keys must be binary ("B"):
    DynamoDB compares binary values as unsigned bytes, which is the order the
    Pagination engine expects.

    Usage:
        options = TableOptions(table_name="kv")
        cursor = DynamoCursor(options, pk_value="inbox#42")
        page = paginate(cursor, Pagination(limit=20))
    """

    _type_serializer: ClassVar[TypeSerializer] = TypeSerializer()
    _client: ClassVar[Any | None] = None
    _client_context: ClassVar[ContextVar[Any | None]] = ContextVar(
        "keypage_dynamo_client", default=None
    )

    def __init__(self, options: TableOptions, pk_value: Any, client: Any | None = None) -> None:
        self.options = options
        self.pk_value = pk_value
        self.client = client if client is not None else self._get_client(options.region)

        try:
            self._pk_attr = self._type_serializer.serialize(
                Decimal(str(pk_value)) if isinstance(pk_value, float) else pk_value
            )
        except TypeError as e:
            raise ValidationError(
                f"Unsupported partition key value {pk_value!r}: {e!s}", original_error=e
            ) from e

        self._key: bytes | None = None
        self._edge: str | None = _BEFORE_FIRST

    # --- CLIENT RESOLUTION ---

    @classmethod
    def _get_client(cls, region: str) -> Any:
        """
        Returns a Boto3 DynamoDB client.

        A client scoped with using_client() wins over the global default set
        with set_client(); if neither exists a default client is created once.
        """
        ctx_client = cls._client_context.get()
        if ctx_client is not None:
            return ctx_client

        if cls._client is not None:
            return cls._client

        cls._client = boto3.client("dynamodb", region_name=region)
        return cls._client

    @classmethod
    @contextmanager
    def using_client(cls, client: Any) -> Generator[None, None, None]:
        """
        Context manager to scope a client to a block of code.
        Thread-safe and Async-safe using contextvars.

        Usage:
            with DynamoCursor.using_client(my_client):
                cursor = DynamoCursor(options, "inbox#42")
        """
        token = cls._client_context.set(client)
        try:
            yield
        finally:
            cls._client_context.reset(token)

    @classmethod
    def set_client(cls, client: Any | None) -> None:
        """Injects the default client used when none is passed or scoped."""
        cls._client = client

    # --- POSITIONING ---

    def first(self) -> Record:
        return self._land(self._query(None, None, forward=True), missing=_AFTER_LAST)

    def last(self) -> Record:
        return self._land(self._query(None, None, forward=False), missing=_BEFORE_FIRST)

    def seek(self, key: bytes) -> Record:
        # DynamoDB rejects empty binary values; every key sorts at or after b""
        if not key:
            return self.first()
        return self._land(self._query(">=", bytes(key), forward=True), missing=_AFTER_LAST)

    def next(self) -> Record:
        if self._edge == _AFTER_LAST:
            return EXHAUSTED
        if self._edge == _BEFORE_FIRST:
            return self.first()
        return self._land(self._query(">", self._key, forward=True), missing=_AFTER_LAST)

    def prev(self) -> Record:
        if self._edge == _BEFORE_FIRST:
            return EXHAUSTED
        if self._edge == _AFTER_LAST:
            return self.last()
        return self._land(self._query("<", self._key, forward=False), missing=_BEFORE_FIRST)

    def _land(self, item: dict[str, Any] | None, missing: str) -> Record:
        """Moves the cursor onto item, or onto the given edge when there is none."""
        if item is None:
            self._key = None
            self._edge = missing
            return EXHAUSTED

        key = item[self.options.sk_name]["B"]
        value = item.get(self.options.value_name, {}).get("B", b"")
        self._key = key
        self._edge = None
        return key, value

    def _query(self, operator: str | None, key: bytes | None, forward: bool) -> dict | None:
        config = self.options
        key_expr = "#pk = :pk"
        values: dict[str, Any] = {":pk": self._pk_attr}
        if operator is not None:
            key_expr += f" AND #sk {operator} :sk"
            values[":sk"] = {"B": key}

        kwargs = {
            "TableName": config.table_name,
            "KeyConditionExpression": key_expr,
            "ExpressionAttributeNames": config.attribute_names(),
            "ExpressionAttributeValues": values,
            "ProjectionExpression": config.projection(),
            "ScanIndexForward": forward,
            "ConsistentRead": config.consistent_read,
            "Limit": 1,
        }

        logger.debug(
            "Positioning cursor",
            extra={
                "table": config.table_name,
                "pk_hash": redact_key(self.pk_value),
                "key_hash": redact_key(key),
                "operator": operator,
                "forward": forward,
            },
        )

        with handle_dynamo_errors(table_name=config.table_name):
            response = self.client.query(**kwargs)

        items = response.get("Items", [])
        return items[0] if items else None
