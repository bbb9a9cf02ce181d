"""
Wire format for pagination state.

PageState carries LastKey, Limit, ExcludeFirst and Order between requests of a
stateless service. The anchor key is intentionally not part of it: a resumed
page is always anchored at the serialized LastKey.
"""

import base64

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from ._logging import logger
from .exceptions import PageStateError
from .pagination import Order, Pagination


class PageState(BaseModel):
    """Serializable snapshot of a Pagination after a traversal."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="forbid",
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    last_key: bytes | None = Field(default=None, alias="LastKey")
    limit: int = Field(ge=0, alias="Limit")
    exclude_first: bool = Field(default=True, alias="ExcludeFirst")
    order: Order = Field(default=Order.ASC, alias="Order")

    @classmethod
    def from_pagination(cls, pagination: Pagination) -> "PageState":
        return cls(
            last_key=pagination.last_key,
            limit=pagination.limit,
            exclude_first=pagination.exclude_first,
            order=pagination.order,
        )

    def restore(self) -> Pagination:
        """Rebuilds the finished Pagination this state was taken from (without its anchor)."""
        pagination = Pagination(
            limit=self.limit, order=self.order, exclude_first=self.exclude_first
        )
        pagination.last_key = self.last_key
        return pagination

    def resume(self, count: int | None = None, order: Order | None = None) -> Pagination:
        """Returns the Pagination for the page following the serialized one."""
        return self.restore().next_page(count, order)

    @property
    def has_more(self) -> bool:
        return self.last_key is not None


def dump_state(pagination: Pagination) -> str:
    """Serializes a Pagination to PageState JSON using the wire field names."""
    return PageState.from_pagination(pagination).model_dump_json(by_alias=True)


def load_state(data: str | bytes) -> PageState:
    """Parses PageState JSON, raising PageStateError if it is malformed."""
    try:
        return PageState.model_validate_json(data)
    except PydanticValidationError as e:
        logger.warning("Rejected page state", extra={"errors": e.error_count()})
        raise PageStateError(f"Invalid page state: {e}", original_error=e) from e


def encode_token(pagination: Pagination) -> str:
    """
    Encodes a Pagination as an opaque, URL-safe page token.

    Usage:
        pagination.for_each(cursor, fn)
        response["next"] = encode_token(pagination) if pagination.last_key else None
    """
    raw = dump_state(pagination).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def decode_token(
    token: str, count: int | None = None, order: Order | None = None
) -> Pagination:
    """
    Decodes a page token into the Pagination for the next page.

    count and order override the serialized Limit and Order.
    """
    try:
        padded = token + "=" * (-len(token) % 4)
        raw = base64.urlsafe_b64decode(padded.encode("ascii"))
    except ValueError as e:
        raise PageStateError(f"Malformed page token: {e!s}", original_error=e) from e

    return load_state(raw).resume(count, order)
