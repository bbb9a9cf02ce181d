"""
Resumable, bidirectional pagination over an ordered key-value cursor.

A Pagination describes one page request: where to start (an anchor key, or the
edge of the range), which way to walk, and how many records to accept. After
for_each() has walked the cursor, last_key holds the key the cursor stopped on,
and next_page() turns it into the request for the following page.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from ._logging import logger, redact_key
from .cursor import Cursor, Record
from .exceptions import InvalidPaginationError


class Order(str, Enum):
    """Direction in which a page walks the cursor."""

    ASC = "asc"
    DESC = "desc"


class Outcome(Enum):
    """
    Result of a per-record callback.

    ACCEPT counts the record against the page limit, EXCLUDE marks it as visited
    but not counted (soft-deleted or filtered records). A callback signals failure
    by raising; the exception leaves for_each() untouched.
    """

    ACCEPT = "accept"
    EXCLUDE = "exclude"


ForEachFn = Callable[[bytes, bytes], "Outcome | None"]


class Pagination:
    """
    Serializable pagination state.

    The anchor key is private on purpose: a resumed page always derives its
    anchor from the previous page's last_key through next_page(), never from a
    raw key received at the wire boundary.
    """

    def __init__(
        self,
        key: bytes | None = None,
        limit: int = 0,
        order: Order = Order.ASC,
        exclude_first: bool = True,
    ) -> None:
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise InvalidPaginationError(
                f"limit must be a non-negative integer, got {limit!r}", field="limit", value=limit
            )
        try:
            order = Order(order)
        except ValueError as e:
            raise InvalidPaginationError(
                f"order must be one of {[o.value for o in Order]}, got {order!r}",
                field="order",
                value=order,
            ) from e

        if key is not None and not isinstance(key, (bytes, bytearray, memoryview)):
            raise InvalidPaginationError(
                f"key must be bytes or None, got {type(key).__name__}", field="key", value=key
            )

        self._key = bytes(key) if key is not None else None
        self.last_key: bytes | None = None
        self.limit = limit
        self.exclude_first = exclude_first
        self.order = order

    def __repr__(self) -> str:
        return (
            f"Pagination(limit={self.limit}, order={self.order.value}, "
            f"exclude_first={self.exclude_first}, has_anchor={self._key is not None}, "
            f"last_key={self.last_key!r})"
        )

    @property
    def has_anchor(self) -> bool:
        return self._key is not None

    def for_each(self, cursor: Cursor, fn: ForEachFn) -> None:
        """
        Walks the cursor from the page start, calling fn with owned copies of
        each record until limit records are accepted or the range is exhausted.

        Exceptions raised by fn propagate unchanged. last_key is then left on the
        record whose callback raised.
        """
        accepted = 0
        excluded = 0

        logger.debug(
            "Starting page traversal",
            extra={
                "order": self.order.value,
                "limit": self.limit,
                "anchor_hash": redact_key(self._key),
                "exclude_first": self.exclude_first,
            },
        )

        k, v = self._seek_to_first(cursor)
        while k is not None and accepted < self.limit:
            # The cursor may overwrite its buffers on the next move
            key = bytes(k)
            value = bytes(v) if v is not None else b""

            try:
                outcome = fn(key, value)
            except Exception:
                self.last_key = key
                logger.warning(
                    "Page traversal aborted by callback",
                    extra={"key_hash": redact_key(key), "accepted": accepted},
                )
                raise

            if outcome is None or outcome is Outcome.ACCEPT:
                accepted += 1
            elif outcome is Outcome.EXCLUDE:
                excluded += 1
            else:
                self.last_key = key
                raise TypeError(
                    f"for_each callback must return an Outcome or None, got {outcome!r}"
                )

            k, v = self._next(cursor)

        self.last_key = bytes(k) if k is not None else None

        logger.info(
            "Page traversal complete",
            extra={
                "order": self.order.value,
                "limit": self.limit,
                "accepted": accepted,
                "excluded": excluded,
                "has_more": self.last_key is not None,
            },
        )

    def next_page(self, count: int | None = None, order: Order | None = None) -> "Pagination":
        """
        Returns the Pagination for the page after this one, anchored at last_key.

        count and order default to this page's limit and order. The anchor is
        always excluded so the record at last_key is not returned twice.
        """
        return Pagination(
            key=self.last_key,
            limit=self.limit if count is None else count,
            order=self.order if order is None else order,
            exclude_first=True,
        )

    def _seek_to_first(self, cursor: Cursor) -> Record:
        if self._key is None:
            if self.order is Order.ASC:
                return cursor.first()
            return cursor.last()

        k, v = cursor.seek(self._key)
        if self.exclude_first:
            return self._next(cursor)
        return k, v

    def _next(self, cursor: Cursor) -> Record:
        if self.order is Order.ASC:
            return cursor.next()
        return cursor.prev()


def new_pagination(key: bytes | None, count: int, order: Order = Order.ASC) -> Pagination:
    """Creates a first-page Pagination, optionally starting after a known key."""
    return Pagination(key=key, limit=count, order=order)


@dataclass
class PageResult:
    """
    A single page of records with the state needed to fetch the next one.

    Attributes:
        items: Accepted (key, value) pairs in traversal order
        last_key: Key the cursor stopped on (None if the range is exhausted)
        count: Number of accepted records
        order: Direction the page was walked in
        pagination: The Pagination that produced this page
    """

    items: list[tuple[bytes, bytes]]
    last_key: bytes | None
    count: int
    order: Order | None = None
    pagination: Pagination | None = field(default=None, repr=False)

    @property
    def has_more(self) -> bool:
        """Returns True if there are more records past this page."""
        return self.last_key is not None

    def next_page(self, count: int | None = None, order: Order | None = None) -> Pagination:
        """Builds the continuation Pagination for this page."""
        if self.pagination is not None:
            return self.pagination.next_page(count, order)

        resolved = order if order is not None else self.order
        if resolved is None:
            raise InvalidPaginationError(
                "order is required to continue a page without its Pagination", field="order"
            )

        return Pagination(
            key=self.last_key,
            limit=self.count if count is None else count,
            order=resolved,
        )


def paginate(
    cursor: Cursor,
    pagination: Pagination,
    predicate: Callable[[bytes, bytes], bool] | None = None,
) -> PageResult:
    """
    Runs one page and collects the accepted records.

    Records for which predicate returns a falsy value are visited but excluded
    from the page and from the limit.

    Usage:
        page1 = paginate(cursor, Pagination(limit=10))
        if page1.has_more:
            page2 = paginate(cursor, page1.next_page())
    """
    items: list[tuple[bytes, bytes]] = []

    def collect(key: bytes, value: bytes) -> Outcome:
        if predicate is not None and not predicate(key, value):
            return Outcome.EXCLUDE
        items.append((key, value))
        return Outcome.ACCEPT

    pagination.for_each(cursor, collect)
    return PageResult(
        items=items,
        last_key=pagination.last_key,
        count=len(items),
        order=pagination.order,
        pagination=pagination,
    )
