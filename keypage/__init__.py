from .config import TableOptions
from .cursor import Cursor, MemoryCursor
from .dynamo import DynamoCursor
from .exceptions import (
    InvalidPaginationError,
    KeypageError,
    PageStateError,
    ProvisionedThroughputExceededError,
    RequestTimeoutError,
    StoreError,
    TableNotFoundError,
    ValidationError,
)
from .pagination import Order, Outcome, PageResult, Pagination, new_pagination, paginate
from .serializer import PageState, decode_token, dump_state, encode_token, load_state

__all__ = [
    "Pagination",
    "Order",
    "Outcome",
    "PageResult",
    "new_pagination",
    "paginate",
    # Cursors
    "Cursor",
    "MemoryCursor",
    "DynamoCursor",
    "TableOptions",
    # Page state
    "PageState",
    "dump_state",
    "load_state",
    "encode_token",
    "decode_token",
    # Exceptions
    "KeypageError",
    "InvalidPaginationError",
    "PageStateError",
    "StoreError",
    "TableNotFoundError",
    "ProvisionedThroughputExceededError",
    "RequestTimeoutError",
    "ValidationError",
]
