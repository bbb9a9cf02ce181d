import hashlib
import logging
from typing import Any

# Create the library logger
logger = logging.getLogger("keypage")

# Add NullHandler to prevent "No handlers could be found" warnings
# if the application doesn't configure logging.
logger.addHandler(logging.NullHandler())


def redact_key(key: Any) -> str | None:
    """
    Redacts a cursor key or partition value for logging.
    Hashes the value to allow correlation between log lines without revealing it.
    """
    if key is None:
        return None
    try:
        if isinstance(key, (bytes, bytearray, memoryview)):
            raw = bytes(key)
        else:
            raw = str(key).encode("utf-8")
        return hashlib.sha256(raw).hexdigest()[:8]
    except Exception:
        return "<redaction_failed>"
