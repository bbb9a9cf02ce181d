"""
Shared pytest fixtures and configuration for keypage tests.

This module provides common fixtures used across unit and integration tests,
including in-memory cursors, mocked boto3 clients and LocalStack clients.
"""

import os
import socket
from typing import TYPE_CHECKING
from unittest.mock import MagicMock
from urllib.parse import urlparse

import boto3
import pytest

from keypage import DynamoCursor, MemoryCursor, TableOptions

if TYPE_CHECKING:
    from tests.helpers.localstack import LocalStackHelper


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "integration: Integration tests against LocalStack")


@pytest.fixture
def letter_records() -> list[tuple[bytes, bytes]]:
    """Records keyed a..e, stored out of order on purpose."""
    return [
        (b"c", b"3"),
        (b"a", b"1"),
        (b"e", b"5"),
        (b"b", b"2"),
        (b"d", b"4"),
    ]


@pytest.fixture
def letter_cursor(letter_records) -> MemoryCursor:
    """In-memory cursor over the a..e range."""
    return MemoryCursor(letter_records)


@pytest.fixture
def shared_buffer_cursor(letter_records) -> MemoryCursor:
    """Cursor that overwrites the same key/value buffers on every move."""
    return MemoryCursor(letter_records, reuse_buffers=True)


@pytest.fixture
def numbered_records() -> list[tuple[bytes, bytes]]:
    """Fifty records with big-endian keys so byte order matches numeric order."""
    return [(i.to_bytes(4, "big"), f"value-{i}".encode()) for i in range(50)]


@pytest.fixture
def table_options() -> TableOptions:
    return TableOptions(table_name="test_kv")


@pytest.fixture
def mock_client():
    """
    Creates a fully mocked boto3 DynamoDB client.

    This fixture provides a mock client for unit tests that don't need
    real DynamoDB interactions.
    """
    return MagicMock()


@pytest.fixture(autouse=True)
def reset_default_client():
    """Keeps the DynamoCursor default client from leaking between tests."""
    DynamoCursor.set_client(None)
    yield
    DynamoCursor.set_client(None)


# --- Integration (LocalStack) ---


@pytest.fixture(scope="session")
def localstack_endpoint() -> str:
    """Get LocalStack endpoint URL from environment or default."""
    return os.getenv("LOCALSTACK_ENDPOINT", "http://localhost:4566")


@pytest.fixture(scope="session")
def localstack_client(localstack_endpoint: str):
    """
    Creates a boto3 client connected to LocalStack.

    Skips the requesting test when nothing listens on the endpoint.
    """
    parsed = urlparse(localstack_endpoint)
    try:
        with socket.create_connection((parsed.hostname, parsed.port or 80), timeout=1):
            pass
    except OSError:
        pytest.skip(f"LocalStack not reachable at {localstack_endpoint}")

    return boto3.client(
        "dynamodb",
        endpoint_url=localstack_endpoint,
        region_name="eu-south-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )


@pytest.fixture(scope="session")
def localstack_helper(localstack_client) -> "LocalStackHelper":
    """Session-scoped helper for managing LocalStack tables."""
    from tests.helpers.localstack import LocalStackHelper

    return LocalStackHelper(client=localstack_client)


@pytest.fixture
def kv_table(localstack_helper, table_options):
    """
    Creates the key-value table if needed and empties it around each test.
    """
    localstack_helper.create_kv_table(table_options)
    localstack_helper.clear_table(table_options)
    yield table_options
    localstack_helper.clear_table(table_options)
