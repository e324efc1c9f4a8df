"""
Shared pytest fixtures and configuration for pagesync tests.

This module provides common fixtures used across unit and integration tests,
including a mocked boto3 client, a LocalStack client and the test doubles
from tests/helpers/fakes.py.
"""

import os
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import boto3
import pytest
from botocore.exceptions import BotoCoreError, ClientError
from helpers.fakes import FakeView, RecordingListener, ScriptedFetcher

from pagesync import PaginationEngine, RetryPolicy

if TYPE_CHECKING:
    from helpers.localstack import LocalStackHelper


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line("markers", "integration: Integration tests against LocalStack")


@pytest.fixture(scope="session")
def localstack_endpoint() -> str:
    """Get LocalStack endpoint URL from environment or default."""
    return os.getenv("LOCALSTACK_ENDPOINT", "http://localhost:4566")


@pytest.fixture(scope="session")
def localstack_client(localstack_endpoint: str):
    """
    Creates a boto3 client connected to LocalStack.

    Integration tests are skipped when LocalStack is not reachable.
    """
    client = boto3.client(
        "dynamodb",
        endpoint_url=localstack_endpoint,
        region_name="eu-south-1",
        aws_access_key_id="test",
        aws_secret_access_key="test",
    )
    try:
        client.list_tables(Limit=1)
    except (BotoCoreError, ClientError) as e:
        pytest.skip(f"LocalStack not available at {localstack_endpoint}: {e}")
    return client


@pytest.fixture(scope="session")
def localstack_helper(localstack_client) -> "LocalStackHelper":
    """Provides LocalStack helper for integration tests."""
    from helpers.localstack import LocalStackHelper

    return LocalStackHelper(client=localstack_client)


@pytest.fixture
def mock_client():
    """
    Creates a fully mocked boto3 DynamoDB client.

    This fixture provides a mock client for unit tests that don't need
    real DynamoDB interactions.
    """
    client = MagicMock()
    client.scan.return_value = {"Items": []}
    return client


@pytest.fixture
def fast_policy() -> RetryPolicy:
    """Default retry limits with no delay, so retries run on the next loop turn."""
    return RetryPolicy(max_attempts=3, delay=0)


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def view() -> FakeView:
    return FakeView()


@pytest.fixture
def make_engine(fast_policy, listener):
    """
    Factory building an engine around a ScriptedFetcher, with the recording
    listener subscribed. Engines are closed after the test.
    """
    engines: list[PaginationEngine] = []

    def _make(*outcomes, hold: bool = False, policy: RetryPolicy | None = None):
        fetcher = ScriptedFetcher(*outcomes, hold=hold)
        engine = PaginationEngine(fetcher, policy or fast_policy)
        engine.subscribe(listener)
        engines.append(engine)
        return engine, fetcher

    yield _make

    for engine in engines:
        engine.close()
