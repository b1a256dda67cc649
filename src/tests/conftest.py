from typing import Iterator
from unittest.mock import MagicMock

import pytest

from tracelog.api import TracelogSyncClient
from tracelog.tracer.client import Tracelog, set_global_client


@pytest.fixture
def mock_api_client() -> MagicMock:
    client = MagicMock(spec=TracelogSyncClient)
    client.base_url = "http://test.com/api"
    return client


@pytest.fixture
def client(mock_api_client: MagicMock) -> Iterator[Tracelog]:
    tracelog = Tracelog(
        project_name="test_project",
        api_client=mock_api_client,
        disabled=False,
    )
    yield tracelog
    tracelog.end()


@pytest.fixture
def global_client(client: Tracelog) -> Iterator[Tracelog]:
    set_global_client(client)
    yield client
    set_global_client(None)
