"""Shared fixtures: a test configuration, transport, and payload builders."""

import httpx
import pytest
import pytest_asyncio

from replicate_client.common.config import ReplicateConfig
from replicate_client.common.http import ReplicateHTTPClient

BASE_URL = "https://api.replicate.test/v1"
API_KEY = "test-api-key"
VERSION_ID = "5c7d5dc6dd8bf75c1acaa8565735e7986bc5b66206b55cca93cb72c9bf15ccaa"
PREDICTION_ID = "gm3qorzdhgbfurvjtvhg6dckhu"


@pytest.fixture
def config():
    """Configuration pointing at the mocked service."""
    return ReplicateConfig(replicate_api_key=API_KEY, replicate_base_url=BASE_URL)


@pytest_asyncio.fixture
async def http(config):
    """Authenticated transport; closed after the test."""
    client = ReplicateHTTPClient(config, client=httpx.AsyncClient(timeout=5.0))
    yield client
    await client.client.aclose()


@pytest.fixture
def make_prediction():
    """Build a prediction payload as the service returns it."""
    def _make(prediction_id=PREDICTION_ID, status="starting", stream=False, **overrides):
        urls = {
            "get": f"{BASE_URL}/predictions/{prediction_id}",
            "cancel": f"{BASE_URL}/predictions/{prediction_id}/cancel",
        }
        if stream:
            urls["stream"] = f"https://streaming.replicate.test/v1/streams/{prediction_id}"
        payload = {
            "id": prediction_id,
            "model": "replicate/hello-world",
            "version": VERSION_ID,
            "input": {"text": "Alice"},
            "logs": "",
            "error": None,
            "status": status,
            "created_at": "2023-09-08T16:19:34.765994657Z",
            "urls": urls,
        }
        payload.update(overrides)
        return payload
    return _make


@pytest.fixture
def versions_payload():
    """A single-entry version listing for replicate/hello-world."""
    return {
        "next": None,
        "previous": None,
        "results": [{
            "id": VERSION_ID,
            "created_at": "2022-04-26T19:29:04.418669Z",
            "cog_version": "0.3.0",
            "openapi_schema": None,
        }],
    }
