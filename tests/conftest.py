"""Pytest configuration and fixtures for EPG Sync tests."""

import json
from collections.abc import Callable

import httpx
import pytest

from epgsync.models import ProviderConfig
from epgsync.providers.hebei import HebeiProvider
from epgsync.utils.http_client import HTTPTransport

TEST_DAY = "2024-01-10"
TEST_BASE_URL = "http://hebei.test"


def make_entry(start: str, end: str, name: str) -> dict:
    return {"startDateTime": start, "endDateTime": end, "name": name}


def make_payload(
    data: dict | list | None = None,
    *,
    state: int = 200,
    message: str = "success",
    success: bool = True,
) -> bytes:
    return json.dumps(
        {"state": state, "message": message, "success": success, "data": data},
        ensure_ascii=False,
    ).encode("utf-8")


@pytest.fixture
def day_entries():
    """Three well-formed entries for TEST_DAY."""
    return [
        make_entry(f"{TEST_DAY} 06:00:00", f"{TEST_DAY} 07:00:00", "早间新闻"),
        make_entry(f"{TEST_DAY} 07:00:00", f"{TEST_DAY} 08:30:00", "河北新闻联播"),
        make_entry(f"{TEST_DAY} 08:30:00", f"{TEST_DAY} 09:15:00", "电视剧"),
    ]


@pytest.fixture
def hebei_config():
    return ProviderConfig(id="hebei", name="Hebei", base_url=TEST_BASE_URL, max_concurrency=2)


@pytest.fixture
def hebei_provider(hebei_config):
    """Provider whose transport is never expected to be used."""
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected request: {request.url}")

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=TEST_BASE_URL)
    transport = HTTPTransport("hebei", TEST_BASE_URL, client=client)
    return HebeiProvider(hebei_config, transport=transport)


@pytest.fixture
def make_provider(hebei_config) -> Callable[..., HebeiProvider]:
    """Build a HebeiProvider backed by an httpx.MockTransport handler."""
    def _make(handler, *, max_attempts: int = 1, config: ProviderConfig | None = None) -> HebeiProvider:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=TEST_BASE_URL)
        transport = HTTPTransport(
            "hebei",
            TEST_BASE_URL,
            client=client,
            max_attempts=max_attempts,
            backoff_factor=0.01,
        )
        return HebeiProvider(config or hebei_config, transport=transport)

    return _make


def request_source_id(request: httpx.Request) -> str:
    return json.loads(request.content)["sourceId"]
