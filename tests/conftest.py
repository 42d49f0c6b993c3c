import os

import httpx
import pytest

from mcp_sendgrid.sendgrid.client import SendGridClient


@pytest.fixture
def make_client():
    """Create SendGridClient instances backed by an in-process handler.

    The handler receives each ``httpx.Request`` and returns an ``httpx.Response``.
    Every request seen is appended to ``client.requests``.
    """

    def _make_client(handler):
        requests = []

        def _record(request):
            requests.append(request)
            return handler(request)

        client = SendGridClient(
            "SG.test-key",
            base_url="https://api.sendgrid.test",
            transport=httpx.MockTransport(_record),
        )
        client.requests = requests
        return client

    return _make_client


@pytest.fixture
def skip_if_no_api_key():
    def _skip_if_no_key(env_var):
        if not os.getenv(env_var):
            pytest.skip(f"Skipping test - {env_var} not set")

    return _skip_if_no_key
