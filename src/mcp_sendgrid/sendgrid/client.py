"""Async client for the SendGrid v3 REST API."""

import logging
from typing import Any
from urllib.parse import quote

import httpx

from mcp_sendgrid.common.config import settings
from mcp_sendgrid.common.exceptions import SendGridAPIError

logger = logging.getLogger(__name__)

STATS_URL = "/v3/stats"
MESSAGES_URL = "/v3/messages"
MAIL_SEND_URL = "/v3/mail/send"
BOUNCES_URL = "/v3/suppression/bounces"
BLOCKS_URL = "/v3/suppression/blocks"


class SendGridClient:
    """
    Thin wrapper around ``httpx.AsyncClient`` bound to one API key.

    Every method returns the decoded JSON body. Non-2xx responses raise
    SendGridAPIError; connection problems surface as httpx errors.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "",
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._http = httpx.AsyncClient(
            base_url=base_url or settings.sendgrid_base_url,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            timeout=timeout if timeout is not None else settings.sendgrid_timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "SendGridClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """Send a request and raise SendGridAPIError unless it succeeded."""
        response = await self._http.request(method, url, params=params, json=json)
        if response.is_error:
            raise SendGridAPIError(response.status_code, _decode_body(response))
        return response

    async def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        response = await self.request("GET", url, params=params)
        return _decode_body(response)

    async def get_stats(
        self, start_date: str, end_date: str = "", aggregated_by: str | None = None
    ) -> Any:
        params = {"start_date": start_date}
        if end_date:
            params["end_date"] = end_date
        if aggregated_by:
            params["aggregated_by"] = aggregated_by
        return await self.get_json(STATS_URL, params=params)

    async def get_email_activity(self, query: str, limit: int = 10) -> Any:
        return await self.get_json(MESSAGES_URL, params={"query": query, "limit": limit})

    async def get_suppression(self, email: str, root: str) -> Any:
        """Fetch the raw suppression entry for ``email`` under ``root``."""
        return await self.get_json(f"{root}/{quote(email, safe='')}")

    async def send_mail(self, payload: dict[str, Any]) -> httpx.Response:
        logger.debug(f"Sending mail via {MAIL_SEND_URL}")
        return await self.request("POST", MAIL_SEND_URL, json=payload)


def _decode_body(response: httpx.Response) -> Any:
    """Decode a JSON body, falling back to the raw text for non-JSON replies."""
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
