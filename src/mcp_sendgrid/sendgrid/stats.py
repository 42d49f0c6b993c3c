"""Email statistics pass-through."""

from typing import Any

from mcp_sendgrid.sendgrid.client import SendGridClient


async def get_stats(
    client: SendGridClient,
    start_date: str,
    end_date: str = "",
    aggregated_by: str | None = None,
) -> Any:
    """Return SendGrid's global stats for the date range exactly as received."""
    return await client.get_stats(start_date, end_date, aggregated_by)
