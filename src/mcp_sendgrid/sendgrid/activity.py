"""Email activity lookup for a recipient."""

import logging
from typing import Any

from pydantic import ValidationError

from mcp_sendgrid.sendgrid.client import SendGridClient
from mcp_sendgrid.sendgrid.models import EmailActivitySummary

logger = logging.getLogger(__name__)


def build_activity_query(recipient: str, subject: str = "") -> str:
    """
    Build a SendGrid activity query for a recipient, optionally narrowed by subject.

    Quotes inside ``recipient`` or ``subject`` are passed through as-is, so callers
    must not rely on them being escaped.
    """
    if not recipient:
        raise ValueError("recipient is required")

    query_parts = [f'to_email="{recipient}"']
    if subject:
        query_parts.append(f'subject="{subject}"')
    return " AND ".join(query_parts)


def _summarize(message: Any) -> EmailActivitySummary | None:
    """Project one raw message, or return None when it cannot be used."""
    if not isinstance(message, dict):
        return None
    status = message.get("status")
    try:
        summary = EmailActivitySummary(
            id=message.get("msg_id") or "",
            to=message.get("to_email") or "",
            subject=message.get("subject") or "",
            status=status if status is not None else "unknown",
            last_event_time=message.get("last_event_time"),
        )
    except ValidationError as e:
        logger.debug(f"Skipping malformed activity message: {e}")
        return None
    if not (summary.id and summary.to):
        return None
    return summary


def format_activity(messages: list[Any]) -> list[EmailActivitySummary]:
    """Project raw messages onto summaries, dropping entries without an id or recipient."""
    summaries = [_summarize(message) for message in messages]
    return [summary for summary in summaries if summary is not None]


async def get_email_activity(
    client: SendGridClient, recipient: str, subject: str = ""
) -> list[EmailActivitySummary]:
    query = build_activity_query(recipient, subject)
    response = await client.get_email_activity(query)
    messages = (response.get("messages") or []) if isinstance(response, dict) else []
    return format_activity(messages)
