"""Bounce and block suppression lookups for a single address."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from mcp_sendgrid.common.exceptions import SendGridAPIError
from mcp_sendgrid.sendgrid.client import BLOCKS_URL, BOUNCES_URL, SendGridClient
from mcp_sendgrid.sendgrid.models import SuppressionRecord, SuppressionStatusReport

logger = logging.getLogger(__name__)

DETAIL_FIELDS = frozenset({"reason", "status", "created"})

NOT_SUPPRESSED_NOTE = "No bounce or block suppression found"


# Decoded shapes of a suppression response body


class EmptyList(BaseModel):
    """``[]``: the address is suppressed but SendGrid returned no entry."""

    model_config = ConfigDict(frozen=True)


class RecordList(BaseModel):
    """A non-empty list; only the first entry is used."""

    model_config = ConfigDict(frozen=True)

    first: dict[str, Any]


class SingleRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    record: dict[str, Any]


class Unrecognized(BaseModel):
    model_config = ConfigDict(frozen=True)

    raw: Any


SuppressionPayload = EmptyList | RecordList | SingleRecord | Unrecognized


def decode_suppression_payload(body: Any) -> SuppressionPayload:
    """Classify a raw suppression response body."""
    if isinstance(body, list):
        if not body:
            return EmptyList()
        if isinstance(body[0], dict):
            return RecordList(first=body[0])
        return Unrecognized(raw=body)
    if isinstance(body, dict):
        return SingleRecord(record=body)
    return Unrecognized(raw=body)


def normalize_suppression(
    email: str, payload: SuppressionPayload
) -> SuppressionRecord | None:
    """Turn a decoded payload into a record, or None when nothing is suppressed."""
    match payload:
        case EmptyList():
            return SuppressionRecord(email=email)
        case RecordList(first=record) | SingleRecord(record=record):
            return SuppressionRecord.model_validate(record)
        case _:
            return None


async def lookup_suppression(
    client: SendGridClient, email: str, root: str
) -> SuppressionRecord | None:
    """
    Look ``email`` up under one suppression endpoint.

    A 404 from SendGrid means the address is not on that list and yields None.
    Any other failure is re-raised untouched.
    """
    try:
        body = await client.get_suppression(email, root)
    except SendGridAPIError as e:
        if e.status_code == 404:
            logger.debug(f"No entry for {email} under {root}")
            return None
        raise
    return normalize_suppression(email, decode_suppression_payload(body))


async def get_bounce(client: SendGridClient, email: str) -> SuppressionRecord | None:
    return await lookup_suppression(client, email, BOUNCES_URL)


async def get_block(client: SendGridClient, email: str) -> SuppressionRecord | None:
    return await lookup_suppression(client, email, BLOCKS_URL)


def is_detailed(record: SuppressionRecord | None) -> bool:
    """True when the record carries a reason, status or created time.

    Presence is what counts: a field explicitly returned as "" or null still
    makes the record detailed.
    """
    if record is None:
        return False
    return bool(DETAIL_FIELDS & record.model_fields_set)


def _to_iso(created: int) -> str:
    dt = datetime.fromtimestamp(created, tz=timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _select_record(
    bounce: SuppressionRecord | None, block: SuppressionRecord | None
) -> tuple[Literal["bounce", "block"], SuppressionRecord]:
    if is_detailed(block):
        return "block", block
    if is_detailed(bounce):
        return "bounce", bounce
    if block is not None:
        return "block", block
    return "bounce", bounce


async def get_suppression_status(
    client: SendGridClient, email: str
) -> SuppressionStatusReport:
    """Check both suppression lists and report the most informative entry."""
    bounce, block = await asyncio.gather(
        get_bounce(client, email), get_block(client, email)
    )

    if bounce is None and block is None:
        return SuppressionStatusReport(
            email=email,
            suppressed=False,
            type=None,
            reason=None,
            status=None,
            created=None,
            created_timestamp=None,
            note=NOT_SUPPRESSED_NOTE,
        )

    suppression_type, record = _select_record(bounce, block)
    report = SuppressionStatusReport(
        email=record.email or email,
        suppressed=True,
        type=suppression_type,
        reason=record.reason,
        status=record.status,
        created=_to_iso(record.created) if record.created is not None else None,
        created_timestamp=record.created,
    )

    if not is_detailed(record):
        report.note = (
            f"{suppression_type.capitalize()} suppression exists but detailed "
            "information (reason, status, timestamp) is not available. This may "
            "occur if the suppression data is incomplete in SendGrid or if the "
            "API key lacks sufficient permissions."
        )

    return report
