"""Sending mail through SendGrid and reporting the outcome as data."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict

from mcp_sendgrid.common.exceptions import SendGridAPIError
from mcp_sendgrid.sendgrid.client import SendGridClient
from mcp_sendgrid.sendgrid.models import SendEmailParams, SendResult

logger = logging.getLogger(__name__)

UNKNOWN_ERROR = "Unknown error occurred"


class SendOk(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    status_code: int | None = None

    def to_result(self) -> SendResult:
        return _envelope(True, self.message, self.status_code)


class SendErr(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str
    status_code: int | None = None

    def to_result(self) -> SendResult:
        return _envelope(False, self.message, self.status_code)


SendOutcome = SendOk | SendErr


def _envelope(success: bool, message: str, status_code: int | None) -> SendResult:
    # statusCode is left unset rather than null so it drops out of the JSON
    if status_code is None:
        return SendResult(success=success, message=message)
    return SendResult(success=success, message=message, status_code=status_code)


def build_mail_payload(params: SendEmailParams) -> dict[str, Any]:
    """Translate tool arguments into a v3 mail/send request body."""
    personalization: dict[str, Any] = {"to": [{"email": params.to}]}
    if params.dynamic_template_data:
        personalization["dynamic_template_data"] = params.dynamic_template_data

    content = [{"type": "text/plain", "value": params.text}]
    if params.html:
        content.append({"type": "text/html", "value": params.html})

    payload: dict[str, Any] = {
        "personalizations": [personalization],
        "from": {"email": params.from_},
        "subject": params.subject,
        "content": content,
    }
    if params.template_id:
        payload["template_id"] = params.template_id
    return payload


def extract_error_message(error: Exception) -> str:
    """Pick the most specific message available for a failed send."""
    if isinstance(error, SendGridAPIError):
        if error.errors:
            return error.errors[0]
        if isinstance(error.body, dict):
            for key in ("message", "error"):
                if isinstance(error.body.get(key), str) and error.body[key]:
                    return error.body[key]
    return str(error) or UNKNOWN_ERROR


async def deliver(client: SendGridClient, params: SendEmailParams) -> SendOutcome:
    try:
        response = await client.send_mail(build_mail_payload(params))
    except Exception as e:
        logger.warning(f"Send to {params.to} failed: {e!r}")
        return SendErr(
            message=f"Failed to send email: {extract_error_message(e)}",
            status_code=getattr(e, "status_code", None),
        )
    return SendOk(
        message=f"Email sent successfully to {params.to}",
        status_code=response.status_code,
    )


async def send_email(client: SendGridClient, params: SendEmailParams) -> SendResult:
    """Send one message. Failures are returned in the result, never raised."""
    outcome = await deliver(client, params)
    return outcome.to_result()
