from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class SuppressionRecord(BaseModel):
    """
    A bounce or block entry as returned by SendGrid.
    Optional fields that are missing mean the suppression exists but SendGrid
    returned no detail for it.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    email: str | None = Field(
        default=None, description="The suppressed email address."
    )
    created: int | None = Field(
        default=None, description="When the suppression was created, in unix seconds."
    )
    reason: str | None = Field(
        default=None, description="The provider's explanation for the suppression."
    )
    status: str | None = Field(
        default=None, description="Enhanced SMTP status code (e.g., '5.4.7')."
    )


class SuppressionStatusReport(BaseModel):
    """Unified bounce/block suppression status for one address."""

    email: str = Field(..., description="The email address that was checked.")
    suppressed: bool = Field(
        ..., description="Whether SendGrid currently suppresses this address."
    )
    type: Literal["bounce", "block"] | None = Field(
        ..., description="Which suppression list the reported record came from."
    )
    reason: str | None = Field(..., description="Reason given for the suppression.")
    status: str | None = Field(..., description="Enhanced SMTP status code.")
    created: str | None = Field(
        ..., description="Creation time of the suppression as an ISO 8601 string."
    )
    created_timestamp: int | None = Field(
        ..., description="Creation time of the suppression in unix seconds."
    )
    note: str | None = Field(
        default=None,
        description="Explanation attached when no suppression or no detail was found.",
    )


class EmailActivitySummary(BaseModel):
    """Simplified view of one message from the SendGrid activity feed."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str = Field(..., description="SendGrid message ID.")
    to: str = Field(..., description="Recipient address.")
    subject: str = Field(default="", description="Subject line of the message.")
    status: str = Field(
        default="unknown",
        description="Delivery status (e.g., 'delivered', 'not_delivered').",
    )
    last_event_time: str | None = Field(
        default=None, description="Timestamp of the most recent event for the message."
    )


class SendResult(BaseModel):
    """Outcome of a send_email call."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool = Field(..., description="Whether SendGrid accepted the message.")
    message: str = Field(..., description="Human-readable summary of the outcome.")
    status_code: int | None = Field(
        default=None,
        alias="statusCode",
        description="HTTP status code returned by SendGrid, when known.",
    )


# Tool inputs


class SendEmailParams(BaseModel):
    """Arguments of the send_email tool."""

    model_config = ConfigDict(populate_by_name=True)

    to: str = Field(..., description="Recipient email address")
    from_: str = Field(
        ...,
        alias="from",
        description="Sender email address (must be verified with SendGrid)",
    )
    subject: str = Field(..., description="Email subject line")
    text: str = Field(..., description="Plain text content of the email")
    html: str = Field(default="", description="HTML content of the email (optional)")
    template_id: str = Field(
        default="", description="SendGrid template ID (optional)"
    )
    dynamic_template_data: dict[str, Any] = Field(
        default_factory=dict,
        description="Dynamic data for template variables (optional)",
    )


class GetStatsParams(BaseModel):
    """Arguments of the get_stats tool."""

    start_date: str = Field(..., description="Start date in YYYY-MM-DD format")
    end_date: str = Field(
        default="", description="End date in YYYY-MM-DD format (optional)"
    )
    aggregated_by: Literal["day", "week", "month"] | None = Field(
        default=None, description="Aggregate level for the statistics (optional)"
    )


class GetEmailActivityParams(BaseModel):
    """Arguments of the get_email_activity tool."""

    recipient: str = Field(..., description="Recipient email address to query")
    subject: str = Field(default="", description="Optional subject filter")


class GetSuppressionStatusParams(BaseModel):
    """Arguments of the get_suppression_status tool."""

    email: str = Field(
        ..., description="Email address to check for bounce or block suppression"
    )
