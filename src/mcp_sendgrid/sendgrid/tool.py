"""SendGrid tools exposed over MCP."""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server
from mcp.shared.exceptions import McpError
from pydantic import BaseModel, ConfigDict, ValidationError

from mcp_sendgrid.common.exceptions import SendGridAPIError, UnknownToolError
from mcp_sendgrid.sendgrid.activity import get_email_activity
from mcp_sendgrid.sendgrid.client import SendGridClient
from mcp_sendgrid.sendgrid.mail import send_email
from mcp_sendgrid.sendgrid.models import (
    GetEmailActivityParams,
    GetStatsParams,
    GetSuppressionStatusParams,
    SendEmailParams,
)
from mcp_sendgrid.sendgrid.stats import get_stats
from mcp_sendgrid.sendgrid.suppression import get_suppression_status

logger = logging.getLogger(__name__)

SERVER_NAME = "sendgrid-mcp"
SERVER_VERSION = "1.0.0"


class ToolSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    params: type[BaseModel]
    handler: Callable[[SendGridClient, Any], Awaitable[Any]]


async def _send_email(client: SendGridClient, params: SendEmailParams):
    return await send_email(client, params)


async def _get_stats(client: SendGridClient, params: GetStatsParams):
    return await get_stats(
        client, params.start_date, params.end_date, params.aggregated_by
    )


async def _get_email_activity(client: SendGridClient, params: GetEmailActivityParams):
    return await get_email_activity(client, params.recipient, params.subject)


async def _get_suppression_status(
    client: SendGridClient, params: GetSuppressionStatusParams
):
    return await get_suppression_status(client, params.email)


TOOLS: dict[str, ToolSpec] = {
    spec.name: spec
    for spec in [
        ToolSpec(
            name="send_email",
            description="Send an email using SendGrid",
            params=SendEmailParams,
            handler=_send_email,
        ),
        ToolSpec(
            name="get_stats",
            description="Get SendGrid email statistics for a given date range",
            params=GetStatsParams,
            handler=_get_stats,
        ),
        ToolSpec(
            name="get_email_activity",
            description="Retrieve recent email activity for a SendGrid recipient, optionally filtered by subject",
            params=GetEmailActivityParams,
            handler=_get_email_activity,
        ),
        ToolSpec(
            name="get_suppression_status",
            description="Check if an email address is currently suppressed due to a bounce or block. Returns suppression details including reason, status code, and timestamp.",
            params=GetSuppressionStatusParams,
            handler=_get_suppression_status,
        ),
    ]
}


def tool_definitions() -> list[types.Tool]:
    """Describe every tool with an input schema generated from its params model."""
    return [
        types.Tool(
            name=spec.name,
            description=spec.description,
            inputSchema=spec.params.model_json_schema(by_alias=True),
        )
        for spec in TOOLS.values()
    ]


def _to_jsonable(result: Any) -> Any:
    if isinstance(result, BaseModel):
        return result.model_dump(mode="json", by_alias=True, exclude_unset=True)
    if isinstance(result, list):
        return [_to_jsonable(item) for item in result]
    return result


def text_response(result: Any) -> list[types.TextContent]:
    return [
        types.TextContent(type="text", text=json.dumps(_to_jsonable(result), indent=2))
    ]


async def dispatch(
    client: SendGridClient, name: str, arguments: dict[str, Any] | None
) -> list[types.TextContent]:
    """Run the named tool and wrap its result as a single JSON text block."""
    spec = TOOLS.get(name)
    if spec is None:
        raise UnknownToolError(name)

    logger.debug(f"Calling tool {name}")
    params = spec.params.model_validate(arguments or {})
    result = await spec.handler(client, params)
    return text_response(result)


def format_tool_error(error: Exception) -> McpError:
    """Map a failed tool call onto an MCP protocol error."""
    if isinstance(error, McpError):
        return error
    if isinstance(error, SendGridAPIError) and error.errors:
        message = f"SendGrid API Error: {', '.join(error.errors)}"
        return McpError(types.ErrorData(code=types.INTERNAL_ERROR, message=message))
    if isinstance(error, UnknownToolError):
        return McpError(
            types.ErrorData(code=types.METHOD_NOT_FOUND, message=str(error))
        )
    if isinstance(error, (ValueError, ValidationError)):
        return McpError(types.ErrorData(code=types.INVALID_PARAMS, message=str(error)))
    return McpError(
        types.ErrorData(
            code=types.INTERNAL_ERROR,
            message=str(error) or "An unexpected error occurred",
        )
    )


def create_server(client: SendGridClient) -> Server:
    server = Server(SERVER_NAME, version=SERVER_VERSION)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return tool_definitions()

    @server.call_tool()
    async def call_tool(
        name: str, arguments: dict[str, Any] | None
    ) -> list[types.TextContent]:
        try:
            return await dispatch(client, name, arguments)
        except Exception as e:
            logger.error(f"SendGrid Error: {e!r}")
            raise format_tool_error(e) from e

    return server


async def serve(client: SendGridClient) -> None:
    """Serve the tools on stdin/stdout until the client disconnects."""
    server = create_server(client)
    async with stdio_server() as (read_stream, write_stream):
        logger.info("SendGrid MCP server running on stdio")
        await server.run(
            read_stream, write_stream, server.create_initialization_options()
        )
