"""Unit tests for tool descriptors, dispatch and error mapping."""
import json
from unittest.mock import AsyncMock, patch

import httpx
import mcp.types as types
import pytest
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session
from mcp_sendgrid.common.exceptions import SendGridAPIError, UnknownToolError
from mcp_sendgrid.sendgrid.models import GetStatsParams, SendResult
from mcp_sendgrid.sendgrid.tool import (
    TOOLS,
    create_server,
    dispatch,
    format_tool_error,
    tool_definitions,
)


class TestToolDefinitions:
    """Test the advertised tool schemas."""

    def test_four_tools(self):
        names = [tool.name for tool in tool_definitions()]
        assert names == [
            "send_email",
            "get_stats",
            "get_email_activity",
            "get_suppression_status",
        ]

    @pytest.mark.parametrize(
        "name,required",
        [
            ("send_email", ["to", "from", "subject", "text"]),
            ("get_stats", ["start_date"]),
            ("get_email_activity", ["recipient"]),
            ("get_suppression_status", ["email"]),
        ],
    )
    def test_required_fields(self, name, required):
        tool = next(tool for tool in tool_definitions() if tool.name == name)
        assert tool.inputSchema["type"] == "object"
        assert sorted(tool.inputSchema["required"]) == sorted(required)

    def test_send_email_exposes_from_not_from_(self):
        tool = next(tool for tool in tool_definitions() if tool.name == "send_email")
        properties = tool.inputSchema["properties"]

        assert "from" in properties
        assert "from_" not in properties
        assert properties["dynamic_template_data"]["type"] == "object"

    def test_aggregated_by_choices(self):
        tool = next(tool for tool in tool_definitions() if tool.name == "get_stats")
        variants = tool.inputSchema["properties"]["aggregated_by"]["anyOf"]
        choices = [
            choice for variant in variants for choice in variant.get("enum", [])
        ]
        assert choices == ["day", "week", "month"]

    def test_aggregated_by_rejects_empty_string(self):
        with pytest.raises(ValueError):
            GetStatsParams.model_validate(
                {"start_date": "2024-01-01", "aggregated_by": ""}
            )


class TestDispatch:
    """Test routing of tool calls."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self):
        with pytest.raises(UnknownToolError, match="Unknown tool: send_sms"):
            await dispatch(AsyncMock(), "send_sms", {})

    @pytest.mark.asyncio
    async def test_stats_result_is_json_text(self, make_client):
        stats = [{"date": "2024-01-01", "stats": [{"metrics": {"delivered": 3}}]}]
        client = make_client(lambda request: httpx.Response(200, json=stats))

        content = await dispatch(
            client, "get_stats", {"start_date": "2024-01-01", "end_date": "2024-01-02"}
        )

        assert len(content) == 1
        assert content[0].type == "text"
        assert json.loads(content[0].text) == stats
        assert content[0].text == json.dumps(stats, indent=2)
        assert client.requests[0].url.params["end_date"] == "2024-01-02"
        assert "aggregated_by" not in client.requests[0].url.params

    @pytest.mark.asyncio
    async def test_send_email_serializes_status_code_alias(self):
        with patch(
            "mcp_sendgrid.sendgrid.tool.send_email",
            new=AsyncMock(
                return_value=SendResult(success=True, message="ok", status_code=202)
            ),
        ) as mock_send:
            content = await dispatch(
                AsyncMock(),
                "send_email",
                {
                    "to": "user@example.com",
                    "from": "sender@example.com",
                    "subject": "Hi",
                    "text": "Body",
                },
            )

        params = mock_send.await_args.args[1]
        assert params.from_ == "sender@example.com"
        assert json.loads(content[0].text) == {
            "success": True,
            "message": "ok",
            "statusCode": 202,
        }

    @pytest.mark.asyncio
    async def test_suppression_report_keeps_nulls_and_drops_missing_note(
        self, make_client
    ):
        def handler(request):
            if "/blocks/" in request.url.path:
                return httpx.Response(404)
            return httpx.Response(
                200, json=[{"email": "x@example.com", "status": "5.4.7"}]
            )

        client = make_client(handler)

        content = await dispatch(
            client, "get_suppression_status", {"email": "x@example.com"}
        )

        assert json.loads(content[0].text) == {
            "email": "x@example.com",
            "suppressed": True,
            "type": "bounce",
            "reason": None,
            "status": "5.4.7",
            "created": None,
            "created_timestamp": None,
        }

    @pytest.mark.asyncio
    async def test_activity_list_serialized(self, make_client):
        client = make_client(
            lambda request: httpx.Response(
                200,
                json={
                    "messages": [
                        {"msg_id": "m1", "to_email": "x@example.com"},
                        {"to_email": "x@example.com"},
                    ]
                },
            )
        )

        content = await dispatch(
            client, "get_email_activity", {"recipient": "x@example.com"}
        )

        assert json.loads(content[0].text) == [
            {
                "id": "m1",
                "to": "x@example.com",
                "subject": "",
                "status": "unknown",
                "last_event_time": None,
            }
        ]

    @pytest.mark.asyncio
    async def test_empty_recipient_is_rejected_before_any_request(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={}))

        with pytest.raises(ValueError, match="recipient is required"):
            await dispatch(client, "get_email_activity", {"recipient": ""})

        assert client.requests == []

    @pytest.mark.asyncio
    async def test_missing_required_argument(self):
        with pytest.raises(ValueError):
            await dispatch(AsyncMock(), "get_suppression_status", {})


class TestFormatToolError:
    """Test mapping of failures onto MCP errors."""

    def test_provider_error_list_is_joined(self):
        error = SendGridAPIError(
            400, {"errors": [{"message": "first"}, {"message": "second"}]}
        )

        result = format_tool_error(error)

        assert isinstance(result, McpError)
        assert result.error.code == types.INTERNAL_ERROR
        assert result.error.message == "SendGrid API Error: first, second"

    def test_unknown_tool(self):
        result = format_tool_error(UnknownToolError("nope"))

        assert result.error.code == types.METHOD_NOT_FOUND
        assert result.error.message == "Unknown tool: nope"

    def test_validation_error(self):
        result = format_tool_error(ValueError("recipient is required"))

        assert result.error.code == types.INVALID_PARAMS
        assert result.error.message == "recipient is required"

    def test_plain_exception(self):
        result = format_tool_error(httpx.ConnectError("connection refused"))

        assert result.error.code == types.INTERNAL_ERROR
        assert result.error.message == "connection refused"

    def test_empty_exception(self):
        result = format_tool_error(RuntimeError())
        assert result.error.message == "An unexpected error occurred"


class TestCreateServer:
    def test_server_identity(self):
        server = create_server(AsyncMock())

        assert server.name == "sendgrid-mcp"
        assert server.version == "1.0.0"

    def test_registers_handlers(self):
        server = create_server(AsyncMock())

        assert types.ListToolsRequest in server.request_handlers
        assert types.CallToolRequest in server.request_handlers

    def test_tool_registry_matches_definitions(self):
        assert list(TOOLS) == [tool.name for tool in tool_definitions()]


class TestServerSession:
    """Drive the server through a connected in-memory MCP client session."""

    @pytest.mark.asyncio
    async def test_lists_tools(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={}))

        async with create_connected_server_and_client_session(
            create_server(client)
        ) as session:
            result = await session.list_tools()

        assert [tool.name for tool in result.tools] == list(TOOLS)

    @pytest.mark.asyncio
    async def test_unknown_tool_is_an_error_result(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={}))

        async with create_connected_server_and_client_session(
            create_server(client)
        ) as session:
            result = await session.call_tool("nope", {})

        assert result.isError is True
        assert result.content[0].text == "Unknown tool: nope"

    @pytest.mark.asyncio
    async def test_provider_error_messages_are_joined(self, make_client):
        client = make_client(
            lambda request: httpx.Response(
                500, json={"errors": [{"message": "boom"}, {"message": "two"}]}
            )
        )

        async with create_connected_server_and_client_session(
            create_server(client)
        ) as session:
            result = await session.call_tool(
                "get_suppression_status", {"email": "x@example.com"}
            )

        assert result.isError is True
        assert result.content[0].text == "SendGrid API Error: boom, two"

    @pytest.mark.asyncio
    async def test_empty_recipient_is_an_error_result(self, make_client):
        client = make_client(lambda request: httpx.Response(200, json={}))

        async with create_connected_server_and_client_session(
            create_server(client)
        ) as session:
            result = await session.call_tool("get_email_activity", {"recipient": ""})

        assert result.isError is True
        assert result.content[0].text == "recipient is required"
        assert client.requests == []

    @pytest.mark.asyncio
    async def test_activity_with_odd_field_types_succeeds(self, make_client):
        client = make_client(
            lambda request: httpx.Response(
                200,
                json={
                    "messages": [
                        {
                            "msg_id": 123,
                            "to_email": "x@example.com",
                            "last_event_time": 1700000000,
                        },
                        {"msg_id": "m2", "to_email": "x@example.com"},
                    ]
                },
            )
        )

        async with create_connected_server_and_client_session(
            create_server(client)
        ) as session:
            result = await session.call_tool(
                "get_email_activity", {"recipient": "x@example.com"}
            )

        assert not result.isError
        summaries = json.loads(result.content[0].text)
        assert [summary["id"] for summary in summaries] == ["123", "m2"]
