"""Custom exceptions for the SendGrid MCP server."""

from typing import Any


class SendGridAPIError(Exception):
    """Raised when the SendGrid API answers with a non-2xx status."""

    def __init__(self, status_code: int, body: Any = None, message: str = ""):
        self.status_code = status_code
        self.body = body
        self.errors = _error_messages(body)
        super().__init__(
            message or (", ".join(self.errors) if self.errors else f"HTTP {status_code}")
        )


class MissingCredentialError(RuntimeError):
    """Raised at startup when no SendGrid API key is configured."""

    pass


class UnknownToolError(LookupError):
    """Raised when a tool call names a tool this server does not provide."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


def _error_messages(body: Any) -> list[str]:
    """Pull the messages out of SendGrid's ``{"errors": [{"message": ...}]}`` body."""
    if not isinstance(body, dict):
        return []
    errors = body.get("errors")
    if not isinstance(errors, list):
        return []
    return [
        str(error["message"])
        for error in errors
        if isinstance(error, dict) and error.get("message")
    ]
