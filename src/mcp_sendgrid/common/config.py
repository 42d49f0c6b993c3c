"""Configuration management for the SendGrid MCP server."""

from pydantic import ConfigDict, Field
from pydantic_settings import BaseSettings

from mcp_sendgrid.common.exceptions import MissingCredentialError


class Settings(BaseSettings):
    """Global settings for the SendGrid MCP server."""

    model_config = ConfigDict(env_file=".env", env_file_encoding="utf-8")

    # API Keys
    sendgrid_api_key: str = Field(
        default="", description="API key for SendGrid v3 services."
    )

    # Transport
    sendgrid_base_url: str = Field(
        default="https://api.sendgrid.com",
        description="Root URL of the SendGrid REST API.",
    )
    sendgrid_timeout: float = Field(
        default=30.0, description="Per-request HTTP timeout in seconds."
    )

    log_level: str = Field(
        default="INFO", description="Logging level for messages written to stderr."
    )

    def require_api_key(self) -> str:
        """Return the SendGrid API key, failing if it was not configured."""
        if not self.sendgrid_api_key:
            raise MissingCredentialError(
                "SENDGRID_API_KEY environment variable is required"
            )
        return self.sendgrid_api_key


settings = Settings()
