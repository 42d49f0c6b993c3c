"""Entry point for the SendGrid MCP server."""
import logging
import sys

import anyio

from mcp_sendgrid.common.config import settings
from mcp_sendgrid.common.exceptions import MissingCredentialError
from mcp_sendgrid.sendgrid.client import SendGridClient
from mcp_sendgrid.sendgrid.tool import TOOLS, serve

logger = logging.getLogger("mcp_sendgrid")


def show_help():
    """Display help message with available tools."""
    print("Usage: python -m mcp_sendgrid")
    print("\nServes SendGrid tools over MCP on stdin/stdout.")
    print("\nAvailable tools:")
    for name in TOOLS:
        print(f"  - {name}")

    print("\nEnvironment:")
    print("  SENDGRID_API_KEY   SendGrid API key (required)")
    print("  SENDGRID_BASE_URL  API root (default: https://api.sendgrid.com)")
    print("  LOG_LEVEL          Logging level for stderr output (default: INFO)")


def configure_logging():
    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


async def run_server(api_key: str):
    async with SendGridClient(api_key) as client:
        await serve(client)


def main():
    """Main entry point."""
    if len(sys.argv) > 1 and sys.argv[1] in ["-h", "--help", "help"]:
        show_help()
        sys.exit(0)

    configure_logging()

    try:
        api_key = settings.require_api_key()
    except MissingCredentialError as e:
        logger.error(str(e))
        sys.exit(1)

    anyio.run(run_server, api_key)


if __name__ == "__main__":
    main()
