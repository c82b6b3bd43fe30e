"""MCP server for the Codeberg / Forgejo API."""

import asyncio
import os

import click
from dotenv import load_dotenv


@click.command()
@click.option(
    "--transport",
    type=click.Choice(["stdio", "sse", "streamable-http"]),
    default="stdio",
    help="MCP transport type",
)
@click.option("--port", default=8000, help="Port for HTTP transports")
@click.option("--host", default="127.0.0.1", help="Host for HTTP transports")
@click.option("--codeberg-url", envvar="CODEBERG_URL", help="Codeberg / Forgejo instance URL")
@click.option("--codeberg-token", envvar="CODEBERG_API_TOKEN", help="Codeberg access token")
@click.option("--read-only", is_flag=True, help="Disable write operations")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    help="Log level for the stderr JSON log",
)
def main(
    transport: str,
    port: int,
    host: str,
    codeberg_url: str | None,
    codeberg_token: str | None,
    read_only: bool,
    log_level: str,
) -> None:
    """Run the Codeberg MCP server."""
    load_dotenv()

    from .logging_config import configure_logging

    configure_logging(log_level)

    if codeberg_url:
        os.environ["CODEBERG_URL"] = codeberg_url
    if codeberg_token:
        os.environ["CODEBERG_API_TOKEN"] = codeberg_token
    if read_only:
        os.environ["CODEBERG_READ_ONLY"] = "true"

    from .servers import resources  # noqa: F401
    from .servers.codeberg import mcp

    run_kwargs: dict = {"transport": transport}
    if transport != "stdio":
        run_kwargs["host"] = host
        run_kwargs["port"] = port

    asyncio.run(mcp.run_async(show_banner=False, **run_kwargs))


if __name__ == "__main__":
    main()
