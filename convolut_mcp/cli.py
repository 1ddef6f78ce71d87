"""Command-line entry point for the Convolut MCP server."""

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.table import Table

from convolut_mcp import __version__
from convolut_mcp.logging import setup_logging
from convolut_mcp.mcp_server.catalog import tool_definitions
from convolut_mcp.mcp_server.client import ConvolutClient
from convolut_mcp.mcp_server.config import Config
from convolut_mcp.mcp_server.errors import ConfigurationError, ConvolutError
from convolut_mcp.mcp_server.main import main

console = Console()
err_console = Console(stderr=True)
logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def load_config(**overrides) -> Config:
    """Load configuration or exit with status 1 if it is unusable."""
    overrides = {key: value for key, value in overrides.items() if value is not None}
    try:
        return Config.from_env(**overrides)
    except ConfigurationError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        err_console.print(
            "Set your Convolut API key in the environment or in your MCP client config."
        )
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.option("-v", "--version", is_flag=True, help="Show version information")
@click.pass_context
def cli(ctx, version):
    """Convolut MCP server - Convolut contexts as Model Context Protocol tools.

    With no command, serves MCP over stdio (what MCP clients expect).

    Examples:
        convolut-mcp                          # Serve over stdio
        convolut-mcp serve --log-level DEBUG  # Serve with debug logging
        convolut-mcp health                   # Check the Convolut API
        convolut-mcp tools                    # Show the tool catalog
    """
    if version:
        console.print(f"Convolut MCP server v{__version__}")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        ctx.invoke(serve)


@cli.command()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Log level for stderr diagnostics (default: CONVOLUT_LOG_LEVEL or INFO)",
)
@click.option("--base-url", default=None, help="Override the Convolut API base URL")
def serve(log_level, base_url):
    """Serve MCP over stdin/stdout."""
    config = load_config(log_level=log_level, base_url=base_url)
    setup_logging(config.log_level, config.log_file)

    try:
        asyncio.run(main(config))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


@cli.command()
@click.option("--base-url", default=None, help="Override the Convolut API base URL")
def health(base_url):
    """Check that the Convolut API is reachable."""
    config = load_config(base_url=base_url)
    client = ConvolutClient(config)

    try:
        result = asyncio.run(client.health_check())
    except ConvolutError as e:
        err_console.print(f"[red]✗ Convolut API unhealthy:[/red] {e.message}")
        sys.exit(1)

    console.print(f"[green]✓ Convolut API reachable[/green] ({config.health_url})")
    if isinstance(result, dict):
        for key, value in result.items():
            console.print(f"  {key}: {value}")


@cli.command()
def tools():
    """List the MCP tools this server exposes."""
    table = Table(title="Convolut MCP tools")
    table.add_column("Tool", style="cyan", no_wrap=True)
    table.add_column("Required", style="yellow")
    table.add_column("Description")

    for tool in tool_definitions():
        required = ", ".join(tool["inputSchema"].get("required", [])) or "-"
        table.add_row(tool["name"], required, tool.get("description", ""))

    console.print(table)


def cli_main():
    """Synchronous entry point for script generation."""
    cli()


if __name__ == "__main__":
    cli_main()
