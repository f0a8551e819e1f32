"""CLI commands for mock server management."""

import json
import logging
from pathlib import Path

import click
import requests

from ..mock_server.app import run_server
from ..mock_server.config import REFILL_PATH, RPC_PATH_PREFIX, TRANSFER_PATH, load_config

logger = logging.getLogger(__name__)


@click.group(name="mock")
def mock_group():
    """Manage the BestRX mock server.

    The mock server provides endpoints for local testing:
    - /health - Health check endpoint
    - BestRX SendRefillRequest and submitrxtransferrequest
    - /rest/v1/rpc/<function> - audit store RPC
    """


@mock_group.command(name="start")
@click.option("--port", type=int, help="Server port (overrides config file)")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file (default: mocks/config.json)",
)
@click.option("--debug", is_flag=True, help="Enable debug mode")
def start_server(port: int | None, config: Path | None, debug: bool):
    """Start the mock server in the foreground.

    Point the portal at it with:

        PHARMACY_PORTAL_REFILL_URL=http://127.0.0.1:8080/bcswebservice/v2/webrefillservice/SendRefillRequest
    """
    try:
        server_config = load_config(config)
    except FileNotFoundError as e:
        raise click.ClickException(str(e))
    except ValueError as e:
        raise click.ClickException(f"Configuration error: {e}")

    if port is None:
        port = server_config.http_port

    if not 1 <= port <= 65535:
        raise click.ClickException(f"Invalid port {port}. Port must be between 1 and 65535.")

    base_url = f"http://{server_config.host}:{port}"
    click.echo("=" * 50)
    click.echo("BestRX Mock Server")
    click.echo("=" * 50)
    click.echo(f"Health Check: {base_url}/health")
    click.echo(f"Refill:       {base_url}{REFILL_PATH}")
    click.echo(f"Transfer:     {base_url}{TRANSFER_PATH}")
    click.echo(f"RPC:          {base_url}{RPC_PATH_PREFIX}/<function>")
    click.echo(f"Supabase URL: {base_url}")
    click.echo("=" * 50)
    click.echo("Starting server... (Press Ctrl+C to stop)")

    try:
        run_server(host=server_config.host, port=port, config=server_config, debug=debug)
    except KeyboardInterrupt:
        click.echo("\n\nServer stopped by user.")
    except OSError as e:
        raise click.ClickException(f"Failed to start server: {e}")


@mock_group.command(name="status")
@click.option("--host", default="127.0.0.1", help="Server host")
@click.option("--port", type=int, default=8080, help="Server port")
@click.option("--json", "output_json", is_flag=True, help="Output status as JSON")
@click.pass_context
def server_status(ctx: click.Context, host: str, port: int, output_json: bool):
    """Query a running mock server's /health endpoint."""
    health_url = f"http://{host}:{port}/health"

    try:
        response = requests.get(health_url, timeout=5)
        health = response.json()
    except (requests.RequestException, ValueError):
        if output_json:
            click.echo(json.dumps({"running": False}))
        else:
            click.echo(f"Mock server is not responding at {health_url}")
        ctx.exit(1)

    if output_json:
        click.echo(json.dumps({"running": True, **health}, indent=2))
        return

    click.echo("Mock Server Status")
    click.echo("=" * 50)
    click.echo(f"Status:   {health.get('status', 'unknown')}")
    click.echo(f"Version:  {health.get('version')}")
    click.echo(f"Uptime:   {health.get('uptime_seconds', 0)}s")
    click.echo(f"Requests: {health.get('request_count', 0)}")
