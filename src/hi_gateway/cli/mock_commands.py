"""CLI commands for the mock registry."""

import logging

import click

from ..mock_server.app import run_server

logger = logging.getLogger(__name__)


@click.group(name="mock")
def mock_group():
    """Run the mock registry endpoint.

    The mock registry answers:
    - GET  /                    - Liveness probe
    - GET  /health              - Health check
    - POST /<service>/<version> - Every registry operation
    """
    pass


@mock_group.command("start")
@click.option("--host", default="127.0.0.1", show_default=True, help="Host address to bind")
@click.option("--port", default=8080, show_default=True, type=click.IntRange(1, 65535), help="Port to listen on")
@click.option("--debug", is_flag=True, help="Enable Flask debug mode")
def start(host: str, port: int, debug: bool) -> None:
    """Start the mock registry in the foreground.

    Example:
        hi-gateway mock start --port 8080
    """
    click.echo(f"Mock registry listening on http://{host}:{port}/ (Ctrl+C to stop)")
    click.echo("Set the Uri parameter and HI_GATEWAY_VERIFY_TLS=false to use it.")
    run_server(host=host, port=port, debug=debug)
