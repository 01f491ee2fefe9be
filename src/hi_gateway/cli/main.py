"""Main CLI entry point for HI Gateway.

This module provides the main Click command group for the hi-gateway CLI.
"""

import json
from pathlib import Path
from typing import Optional

import click

from hi_gateway import __version__
from hi_gateway.cli.mock_commands import mock_group
from hi_gateway.config import load_config
from hi_gateway.gateway.handlers import handle
from hi_gateway.hi_transactions.operations import OPERATIONS, Surface
from hi_gateway.logging_audit import configure_logging
from hi_gateway.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="hi-gateway")
@click.option(
    "--config",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (default: ./config/config.json)",
)
@click.option("--verbose", is_flag=True, help="Enable verbose logging (DEBUG level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to log file (overrides config file)",
)
@click.option(
    "--redact-pii",
    is_flag=True,
    help="Redact PII (identifiers, names, e-mail addresses) from logs",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    redact_pii: bool,
) -> None:
    """HI Gateway - JSON front end for the Healthcare Identifiers registry.

    Common usage:

        # Run an IHI search against the configured registry
        hi-gateway invoke consumer search.json

        # List the supported operations and their modes
        hi-gateway operations

        # Start a local mock registry
        hi-gateway mock start --port 8080

    Use --help with any command for more information.
    """
    ctx.ensure_object(dict)

    try:
        config_obj = load_config(config)
        ctx.obj["config"] = config_obj
    except ConfigurationError as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        ctx.exit(1)

    ctx.obj["verbose"] = verbose
    ctx.obj["redact_pii"] = redact_pii
    ctx.obj["log_file"] = log_file

    # Precedence: CLI flags > config file > defaults
    log_level = "DEBUG" if verbose else config_obj.logging.level
    log_file_path = log_file if log_file else config_obj.logging.log_file
    redact_pii_setting = redact_pii if redact_pii else config_obj.logging.redact_pii

    configure_logging(
        level=log_level, log_file=log_file_path, redact_pii=redact_pii_setting
    )


cli.add_command(mock_group)


@cli.command()
@click.argument("surface", type=click.Choice([s.value for s in Surface]))
@click.argument("payload_file", type=click.File("r"))
@click.option("--pretty", is_flag=True, help="Indent the JSON output")
@click.pass_context
def invoke(ctx: click.Context, surface: str, payload_file, pretty: bool) -> None:
    """Run one invocation and print the response envelope.

    PAYLOAD_FILE is a JSON document with internalMode, internalUserId,
    internalHPIO and the operation's fields ('-' reads stdin). Exits with
    status 1 when the envelope reports FAILURE.

    Example:
        hi-gateway invoke consumer search.json
    """
    result = handle(Surface(surface), payload_file.read(), config=ctx.obj["config"])
    if pretty:
        click.echo(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        click.echo(json.dumps(result, separators=(",", ":"), ensure_ascii=False))

    if result["status"] != "SUCCESS":
        raise click.exceptions.Exit(1)


@cli.command()
def operations() -> None:
    """List the supported registry operations by surface and mode."""
    for surface in Surface:
        click.echo(f"{surface.value}:")
        descriptors = sorted(
            (d for d in OPERATIONS.values() if d.surface == surface),
            key=lambda d: int(d.mode),
        )
        for descriptor in descriptors:
            click.echo(f"  {descriptor.mode:>2}  {descriptor.key:<50} {descriptor.label}")


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


def _echo_config(config_obj) -> None:
    click.echo("\nParameter store:")
    click.echo(f"  Prefix:      {config_obj.parameters.prefix}")
    click.echo(f"  Batch size:  {config_obj.parameters.batch_size}")
    click.echo(f"  Decryption:  {config_obj.parameters.with_decryption}")
    click.echo(f"  Region:      {config_obj.parameters.region or 'session default'}")

    click.echo("\nCertificate store:")
    click.echo(f"  Region:      {config_obj.certificate_store.region}")

    click.echo("\nTransport:")
    click.echo(f"  Verify TLS:  {config_obj.transport.verify_tls}")
    click.echo(
        f"  Timeouts:    {config_obj.transport.timeout_connect}s connect, "
        f"{config_obj.transport.timeout_read}s read, "
        f"{config_obj.transport.liveness_timeout}s liveness"
    )

    click.echo("\nLogging:")
    click.echo(f"  Level:       {config_obj.logging.level}")
    click.echo(f"  Log file:    {config_obj.logging.log_file or 'console only'}")
    click.echo(f"  Redact PII:  {config_obj.logging.redact_pii}")


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate a configuration file.

    Example:
        hi-gateway config validate config/config.json
    """
    try:
        config_obj = load_config(config_file)
    except ConfigurationError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(1)

    click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
    click.echo(f"\nConfiguration file: {config_file}")
    _echo_config(config_obj)


@config.command()
@click.pass_context
def show(ctx: click.Context) -> None:
    """Show the effective configuration (file, defaults and environment)."""
    _echo_config(ctx.obj["config"])


cli.add_command(config)


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"hi-gateway version {__version__}")


if __name__ == "__main__":
    cli()
