"""Main CLI entry point for the pharmacy portal.

This module provides the main Click command group for the pharmacy-portal CLI.
"""

from pathlib import Path
from typing import Optional

import click

from pharmacy_portal import __version__
from pharmacy_portal.cli.form_commands import forms_group
from pharmacy_portal.cli.mock_commands import mock_group
from pharmacy_portal.cli.submit_commands import refill_group, transfer_group
from pharmacy_portal.config import (
    get_audit_store_config,
    get_bestrx_config,
    get_logging_config,
    get_transport_config,
    load_config,
)
from pharmacy_portal.logging_audit import configure_logging
from pharmacy_portal.utils.exceptions import ConfigurationError


@click.group()
@click.version_option(version=__version__, prog_name="pharmacy-portal")
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
    help="Redact PII (patient names, phones, dates of birth) from logs",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: bool,
    log_file: Optional[Path],
    redact_pii: bool,
) -> None:
    """Pharmacy Portal - BestRX refill and transfer submission tool.

    Credentials are read from the environment (or a .env file):
    BESTRX_PHARMACY_NUMBER, BESTRX_API_KEY, BESTRX_USERNAME,
    BESTRX_PASSWORD, SUPABASE_URL, SUPABASE_ANON_KEY.

    Common usage:

        # Submit a refill request
        pharmacy-portal refill submit refill.json

        # Preview a transfer payload without sending it
        pharmacy-portal transfer submit transfer.json --dry-run

        # Run against the local mock server
        pharmacy-portal mock start

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
    logging_config = get_logging_config(config_obj)
    log_level = "DEBUG" if verbose else logging_config.level
    log_file_path = log_file if log_file else logging_config.log_file
    redact_pii_setting = redact_pii if redact_pii else logging_config.redact_pii

    configure_logging(
        level=log_level, log_file=log_file_path, redact_pii=redact_pii_setting
    )


cli.add_command(refill_group)
cli.add_command(transfer_group)
cli.add_command(forms_group)
cli.add_command(mock_group)


def _configured(value: Optional[str]) -> str:
    return "configured" if value else "not set"


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command()
@click.argument("config_file", type=click.Path(exists=True, path_type=Path))
def validate(config_file: Path) -> None:
    """Validate a configuration file.

    Credential values are never printed, only whether each one is set.

    Example:
        pharmacy-portal config validate config/config.json
    """
    try:
        config_obj = load_config(config_file)
    except ConfigurationError as e:
        click.echo(click.style("✗", fg="red", bold=True) + " Configuration validation failed")
        click.echo(f"\n{e}", err=True)
        raise click.exceptions.Exit(1)

    click.echo(click.style("✓", fg="green", bold=True) + " Configuration is valid")
    click.echo(f"\nConfiguration file: {config_file}")
    click.echo("\nEndpoints:")
    click.echo(f"  Refill URL:   {config_obj.endpoints.refill_url}")
    click.echo(f"  Transfer URL: {config_obj.endpoints.transfer_url}")

    bestrx = get_bestrx_config(config_obj)
    click.echo("\nBestRX credentials:")
    click.echo(f"  Pharmacy number: {_configured(bestrx.pharmacy_number)}")
    click.echo(f"  Username:        {_configured(bestrx.username)}")
    click.echo(f"  API key:         {_configured(bestrx.api_key)}")
    click.echo(f"  Password:        {_configured(bestrx.password)}")
    click.echo(f"  Refill ready:    {'yes' if not bestrx.missing_for_refill() else 'no'}")
    click.echo(f"  Transfer ready:  {'yes' if not bestrx.missing_for_transfer() else 'no'}")

    click.echo("\nAudit store:")
    store = get_audit_store_config(config_obj)
    click.echo(f"  URL:      {store.url or 'not set'}")
    click.echo(f"  Anon key: {_configured(store.anon_key)}")

    click.echo("\nTransport:")
    transport = get_transport_config(config_obj)
    click.echo(f"  Verify TLS:  {transport.verify_tls}")
    click.echo(
        f"  Timeouts:    {transport.timeout_connect}s connect, "
        f"{transport.timeout_read}s read"
    )

    logging_config = get_logging_config(config_obj)
    click.echo("\nLogging:")
    click.echo(f"  Level:       {logging_config.level}")
    click.echo(f"  Log file:    {logging_config.log_file}")
    click.echo(f"  Redact PII:  {logging_config.redact_pii}")


cli.add_command(config)


@cli.command()
def version() -> None:
    """Display version information."""
    click.echo(f"pharmacy-portal version {__version__}")


if __name__ == "__main__":
    cli()
