"""Refill and transfer CLI commands.

Examples:
    # Submit a refill request read from a JSON form
    $ pharmacy-portal refill submit refill.json

    # Show the payload that would be sent (credentials masked), send nothing
    $ pharmacy-portal refill submit refill.json --dry-run

    # Submit a transfer and save the outcome for later inspection
    $ pharmacy-portal transfer submit transfer.json --output results/transfer.json
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional, TypeVar

import click
from pydantic import ValidationError as PydanticValidationError

from pharmacy_portal.bestrx.payloads import build_refill_payload, build_transfer_payload
from pharmacy_portal.config.schema import Config
from pharmacy_portal.logging_audit.audit import redact_payload
from pharmacy_portal.models.forms import FormModel, RefillRequest, TransferRequest
from pharmacy_portal.models.responses import SubmissionOutcome
from pharmacy_portal.submission.orchestrator import SubmissionOrchestrator
from pharmacy_portal.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_INVALID = 1
EXIT_SUBMISSION_FAILED = 2

F = TypeVar("F", bound=FormModel)


def load_form(form_file: Path, model: type[F]) -> F:
    """Read a JSON form file and validate it against a form model.

    Args:
        form_file: Path to a JSON object with camelCase or snake_case keys
        model: Form model class to validate against

    Returns:
        Validated form instance

    Raises:
        ValidationError: If the file is not JSON or fails validation
    """
    try:
        with form_file.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(
            f"Invalid JSON in form file: {form_file}\n"
            f"Error: {e}\n"
            f"Fix: Check JSON syntax at line {e.lineno}, column {e.colno}"
        )

    if not isinstance(data, dict):
        raise ValidationError(f"Form file {form_file} must contain a JSON object")

    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        problems = "\n".join(
            f"  - {'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Form validation failed ({model.__name__}):\n{problems}")


def _outcome_to_dict(outcome: SubmissionOutcome) -> dict[str, Any]:
    result = outcome.to_result()
    return {
        "kind": outcome.kind.value,
        "success": result.success,
        "message": result.message,
        "http_status": outcome.primary.http_status,
        "processing_time_ms": outcome.primary.processing_time_ms,
        "audit": {
            "attempted": outcome.audit.attempted,
            "recorded": outcome.audit.recorded,
            "error": outcome.audit.error,
        },
        "data": result.data,
    }


def report_outcome(ctx: click.Context, outcome: SubmissionOutcome, output: Optional[Path]) -> None:
    """Print the outcome, optionally save it, and exit 2 on failure."""
    result = outcome.to_result()

    if result.success:
        click.echo(click.style("✓", fg="green", bold=True) + f" {result.message}")
        if outcome.audit.attempted and not outcome.audit.recorded:
            click.echo(
                click.style("⚠", fg="yellow", bold=True)
                + " Submission was accepted but could not be saved to the audit store"
            )
        elif not outcome.audit.attempted:
            click.echo(f"  Audit record: skipped ({outcome.audit.error})")
    else:
        click.echo(click.style("✗", fg="red", bold=True) + f" {result.message}", err=True)

    if outcome.primary.http_status is not None:
        click.echo(
            f"  HTTP {outcome.primary.http_status} in {outcome.primary.processing_time_ms}ms"
        )

    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        with output.open("w", encoding="utf-8") as f:
            json.dump(_outcome_to_dict(outcome), f, indent=2, default=str)
        click.echo(f"  Results saved to: {output}")

    if not result.success:
        ctx.exit(EXIT_SUBMISSION_FAILED)


def _echo_dry_run(payload: dict[str, Any]) -> None:
    click.echo("DRY RUN - nothing was sent. Payload (credentials masked):")
    click.echo(json.dumps(redact_payload(payload), indent=2))


def _get_config(ctx: click.Context) -> Config:
    return ctx.obj["config"]


@click.group(name="refill")
def refill_group() -> None:
    """Prescription refill requests."""


@refill_group.command(name="submit")
@click.argument("form_file", type=click.Path(exists=True, path_type=Path))
@click.option("--dry-run", is_flag=True, help="Validate and print the payload without sending")
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the submission outcome as JSON to this file",
)
@click.pass_context
def refill_submit(
    ctx: click.Context, form_file: Path, dry_run: bool, output: Optional[Path]
) -> None:
    """Submit a refill request from FORM_FILE.

    Example:

        pharmacy-portal refill submit refill.json
    """
    config = _get_config(ctx)

    try:
        form = load_form(form_file, RefillRequest)
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_INVALID)

    if dry_run:
        bestrx = config.bestrx
        payload = build_refill_payload(
            form,
            pharmacy_number=bestrx.pharmacy_number or "",
            api_key=bestrx.api_key or "",
            username=bestrx.username or "",
        )
        _echo_dry_run(payload)
        missing = bestrx.missing_for_refill()
        if missing:
            click.echo(f"Warning: missing credentials: {', '.join(missing)}", err=True)
        return

    with SubmissionOrchestrator(config) as orchestrator:
        outcome = orchestrator.run_refill(form)

    report_outcome(ctx, outcome, output)


@click.group(name="transfer")
def transfer_group() -> None:
    """Prescription transfer requests."""


@transfer_group.command(name="submit")
@click.argument("form_file", type=click.Path(exists=True, path_type=Path))
@click.option("--dry-run", is_flag=True, help="Validate and print the payload without sending")
@click.option(
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Write the submission outcome as JSON to this file",
)
@click.pass_context
def transfer_submit(
    ctx: click.Context, form_file: Path, dry_run: bool, output: Optional[Path]
) -> None:
    """Submit a prescription transfer request from FORM_FILE.

    Example:

        pharmacy-portal transfer submit transfer.json --output results/transfer.json
    """
    config = _get_config(ctx)

    try:
        form = load_form(form_file, TransferRequest)
    except ValidationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(EXIT_INVALID)

    if dry_run:
        bestrx = config.bestrx
        payload = build_transfer_payload(form, bestrx.pharmacy_number or "")
        _echo_dry_run(payload)
        missing = bestrx.missing_for_transfer()
        if missing:
            click.echo(f"Warning: missing credentials: {', '.join(missing)}", err=True)
        return

    with SubmissionOrchestrator(config) as orchestrator:
        outcome = orchestrator.run_transfer(form)

    report_outcome(ctx, outcome, output)
