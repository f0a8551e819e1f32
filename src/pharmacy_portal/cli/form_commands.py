"""CLI commands for contact, waitlist and splash form submissions."""

import logging
from pathlib import Path
from typing import Any, Callable

import click

from pharmacy_portal.cli.submit_commands import EXIT_INVALID, EXIT_SUBMISSION_FAILED, load_form
from pharmacy_portal.models.forms import ContactRequest, FormModel, SplashSignup, WaitlistRequest
from pharmacy_portal.submission.forms import FormSubmissionService
from pharmacy_portal.utils.exceptions import (
    ConfigurationError,
    ErrorCategory,
    SubmissionError,
    ValidationError,
    categorize_error,
)

logger = logging.getLogger(__name__)


def exit_code_for(error: Exception) -> int:
    """Exit 1 for bad input or settings, 2 when the submission itself failed."""
    if categorize_error(error) in (ErrorCategory.CONFIGURATION, ErrorCategory.VALIDATION):
        return EXIT_INVALID
    return EXIT_SUBMISSION_FAILED


def _submit(
    ctx: click.Context,
    form_file: Path,
    model: type[FormModel],
    submit: Callable[[FormSubmissionService, Any], Any],
) -> None:
    try:
        form = load_form(form_file, model)
        service = FormSubmissionService.from_config(ctx.obj["config"])
        record_id = submit(service, form)
    except (ValidationError, ConfigurationError, SubmissionError) as e:
        click.echo(click.style("✗", fg="red", bold=True) + f" {e}", err=True)
        ctx.exit(exit_code_for(e))

    click.echo(click.style("✓", fg="green", bold=True) + " Submission saved")
    if record_id is not None:
        click.echo(f"  Record ID: {record_id}")


@click.group(name="forms")
def forms_group() -> None:
    """Website form submissions saved directly to the audit store.

    Requires SUPABASE_URL and SUPABASE_ANON_KEY.
    """


@forms_group.command(name="contact")
@click.argument("form_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def contact(ctx: click.Context, form_file: Path) -> None:
    """Submit a contact form from FORM_FILE."""
    _submit(ctx, form_file, ContactRequest, FormSubmissionService.submit_contact)


@forms_group.command(name="waitlist")
@click.argument("form_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def waitlist(ctx: click.Context, form_file: Path) -> None:
    """Submit a waitlist signup from FORM_FILE."""
    _submit(ctx, form_file, WaitlistRequest, FormSubmissionService.submit_waitlist)


@forms_group.command(name="splash")
@click.argument("form_file", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def splash(ctx: click.Context, form_file: Path) -> None:
    """Submit a splash modal email signup from FORM_FILE."""
    _submit(ctx, form_file, SplashSignup, FormSubmissionService.submit_splash_signup)
