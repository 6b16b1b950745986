import click

from recon.infrastructure.cli.document_commands import (
    document_create,
    document_fulfill,
    document_pay,
    document_remaining,
    document_totals,
)
from recon.infrastructure.cli.totals_commands import totals_quote
from recon.logging import LOG_LEVELS, configure_logging


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Override RECON_LOG_LEVEL.",
)
def cli(log_level: str | None) -> None:
    """RECON — document fulfillment reconciliation"""
    configure_logging(log_level)


@cli.group()
def document() -> None:
    """Manage orders and their dispatches, receipts and payments."""


@cli.group()
def totals() -> None:
    """Compute document totals."""


# Register subcommands
document.add_command(document_create)
document.add_command(document_fulfill)
document.add_command(document_pay)
document.add_command(document_remaining)
document.add_command(document_totals)
totals.add_command(totals_quote)
