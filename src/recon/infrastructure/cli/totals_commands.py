"""CLI commands for ad hoc totals (nothing is stored)."""

from __future__ import annotations

import click

from recon.application.compute_totals import QuoteTotalsHandler
from recon.application.dto import PricedItemSpec
from recon.domain.exceptions import DomainException
from recon.infrastructure.cli.document_commands import display_totals


def _parse_priced_items(raw: str) -> list[PricedItemSpec]:
    """Parse '2@25.00,1@9.99' into PricedItemSpec list."""
    specs: list[PricedItemSpec] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if "@" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected 'Qty@Price'."
            )
        qty_str, price = pair.split("@", 1)
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(f"Invalid quantity '{qty_str}'.")
        specs.append(PricedItemSpec(quantity=qty, unit_price=price.strip()))
    return specs


@click.command("quote")
@click.option("--items", required=True, help="Lines as 'Qty@Price,Qty@Price'.")
@click.option("--discount", default="0", show_default=True, help="Absolute discount amount.")
@click.option("--tax-rate", default=None, help="Tax rate in percent (defaults to settings).")
@click.option("--shipping", default="0", show_default=True, help="Shipping amount.")
def totals_quote(items: str, discount: str, tax_rate: str | None, shipping: str) -> None:
    """Compute totals for a draft order."""
    specs = _parse_priced_items(items)
    handler = QuoteTotalsHandler()

    try:
        dto = handler.handle(specs, discount=discount, tax_rate=tax_rate, shipping=shipping)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    display_totals(dto)
