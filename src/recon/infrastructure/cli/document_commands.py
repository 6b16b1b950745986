"""CLI commands for parent documents and their child documents."""

from __future__ import annotations

import click

from recon.application.compute_totals import ComputeTotalsHandler
from recon.application.create_document import CreateDocumentHandler
from recon.application.dto import DocumentLineSpec, TotalsDTO
from recon.application.record_fulfillment import RecordFulfillmentHandler
from recon.application.record_payment import RecordPaymentHandler
from recon.application.show_remaining import ShowRemainingHandler
from recon.domain.exceptions import DomainException, FulfillmentRejectedError
from recon.domain.model.document import DocumentKind
from recon.infrastructure.bootstrap import document_repository

_KINDS = {"sales": DocumentKind.SALES_ORDER, "purchase": DocumentKind.PURCHASE_ORDER}


def _split_pairs(raw: str, expected: str) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for pair in raw.split(","):
        pair = pair.strip()
        if ":" not in pair:
            raise click.BadParameter(
                f"Invalid item format '{pair}'. Expected '{expected}'."
            )
        key, value = pair.rsplit(":", 1)
        pairs.append((key.strip(), value.strip()))
    return pairs


def _parse_int(raw: str, product_id: str) -> int:
    try:
        return int(raw)
    except ValueError:
        raise click.BadParameter(
            f"Invalid quantity '{raw}' for product '{product_id}'."
        )


def _parse_lines(raw: str) -> list[DocumentLineSpec]:
    """Parse 'W-1:10@15.00,G-2:5@25.00' into DocumentLineSpec list."""
    specs: list[DocumentLineSpec] = []
    for product_id, rest in _split_pairs(raw, "ProductId:Qty@Price"):
        if "@" not in rest:
            raise click.BadParameter(
                f"Missing unit price for product '{product_id}'. Expected 'ProductId:Qty@Price'."
            )
        qty_str, price = rest.split("@", 1)
        specs.append(
            DocumentLineSpec(
                product_id=product_id,
                quantity=_parse_int(qty_str, product_id),
                unit_price=price,
            )
        )
    return specs


def _parse_quantities(raw: str) -> dict[str, int]:
    """Parse 'W-1:3,G-2:2' into {product_id: qty} dict."""
    quantities: dict[str, int] = {}
    for product_id, qty_str in _split_pairs(raw, "ProductId:Quantity"):
        if product_id in quantities:
            raise click.BadParameter(f"Product '{product_id}' is listed more than once.")
        quantities[product_id] = _parse_int(qty_str, product_id)
    return quantities


def display_totals(dto: TotalsDTO) -> None:
    """Shared formatting for a totals breakdown."""
    click.echo(f"  {'Product':<20} {'Qty':>5} {'Price':>10} {'Total':>10}")
    click.echo(f"  {'-'*47}")
    for line in dto.lines:
        click.echo(
            f"  {line.product_id or '-':<20} {line.quantity:>5} {line.unit_price:>10} {line.line_total:>10}"
        )
    click.echo(f"  {'-'*47}")
    click.echo(f"  {'Subtotal':<27} {dto.subtotal:>20}")
    click.echo(f"  {'Discount':<27} {dto.discount:>20}")
    click.echo(f"  {'Tax (' + dto.tax_rate + ')':<27} {dto.tax_amount:>20}")
    click.echo(f"  {'Shipping':<27} {dto.shipping:>20}")
    click.echo(f"  {'Grand Total':<27} {dto.grand_total:>20}")


@click.command("create")
@click.option("--id", "document_id", required=True, help="Document number, e.g. SO-1001.")
@click.option("--kind", type=click.Choice(sorted(_KINDS)), required=True, help="Sales or purchase order.")
@click.option("--party", required=True, help="Customer or supplier name.")
@click.option("--items", required=True, help="Lines as 'ProductId:Qty@Price,...'.")
@click.option("--discount", default="0", show_default=True, help="Absolute discount amount.")
@click.option("--tax-rate", default=None, help="Tax rate in percent (defaults to settings).")
@click.option("--shipping", default="0", show_default=True, help="Shipping amount.")
def document_create(
    document_id: str,
    kind: str,
    party: str,
    items: str,
    discount: str,
    tax_rate: str | None,
    shipping: str,
) -> None:
    """Register a sales or purchase order."""
    specs = _parse_lines(items)
    handler = CreateDocumentHandler(document_repo=document_repository())

    try:
        dto = handler.handle(
            document_id=document_id,
            kind=_KINDS[kind],
            party_name=party,
            line_specs=specs,
            discount=discount,
            tax_rate=tax_rate,
            shipping=shipping,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Document {document_id} created  (party={party})")
    click.echo()
    display_totals(dto)


@click.command("remaining")
@click.option("--id", "document_id", required=True, help="Document to inspect.")
def document_remaining(document_id: str) -> None:
    """Show ordered, fulfilled and remaining quantity per line."""
    handler = ShowRemainingHandler(document_repo=document_repository())

    try:
        dto = handler.handle(document_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Document {dto.document_id}  (status={dto.status})")
    click.echo()
    click.echo(f"  {'Product':<20} {'Ordered':>8} {'Fulfilled':>10} {'Remaining':>10}")
    click.echo(f"  {'-'*51}")
    for line in dto.lines:
        click.echo(
            f"  {line.product_name:<20} {line.ordered:>8} {line.fulfilled:>10} {line.remaining:>10}"
        )
    for warning in dto.warnings:
        click.echo(f"WARNING: {warning}", err=True)


@click.command("totals")
@click.option("--id", "document_id", required=True, help="Document to total.")
def document_totals(document_id: str) -> None:
    """Show the money figures of a stored document."""
    handler = ComputeTotalsHandler(document_repo=document_repository())

    try:
        dto = handler.handle(document_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Document {document_id}")
    click.echo()
    display_totals(dto)


@click.command("fulfill")
@click.option("--id", "document_id", required=True, help="Parent document ID.")
@click.option("--items", "items_str", required=True, help="Quantities as 'ProductId:Qty,...'.")
@click.option(
    "--rejected", "rejected_str", default=None,
    help="Refused units on a goods receipt, as 'ProductId:Qty,...'.",
)
def document_fulfill(document_id: str, items_str: str, rejected_str: str | None) -> None:
    """Record a dispatch or goods receipt against a document.

    The request is all-or-nothing: if any line fails, nothing is recorded.
    """
    handler = RecordFulfillmentHandler(document_repo=document_repository())
    quantities = _parse_quantities(items_str)
    rejected = _parse_quantities(rejected_str) if rejected_str else None

    try:
        dto = handler.handle(document_id, quantities, rejected)
    except FulfillmentRejectedError as exc:
        for failure in exc.result.failures:
            click.echo(f"  {failure.kind.value:<22} {failure.message}", err=True)
        raise click.ClickException(
            f"Nothing recorded for document {document_id} "
            f"({len(exc.result.failures)} line(s) rejected)"
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Recorded {dto.child_label} against {dto.document_id}  (status={dto.status})"
    )
    for product_id, qty in dto.rejected.items():
        click.echo(f"  {product_id}: {qty} unit(s) rejected, still pending")


@click.command("pay")
@click.option("--id", "document_id", required=True, help="Invoice or purchase order ID.")
@click.option("--amount", required=True, help="Payment amount (e.g. 50.00).")
def document_pay(document_id: str, amount: str) -> None:
    """Record a payment against a document's outstanding balance."""
    handler = RecordPaymentHandler(document_repo=document_repository())

    try:
        dto = handler.handle(document_id, amount)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Payment of {dto.amount} recorded against {dto.document_id}  "
        f"(paid={dto.paid}, outstanding={dto.outstanding}, status={dto.payment_status})"
    )
