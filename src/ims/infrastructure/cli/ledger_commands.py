"""CLI commands for the transaction ledger."""

from __future__ import annotations

import click

from ims.application.post_transaction import PostTransactionHandler, TransactionHistoryHandler
from ims.domain.exceptions import DomainException
from ims.domain.model.transaction import InventoryTransaction, TransactionType
from ims.infrastructure.bootstrap import settings, unit_of_work


def _print_transactions(transactions: list[InventoryTransaction]) -> None:
    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"{'#':>4} {'When':<26} {'Type':<12} {'Qty':>6}  {'By':<12} {'Reference':<34} Notes")
    click.echo("-" * 115)
    for txn in transactions:
        click.echo(
            f"{txn.sequence:>4} {txn.created_at.isoformat(timespec='seconds'):<26} "
            f"{txn.transaction_type.value:<12} {txn.quantity:>6}  "
            f"{txn.created_by:<12} {txn.reference or '-':<34} {txn.notes or ''}"
        )


@click.command("post")
@click.option("--item", "inventory_id", required=True, help="Item ID.")
@click.option(
    "--type",
    "transaction_type",
    required=True,
    type=click.Choice([t.value for t in TransactionType], case_sensitive=False),
)
@click.option("--quantity", required=True, type=int)
@click.option("--reference", default=None, help="Order, cart, PO or other external reference.")
@click.option("--notes", default=None)
@click.option("--source-location", default=None)
@click.option("--destination-location", default=None)
@click.option("--by", "created_by", default=None, help="Actor recorded on the ledger.")
def ledger_post(
    inventory_id: str,
    transaction_type: str,
    quantity: int,
    reference: str | None,
    notes: str | None,
    source_location: str | None,
    destination_location: str | None,
    created_by: str | None,
) -> None:
    """Post one transaction against an item."""
    handler = PostTransactionHandler(unit_of_work(), max_attempts=settings().posting_max_attempts)

    try:
        txn = handler.handle(
            inventory_id,
            transaction_type,
            quantity,
            reference=reference,
            notes=notes,
            created_by=created_by,
            source_location_id=source_location,
            destination_location_id=destination_location,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Transaction {txn.id} posted  ({txn.transaction_type.value} {txn.quantity})")


@click.command("history")
@click.option("--item", "inventory_id", required=True, help="Item ID.")
@click.option("--replay", is_flag=True, help="Also check the item against a replay of its ledger.")
def ledger_history(inventory_id: str, replay: bool) -> None:
    """Show an item's ledger, newest first."""
    handler = TransactionHistoryHandler(unit_of_work())
    _print_transactions(handler.by_item(inventory_id))

    if not replay:
        return
    try:
        result = handler.replay(inventory_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo()
    click.echo(
        f"Stored:   quantity={result.quantity} reserved={result.reserved_quantity}"
    )
    click.echo(
        f"Replayed: quantity={result.replayed_quantity} "
        f"reserved={result.replayed_reserved_quantity}"
    )
    if not result.consistent:
        raise click.ClickException("Item does not match its ledger")
    click.echo("Ledger is consistent.")


@click.command("by-reference")
@click.option("--reference", required=True)
def ledger_by_reference(reference: str) -> None:
    """Show every transaction that carries a reference."""
    _print_transactions(TransactionHistoryHandler(unit_of_work()).by_reference(reference))
