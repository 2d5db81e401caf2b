"""CLI commands for inventory items."""

from __future__ import annotations

import click

from ims.application.manage_items import (
    AdjustQuantityHandler,
    CreateItemHandler,
    DeleteItemHandler,
    UpdateItemHandler,
)
from ims.application.show_inventory import ShowInventoryHandler
from ims.domain.exceptions import DomainException
from ims.domain.model.inventory import InventoryItem, ItemFilter, ItemPatch
from ims.infrastructure.bootstrap import item_defaults, settings, unit_of_work


def _print_items(items: list[InventoryItem]) -> None:
    """Shared table layout for item listings."""
    if not items:
        click.echo("No inventory items found.")
        return

    click.echo(
        f"{'ID':<34} {'SKU':<16} {'Location':<34} {'Qty':>6} {'Reserved':>9} {'Available':>10}"
    )
    click.echo("-" * 114)
    for item in items:
        flag = " LOW" if item.is_low_stock else ""
        click.echo(
            f"{item.id:<34} {item.sku:<16} {item.location_id:<34} "
            f"{item.quantity:>6} {item.reserved_quantity:>9} {item.available_quantity:>10}{flag}"
        )


def _print_item(item: InventoryItem) -> None:
    click.echo(f"Item {item.id}")
    click.echo(f"  Product:    {item.product_id}")
    click.echo(f"  SKU:        {item.sku}")
    click.echo(f"  Location:   {item.location_id}")
    click.echo(f"  On hand:    {item.quantity}")
    click.echo(f"  Reserved:   {item.reserved_quantity}")
    click.echo(f"  Available:  {item.available_quantity}")
    click.echo(
        f"  Thresholds: low-stock {item.low_stock_threshold}, "
        f"reorder at {item.reorder_point} (qty {item.reorder_quantity})"
    )
    if item.last_restock_date:
        click.echo(f"  Restocked:  {item.last_restock_date.isoformat()}")


@click.command("add")
@click.option("--product", "product_id", required=True, help="Catalog product ID.")
@click.option("--sku", required=True, help="Stock keeping unit.")
@click.option("--location", "location_id", required=True, help="Location ID.")
@click.option("--quantity", default=0, type=int, show_default=True, help="Starting on-hand quantity.")
@click.option("--reserved", default=0, type=int, show_default=True, help="Starting reserved quantity.")
@click.option("--low-stock-threshold", default=None, type=int)
@click.option("--reorder-point", default=None, type=int)
@click.option("--reorder-quantity", default=None, type=int)
@click.option("--by", "created_by", default=None, help="Actor recorded on the ledger.")
def item_add(
    product_id: str,
    sku: str,
    location_id: str,
    quantity: int,
    reserved: int,
    low_stock_threshold: int | None,
    reorder_point: int | None,
    reorder_quantity: int | None,
    created_by: str | None,
) -> None:
    """Register stock for a SKU at a location."""
    handler = CreateItemHandler(
        unit_of_work(),
        defaults=item_defaults(),
        max_attempts=settings().posting_max_attempts,
    )

    try:
        item = handler.handle(
            product_id=product_id,
            sku=sku,
            location_id=location_id,
            quantity=quantity,
            reserved_quantity=reserved,
            low_stock_threshold=low_stock_threshold,
            reorder_point=reorder_point,
            reorder_quantity=reorder_quantity,
            created_by=created_by,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item {item.id} created  (available={item.available_quantity})")


@click.command("show")
@click.option("--id", "inventory_id", default=None, help="Item ID.")
@click.option("--sku", default=None, help="Look up by SKU instead of ID.")
@click.option("--location", "location_id", default=None, help="Narrow a SKU lookup to one location.")
def item_show(inventory_id: str | None, sku: str | None, location_id: str | None) -> None:
    """Show one inventory item."""
    if not inventory_id and not sku:
        raise click.UsageError("Pass --id or --sku.")

    handler = ShowInventoryHandler(unit_of_work())
    try:
        if inventory_id:
            item = handler.find(inventory_id)
        else:
            item = handler.find_by_sku(sku, location_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _print_item(item)


@click.command("list")
@click.option("--product", "product_id", default=None, help="Every location's stock of one product.")
@click.option("--location", "location_id", default=None, help="Only items at this location.")
@click.option("--low-stock", is_flag=True, help="Only items at or below their threshold.")
@click.option("--out-of-stock", is_flag=True, help="Only items with nothing available.")
@click.option("--limit", default=50, type=int, show_default=True)
@click.option("--offset", default=0, type=int, show_default=True)
def item_list(
    product_id: str | None,
    location_id: str | None,
    low_stock: bool,
    out_of_stock: bool,
    limit: int,
    offset: int,
) -> None:
    """List inventory items, most recently updated first."""
    handler = ShowInventoryHandler(unit_of_work())
    try:
        if product_id:
            items = handler.by_product(product_id)
        else:
            items = handler.handle(
                ItemFilter(location_id=location_id, low_stock=low_stock, out_of_stock=out_of_stock),
                limit=limit,
                offset=offset,
            )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _print_items(items)


@click.command("update")
@click.option("--id", "inventory_id", required=True, help="Item ID.")
@click.option("--quantity", default=None, type=int, help="New on-hand quantity.")
@click.option("--reserved", default=None, type=int, help="New reserved quantity.")
@click.option("--low-stock-threshold", default=None, type=int)
@click.option("--reorder-point", default=None, type=int)
@click.option("--reorder-quantity", default=None, type=int)
@click.option("--by", "created_by", default=None, help="Actor recorded on the ledger.")
def item_update(
    inventory_id: str,
    quantity: int | None,
    reserved: int | None,
    low_stock_threshold: int | None,
    reorder_point: int | None,
    reorder_quantity: int | None,
    created_by: str | None,
) -> None:
    """Set quantities or thresholds; quantity changes go through the ledger."""
    patch = ItemPatch(
        quantity=quantity,
        reserved_quantity=reserved,
        low_stock_threshold=low_stock_threshold,
        reorder_point=reorder_point,
        reorder_quantity=reorder_quantity,
    )
    handler = UpdateItemHandler(unit_of_work(), max_attempts=settings().posting_max_attempts)

    try:
        item = handler.handle(inventory_id, patch, created_by=created_by)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _print_item(item)


@click.command("adjust")
@click.option("--id", "inventory_id", required=True, help="Item ID.")
@click.option("--delta", required=True, type=int, help="Signed change to on-hand quantity.")
@click.option("--reason", default=None, help="Why the count changed.")
@click.option("--reference", default=None, help="External reference (e.g. a stock-take ID).")
@click.option("--by", "created_by", default=None, help="Actor recorded on the ledger.")
def item_adjust(
    inventory_id: str,
    delta: int,
    reason: str | None,
    reference: str | None,
    created_by: str | None,
) -> None:
    """Post a manual stock correction."""
    handler = AdjustQuantityHandler(unit_of_work(), max_attempts=settings().posting_max_attempts)

    try:
        item = handler.handle(
            inventory_id, delta, reason=reason, reference=reference, created_by=created_by
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Item {item.id} adjusted by {delta:+d}  "
        f"(quantity={item.quantity}, available={item.available_quantity})"
    )


@click.command("remove")
@click.option("--id", "inventory_id", required=True, help="Item ID.")
def item_remove(inventory_id: str) -> None:
    """Remove an item that has no history."""
    try:
        DeleteItemHandler(unit_of_work()).handle(inventory_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Item {inventory_id} removed")


@click.command("low-stock")
def item_low_stock() -> None:
    """List items at or below their low-stock threshold."""
    _print_items(ShowInventoryHandler(unit_of_work()).low_stock())


@click.command("out-of-stock")
def item_out_of_stock() -> None:
    """List items with nothing available."""
    _print_items(ShowInventoryHandler(unit_of_work()).out_of_stock())
