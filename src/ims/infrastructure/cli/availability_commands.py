"""CLI commands for cross-location availability."""

from __future__ import annotations

import click

from ims.application.check_availability import CheckAvailabilityHandler
from ims.domain.exceptions import DomainException
from ims.infrastructure.bootstrap import unit_of_work


@click.command("check")
@click.option("--product", "product_id", required=True, help="Catalog product ID.")
@click.option("--quantity", default=1, type=int, show_default=True)
def availability_check(product_id: str, quantity: int) -> None:
    """Can this many units be sold from any location."""
    try:
        dto = CheckAvailabilityHandler(unit_of_work()).handle(product_id, quantity)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    verdict = "available" if dto.available else "NOT available"
    click.echo(
        f"{dto.requested_quantity} x {dto.product_id}: {verdict}  "
        f"(total available {dto.total_available})"
    )


@click.command("totals")
@click.option("--product", "product_id", required=True, help="Catalog product ID.")
def availability_totals(product_id: str) -> None:
    """Sum a product's stock over every location."""
    totals = CheckAvailabilityHandler(unit_of_work()).totals(product_id)
    click.echo(f"Product:    {totals.product_id}")
    click.echo(f"Locations:  {totals.location_count}")
    click.echo(f"On hand:    {totals.total_quantity}")
    click.echo(f"Available:  {totals.total_available}")
