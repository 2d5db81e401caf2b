"""CLI commands for reservations."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import click

from ims.application.create_reservation import CreateReservationHandler
from ims.application.expire_reservations import ExpireReservationsHandler
from ims.application.show_reservations import ShowReservationsHandler
from ims.application.transition_reservation import (
    ReleaseCartReservationsHandler,
    TransitionReservationHandler,
)
from ims.domain.exceptions import DomainException
from ims.domain.model.reservation import InventoryReservation, ReservationStatus
from ims.infrastructure.bootstrap import settings, unit_of_work


def _print_reservations(reservations: list[InventoryReservation]) -> None:
    if not reservations:
        click.echo("No reservations found.")
        return

    click.echo(f"{'ID':<34} {'Item':<34} {'Qty':>5}  {'Status':<10} {'Holder':<20} Expires")
    click.echo("-" * 130)
    for r in reservations:
        holder = f"order:{r.order_id}" if r.order_id else f"cart:{r.cart_id}"
        click.echo(
            f"{r.id:<34} {r.inventory_id:<34} {r.quantity:>5}  {r.status.value:<10} "
            f"{holder:<20} {r.expires_at.isoformat(timespec='seconds')}"
        )


@click.command("create")
@click.option("--item", "inventory_id", required=True, help="Item ID.")
@click.option("--quantity", required=True, type=int)
@click.option("--order", "order_id", default=None, help="Hold for this order.")
@click.option("--cart", "cart_id", default=None, help="Hold for this cart.")
@click.option("--expires-at", type=click.DateTime(), default=None, help="UTC expiry time.")
@click.option("--minutes", type=int, default=None, help="Expire this many minutes from now.")
@click.option("--by", "created_by", default=None, help="Actor recorded on the ledger.")
def reservation_create(
    inventory_id: str,
    quantity: int,
    order_id: str | None,
    cart_id: str | None,
    expires_at: datetime | None,
    minutes: int | None,
    created_by: str | None,
) -> None:
    """Hold stock for a cart or an order."""
    current = settings()
    if expires_at is None:
        ttl = minutes if minutes is not None else current.default_reservation_minutes
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=ttl)

    handler = CreateReservationHandler(unit_of_work(), max_attempts=current.posting_max_attempts)
    try:
        reservation = handler.handle(
            inventory_id,
            quantity,
            expires_at,
            order_id=order_id,
            cart_id=cart_id,
            created_by=created_by,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Reservation {reservation.id} created  "
        f"(quantity={reservation.quantity}, expires {reservation.expires_at.isoformat(timespec='seconds')})"
    )


@click.command("transition")
@click.option("--id", "reservation_id", required=True, help="Reservation ID.")
@click.option(
    "--status",
    required=True,
    type=click.Choice([s.value for s in ReservationStatus], case_sensitive=False),
)
@click.option("--by", "created_by", default=None, help="Actor recorded on the ledger.")
def reservation_transition(reservation_id: str, status: str, created_by: str | None) -> None:
    """Fulfil, cancel or expire a reservation."""
    current = settings()
    handler = TransitionReservationHandler(
        unit_of_work(),
        fulfilment_posts_sale=current.fulfilment_posts_sale,
        max_attempts=current.posting_max_attempts,
    )

    try:
        reservation = handler.handle(reservation_id, status, created_by=created_by)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Reservation {reservation.id} is now {reservation.status.value}")


@click.command("list")
@click.option("--item", "inventory_id", default=None, help="Active holds on an item.")
@click.option("--order", "order_id", default=None, help="Every reservation of an order.")
@click.option("--cart", "cart_id", default=None, help="Active holds of a cart.")
def reservation_list(inventory_id: str | None, order_id: str | None, cart_id: str | None) -> None:
    """List reservations by item, order or cart."""
    chosen = [v for v in (inventory_id, order_id, cart_id) if v]
    if len(chosen) != 1:
        raise click.UsageError("Pass exactly one of --item, --order or --cart.")

    handler = ShowReservationsHandler(unit_of_work())
    if inventory_id:
        reservations = handler.by_item(inventory_id)
    elif order_id:
        reservations = handler.by_order(order_id)
    else:
        reservations = handler.by_cart(cart_id)
    _print_reservations(reservations)


@click.command("release-cart")
@click.option("--cart", "cart_id", required=True, help="Cart ID.")
@click.option("--by", "created_by", default=None, help="Actor recorded on the ledger.")
def reservation_release_cart(cart_id: str, created_by: str | None) -> None:
    """Cancel every active hold of an abandoned cart."""
    handler = ReleaseCartReservationsHandler(
        unit_of_work(), max_attempts=settings().posting_max_attempts
    )
    try:
        released = handler.handle(cart_id, created_by=created_by)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Released {released} reservation(s) for cart {cart_id}")


@click.command("sweep")
def reservation_sweep() -> None:
    """Expire every active reservation past its expiry time."""
    handler = ExpireReservationsHandler(
        unit_of_work(), max_attempts=settings().posting_max_attempts
    )
    result = handler.handle()
    click.echo(
        f"Examined {result.examined}, expired {result.expired}, skipped {result.skipped}"
    )
