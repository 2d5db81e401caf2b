import click
import structlog

from ims.infrastructure.bootstrap import settings
from ims.infrastructure.cli.availability_commands import availability_check, availability_totals
from ims.infrastructure.cli.db_commands import db_init
from ims.infrastructure.cli.item_commands import (
    item_add,
    item_adjust,
    item_list,
    item_low_stock,
    item_out_of_stock,
    item_remove,
    item_show,
    item_update,
)
from ims.infrastructure.cli.ledger_commands import ledger_by_reference, ledger_history, ledger_post
from ims.infrastructure.cli.location_commands import (
    location_add,
    location_list,
    location_remove,
    location_update,
)
from ims.infrastructure.cli.reservation_commands import (
    reservation_create,
    reservation_list,
    reservation_release_cart,
    reservation_sweep,
    reservation_transition,
)
from ims.infrastructure.logging import configure_logging


@click.group()
def cli() -> None:
    """IMS — Inventory ledger and reservations"""
    if not structlog.is_configured():
        configure_logging(settings())


@cli.group()
def location() -> None:
    """Manage stock locations."""


@cli.group()
def item() -> None:
    """Manage inventory items."""


@cli.group()
def ledger() -> None:
    """Post and inspect ledger transactions."""


@cli.group()
def reservation() -> None:
    """Hold and release stock."""


@cli.group()
def availability() -> None:
    """Query stock across locations."""


@cli.group()
def db() -> None:
    """Database housekeeping."""


# Register subcommands
location.add_command(location_add)
location.add_command(location_list)
location.add_command(location_remove)
location.add_command(location_update)
item.add_command(item_add)
item.add_command(item_adjust)
item.add_command(item_list)
item.add_command(item_low_stock)
item.add_command(item_out_of_stock)
item.add_command(item_remove)
item.add_command(item_show)
item.add_command(item_update)
ledger.add_command(ledger_by_reference)
ledger.add_command(ledger_history)
ledger.add_command(ledger_post)
reservation.add_command(reservation_create)
reservation.add_command(reservation_list)
reservation.add_command(reservation_release_cart)
reservation.add_command(reservation_sweep)
reservation.add_command(reservation_transition)
availability.add_command(availability_check)
availability.add_command(availability_totals)
db.add_command(db_init)
