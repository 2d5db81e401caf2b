"""CLI commands for the Location Registry."""

from __future__ import annotations

import click

from ims.application.manage_locations import (
    CreateLocationHandler,
    DeleteLocationHandler,
    ListLocationsHandler,
    UpdateLocationHandler,
)
from ims.domain.exceptions import DomainException
from ims.domain.model.location import LocationPatch, LocationType
from ims.infrastructure.bootstrap import unit_of_work

_TYPES = click.Choice([t.value for t in LocationType], case_sensitive=False)


@click.command("add")
@click.option("--name", required=True, help="Location name.")
@click.option("--type", "location_type", required=True, type=_TYPES, help="Location type.")
@click.option("--address", default=None)
@click.option("--city", default=None)
@click.option("--state", default=None)
@click.option("--country", default=None)
@click.option("--postal-code", default=None)
@click.option("--inactive", is_flag=True, help="Register the location as inactive.")
def location_add(
    name: str,
    location_type: str,
    address: str | None,
    city: str | None,
    state: str | None,
    country: str | None,
    postal_code: str | None,
    inactive: bool,
) -> None:
    """Register a new stock location."""
    handler = CreateLocationHandler(unit_of_work())

    try:
        location = handler.handle(
            name=name,
            type=location_type,
            address=address,
            city=city,
            state=state,
            country=country,
            postal_code=postal_code,
            is_active=not inactive,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Location {location.id} '{location.name}' added ({location.type.value})")


@click.command("update")
@click.option("--id", "location_id", required=True, help="Location ID.")
@click.option("--name", default=None)
@click.option("--type", "location_type", default=None, type=_TYPES)
@click.option("--address", default=None)
@click.option("--city", default=None)
@click.option("--state", default=None)
@click.option("--country", default=None)
@click.option("--postal-code", default=None)
@click.option("--active/--inactive", "is_active", default=None)
def location_update(
    location_id: str,
    name: str | None,
    location_type: str | None,
    address: str | None,
    city: str | None,
    state: str | None,
    country: str | None,
    postal_code: str | None,
    is_active: bool | None,
) -> None:
    """Change a location's details."""
    patch = LocationPatch(
        name=name,
        type=location_type,
        address=address,
        city=city,
        state=state,
        country=country,
        postal_code=postal_code,
        is_active=is_active,
    )

    try:
        location = UpdateLocationHandler(unit_of_work()).handle(location_id, patch)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Location {location.id} updated")


@click.command("remove")
@click.option("--id", "location_id", required=True, help="Location ID.")
def location_remove(location_id: str) -> None:
    """Remove a location that holds no inventory items."""
    try:
        DeleteLocationHandler(unit_of_work()).handle(location_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Location {location_id} removed")


@click.command("list")
@click.option("--all", "include_inactive", is_flag=True, help="Include inactive locations.")
def location_list(include_inactive: bool) -> None:
    """List stock locations."""
    locations = ListLocationsHandler(unit_of_work()).handle(include_inactive=include_inactive)

    if not locations:
        click.echo("No locations found.")
        return

    click.echo(f"{'ID':<34} {'Name':<24} {'Type':<20} {'Active':>6}")
    click.echo("-" * 87)
    for loc in locations:
        active = "yes" if loc.is_active else "no"
        click.echo(f"{loc.id:<34} {loc.name:<24} {loc.type.value:<20} {active:>6}")
