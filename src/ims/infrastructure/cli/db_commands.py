"""CLI commands for database housekeeping."""

from __future__ import annotations

import click

from ims.infrastructure.bootstrap import engine, settings
from ims.infrastructure.persistence.orm import create_schema


@click.command("init")
def db_init() -> None:
    """Create any missing tables."""
    create_schema(engine())
    click.echo(f"Schema ready at {settings().database_url}")
