"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from functools import lru_cache

from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from ims.application.manage_items import ItemDefaults
from ims.infrastructure.config import Settings, get_settings
from ims.infrastructure.persistence.orm import (
    build_engine,
    build_session_factory,
    create_schema,
)
from ims.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


def settings() -> Settings:
    return get_settings()


@lru_cache
def engine() -> Engine:
    current = settings()
    db_engine = build_engine(current.database_url, current.sqlite_busy_timeout)
    create_schema(db_engine)
    return db_engine


@lru_cache
def session_factory() -> sessionmaker:
    return build_session_factory(engine())


def unit_of_work() -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(session_factory())


def item_defaults() -> ItemDefaults:
    current = settings()
    return ItemDefaults(
        low_stock_threshold=current.default_low_stock_threshold,
        reorder_point=current.default_reorder_point,
        reorder_quantity=current.default_reorder_quantity,
    )


def reset() -> None:
    """Drop cached settings and engine; the next call rebuilds them."""
    if engine.cache_info().currsize:
        engine().dispose()
    session_factory.cache_clear()
    engine.cache_clear()
    get_settings.cache_clear()
