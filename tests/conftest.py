import pytest
import structlog

from ims.application.manage_items import CreateItemHandler
from ims.application.manage_locations import CreateLocationHandler
from ims.infrastructure.config import Settings
from ims.infrastructure.logging import configure_logging
from tests.fakes import FakeStore, FakeUnitOfWork


def pytest_sessionstart(session):
    if not structlog.is_configured():
        configure_logging(Settings(environment="test"))


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def uow(store):
    return FakeUnitOfWork(store)


@pytest.fixture
def location(uow):
    return CreateLocationHandler(uow).handle(name="Main Warehouse", type="warehouse")


@pytest.fixture
def make_item(uow, location):
    """Create an item at the default location; returns the stored item."""

    def _make(sku="A1", quantity=0, reserved_quantity=0, product_id="prod-1", location_id=None, **kwargs):
        return CreateItemHandler(uow).handle(
            product_id=product_id,
            sku=sku,
            location_id=location_id or location.id,
            quantity=quantity,
            reserved_quantity=reserved_quantity,
            **kwargs,
        )

    return _make
