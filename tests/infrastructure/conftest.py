import pytest

from ims.infrastructure.persistence.orm import build_engine, build_session_factory, create_schema
from ims.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


@pytest.fixture
def sql_engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'ims-test.db'}", sqlite_busy_timeout=10)
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sql_engine):
    return build_session_factory(sql_engine)


@pytest.fixture
def sql_uow(session_factory):
    return SqlAlchemyUnitOfWork(session_factory)
