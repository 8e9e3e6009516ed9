"""Shared pytest fixtures."""

import pytest

from linkarchive.db import (
    DatabaseArchiveGateway,
    close_db,
    create_engine,
    create_session_factory,
    init_db,
)
from tests.fakes import FakeGateway, FakeGenerator


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def fake_generator():
    return FakeGenerator()


@pytest.fixture
async def engine(tmp_path):
    """File-backed SQLite database with the archive schema."""
    engine = create_engine(f"sqlite+aiosqlite:///{tmp_path / 'archive.db'}")
    await init_db(engine)
    yield engine
    await close_db(engine)


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def db_gateway(session_factory):
    return DatabaseArchiveGateway(session_factory)
