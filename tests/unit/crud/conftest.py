"""Shared fixtures for crud unit tests"""

import pytest
from sqlmodel import SQLModel, Session

from docblocks.core.models import Block, Document, Position, Size
from docblocks.crud.database import init_db, make_engine
from docblocks.crud.sql_repo import SQLStore


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="sql_store")
def sql_store_fixture(engine):
    return SQLStore(engine, max_versions=3)


@pytest.fixture(name="doc")
def doc_fixture():
    """A minimal unsaved Document with two blocks."""
    return Document(
        owner_id="u1",
        title="Plan",
        blocks=[
            Block(content="Intro", position=Position(x=0, y=0), size=Size(width=200, height=100)),
            Block(content="Body", position=Position(x=0, y=120), size=Size(width=200, height=300)),
        ],
    )
