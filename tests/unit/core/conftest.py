"""Shared fixtures for core unit tests: one store per engine, editors for two users"""

import pytest
from sqlmodel import SQLModel

from docblocks.config import Settings
from docblocks.core.editor import DocumentEditor
from docblocks.crud.database import init_db, make_engine
from docblocks.crud.memory_repo import MemoryStore
from docblocks.crud.sql_repo import SQLStore


@pytest.fixture(name="store", params=["memory", "sql"])
def store_fixture(request):
    """Every editor test runs against both store engines."""
    if request.param == "memory":
        yield MemoryStore()
        return
    engine = make_engine("sqlite://")
    init_db(engine)
    yield SQLStore(engine)
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="settings")
def settings_fixture():
    return Settings()


@pytest.fixture(name="editor")
def editor_fixture(store, settings):
    """Editor for the document owner, u1."""
    return DocumentEditor(store, "u1", settings)


@pytest.fixture(name="other")
def other_fixture(store, settings):
    """Editor for a second user, u2, sharing the same store."""
    return DocumentEditor(store, "u2", settings)


@pytest.fixture(name="doc")
def doc_fixture(editor):
    return editor.create_document("Plan")
