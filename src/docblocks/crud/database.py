"""Engine construction and schema setup"""

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

import docblocks.crud.tables  # noqa: F401  (registers tables on SQLModel.metadata)


def make_engine(db_url: str, timeout: float = 5.0) -> Engine:
    """Create an engine. timeout bounds how long a call waits on a locked database."""
    if db_url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": timeout}
        return create_engine(db_url, echo=False, connect_args=connect_args)
    return create_engine(db_url, echo=False, pool_timeout=timeout, pool_pre_ping=True)


def init_db(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)


def drop_db(engine: Engine) -> None:
    SQLModel.metadata.drop_all(engine)
