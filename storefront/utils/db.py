# storefront/utils/db.py

from fastapi import Request
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

# Import the table classes so they are registered on SQLModel.metadata
from storefront import models  # noqa: F401


def build_engine(database_url: str) -> Engine:
    kwargs = {}
    if database_url.startswith("sqlite"):
        # check_same_thread=False is only needed for SQLite. It's not needed for other databases.
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise every session sees an empty in-memory db
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def create_tables(engine: Engine) -> None:
    SQLModel.metadata.create_all(engine)


def get_session(request: Request):
    # Dependency to yield a database session
    with Session(request.app.state.engine) as session:
        yield session
