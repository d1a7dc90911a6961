"""
Database connections: SQLAlchemy engine, declarative base and session factory.
"""

from sqlalchemy import create_engine, Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    pass


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create the engine for the relational store.

    SQLite connections are shared across threads (FastAPI runs sync work in a
    threadpool); an in-memory SQLite URL gets a single static connection so
    every session sees the same database.
    """
    kwargs: dict = {"echo": echo}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def create_session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create tables for every registered model."""
    # import models so they register with Base.metadata
    from notesapp.features.auth import models as auth_models  # noqa: F401
    from notesapp.features.notes import models as notes_models  # noqa: F401

    Base.metadata.create_all(bind=engine)
