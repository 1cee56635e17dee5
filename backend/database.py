from collections.abc import Iterator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from backend.core import config


Base = declarative_base()

# Largest value a BIGINT primary key can hold.
MAX_ROW_ID = 2**63 - 1


def is_storable_id(value: int) -> bool:
    return 1 <= value <= MAX_ROW_ID


class Database:
    """Owns the engine and session factory for one application instance.

    Created by the app factory, opened on startup and disposed on shutdown.
    Handlers get sessions through ``get_db`` instead of importing a global.
    """

    def __init__(self, url: str, **engine_options) -> None:
        if url.startswith('sqlite'):
            engine_options.setdefault('connect_args', {'check_same_thread': False})
        engine_options.setdefault('echo', config.DATABASE_ECHO)

        self.url = url
        self.engine = create_engine(url, **engine_options)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=self.engine,
        )

    def open(self) -> None:
        # Model modules must be imported before create_all sees their tables.
        from backend.models import survey, user  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def close(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
