import logging
import os
from contextlib import contextmanager

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record):
    # SQLite ignores REFERENCES ... ON DELETE CASCADE unless this is set per connection.
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.close()


class Database:
    """Storage handle owning the engine, its connection pool and a session factory.

    Build one per application, call ``init`` at startup and ``dispose`` at
    shutdown.  Request handlers receive sessions through ``get_db``.
    """

    def __init__(self, url: str, pool_size: int = 10, max_overflow: int = 0, pool_timeout: int = 30):
        self.url = make_url(url)
        engine_kwargs = {}
        if self.url.get_backend_name() == "sqlite":
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if self.url.database in (None, "", ":memory:"):
                # In-memory SQLite uses a single shared connection, no queue to size.
                engine_kwargs["poolclass"] = StaticPool
            else:
                engine_kwargs.update(pool_size=pool_size, max_overflow=max_overflow, pool_timeout=pool_timeout)
        else:
            engine_kwargs.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_pre_ping=True,
            )

        self.engine = create_engine(self.url, **engine_kwargs)
        if self.url.get_backend_name() == "sqlite":
            event.listen(self.engine, "connect", _enable_sqlite_foreign_keys)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    @classmethod
    def from_settings(cls, settings):
        return cls(
            settings.database_url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_timeout=settings.db_pool_timeout,
        )

    def init(self):
        """Create the data directory (for file-backed SQLite) and all tables."""
        # Import models so their tables are registered on Base.metadata.
        from carservice.models import booking, user  # noqa: F401

        if self.url.get_backend_name() == "sqlite" and self.url.database not in (None, "", ":memory:"):
            directory = os.path.dirname(self.url.database)
            if directory and not os.path.exists(directory):
                os.makedirs(directory)
        Base.metadata.create_all(bind=self.engine)
        logger.info(f"Database initialised: {self.url.render_as_string(hide_password=True)}")

    def dispose(self):
        """Close every pooled connection."""
        self.engine.dispose()
        logger.info("Database connection pool closed")

    @contextmanager
    def session(self):
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()


def get_db(request: Request):
    """Provide a database session bound to the application's storage handle."""
    with request.app.state.database.session() as db:
        yield db
