import logging

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _serialize_sqlite_writes(engine):
    """Make every SQLite transaction take the database write lock up front.

    pysqlite defers BEGIN until the first write, so two sessions could both
    read "no conflict" before either inserts. BEGIN IMMEDIATE closes that gap.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # SQLAlchemy emits BEGIN itself, see _on_begin
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


class Store:
    """Handle on the backing database.

    Built once at process start, passed to the services that need it and
    disposed on shutdown.
    """

    def __init__(self, url: str, echo: bool = False, busy_timeout: float = 30.0):
        self.url = url
        kwargs = {"echo": echo}
        if url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False, "timeout": busy_timeout}
            if _is_memory_sqlite(url):
                kwargs["poolclass"] = StaticPool
        else:
            kwargs["pool_pre_ping"] = True

        self.engine = create_engine(url, **kwargs)
        if self.engine.dialect.name == "sqlite":
            _serialize_sqlite_writes(self.engine)

        self.SessionLocal = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

    @classmethod
    def from_settings(cls, settings) -> "Store":
        return cls(settings.database_url, echo=settings.sql_echo, busy_timeout=settings.db_busy_timeout)

    @property
    def dialect(self) -> str:
        return self.engine.dialect.name

    def session(self):
        return self.SessionLocal()

    def init_db(self):
        # models must be imported for their tables to be registered
        from reservation_engine import models  # noqa: F401
        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema ready (%s)", self.dialect)

    def drop_all(self):
        from reservation_engine import models  # noqa: F401
        Base.metadata.drop_all(bind=self.engine)

    def dispose(self):
        self.engine.dispose()
        logger.info("Database connections released")


def get_store(request: Request) -> Store:
    return request.app.state.store
