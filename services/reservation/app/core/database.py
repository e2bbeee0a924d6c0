"""Store handle for the reservation service.

The engine is owned by a :class:`Database` instance that is opened when the
process starts and disposed at shutdown. Callers receive the handle explicitly
instead of importing a module-level engine.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator, Optional

from sqlalchemy import BigInteger, DateTime, Integer, create_engine, event, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.types import TypeDecorator

from app.core.config import settings

LOGGER = logging.getLogger(__name__)

Base = declarative_base()

# SQLite only auto-increments ``INTEGER PRIMARY KEY`` columns.
IdType = BigInteger().with_variant(Integer(), "sqlite")


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetime stored in UTC.

    Naive values are taken as UTC. Values read back from backends that drop the
    offset (SQLite) are returned as aware UTC datetimes.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class Database:
    """Explicit-lifecycle handle around an engine and its session factory."""

    def __init__(
        self,
        url: Optional[str] = None,
        *,
        timeout_seconds: Optional[float] = None,
        echo: bool = False,
    ) -> None:
        self.url = url or settings.DATABASE_URL
        self.timeout_seconds = (
            timeout_seconds
            if timeout_seconds is not None
            else settings.STORE_TRANSACTION_TIMEOUT_SECONDS
        )
        self._echo = echo
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database handle is not open")
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self.engine.dialect.name

    def open(self) -> "Database":
        if self._engine is not None:
            return self

        LOGGER.info("Opening reservation store at %s", self._safe_url())
        if self.url.startswith("sqlite"):
            engine = create_engine(
                self.url,
                echo=self._echo,
                connect_args={
                    "timeout": self.timeout_seconds,
                    "check_same_thread": False,
                },
            )
            _install_sqlite_locking(engine)
        else:
            engine = create_engine(
                self.url,
                echo=self._echo,
                pool_size=10,
                max_overflow=20,
                pool_timeout=30,
                pool_recycle=1800,
                pool_pre_ping=True,
            )

        self._engine = engine
        self._session_factory = sessionmaker(
            bind=engine,
            autoflush=False,
            expire_on_commit=False,
        )
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        LOGGER.info("Closing reservation store")
        self._engine.dispose()
        self._engine = None
        self._session_factory = None

    def create_all(self) -> None:
        # Imported for its side effect of registering every table on Base.
        import app.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_all(self) -> None:
        import app.models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Provide a session bound to one transaction.

        The transaction is committed when the block exits normally and rolled
        back on any exception, which is re-raised unchanged.
        """

        if self._session_factory is None:
            raise RuntimeError("Database handle is not open")

        session: Session = self._session_factory()
        try:
            with session.begin():
                self._apply_timeout(session)
                yield session
        finally:
            session.close()

    def _apply_timeout(self, session: Session) -> None:
        if self.dialect_name != "postgresql":
            return
        timeout_ms = max(int(self.timeout_seconds * 1000), 1)
        session.execute(text(f"SET LOCAL statement_timeout = {timeout_ms}"))
        session.execute(text(f"SET LOCAL lock_timeout = {timeout_ms}"))

    def _safe_url(self) -> str:
        if "@" not in self.url:
            return self.url
        scheme, _, rest = self.url.partition("://")
        return f"{scheme}://***@{rest.split('@', 1)[1]}"

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()


def _install_sqlite_locking(engine: Engine) -> None:
    """Make every SQLite transaction take the write lock up front.

    pysqlite defers ``BEGIN`` until the first write, which lets two
    transactions read the same timeline before either writes. ``BEGIN
    IMMEDIATE`` serializes them instead.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(connection):
        connection.exec_driver_sql("BEGIN IMMEDIATE")


__all__ = ["Base", "Database", "IdType", "UTCDateTime"]
