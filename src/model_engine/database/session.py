from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from ..config import Settings, get_settings


def enable_sqlite_savepoints(engine: AsyncEngine) -> AsyncEngine:
    """
    Let SQLAlchemy emit BEGIN on SQLite instead of the driver.

    The sqlite3 driver delays BEGIN until the first DML statement, so a
    SAVEPOINT issued before it opens the transaction itself and RELEASE then
    commits it. No-op for other dialects.
    """
    if engine.dialect.name != "sqlite":
        return engine

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def create_async_engine_from_settings(settings: Settings | None = None, **kwargs) -> AsyncEngine:
    """
    Create the AsyncEngine Models execute against.

    Extra keyword arguments are passed on to `create_async_engine`.
    """
    settings = settings or get_settings()
    engine = create_async_engine(
        settings.get_database_url(),
        echo=settings.SQLALCHEMY_ECHO,   # Set to False in production
        pool_pre_ping=settings.DB_POOL_PRE_PING,
        **kwargs,
    )
    return enable_sqlite_savepoints(engine)


@asynccontextmanager
async def transaction(engine: AsyncEngine, connection: AsyncConnection | None = None) -> AsyncIterator[AsyncConnection]:
    """
    Usage:
        async with transaction(engine) as conn:
            await conn.execute(...)

    Opens a transaction on `engine` that commits when the block succeeds and
    rolls back when it raises. A caller-supplied `connection` is joined through
    a savepoint: a failing block undoes only its own statements, and the
    enclosing transaction stays with the caller.
    """
    if connection is not None:
        async with connection.begin_nested():
            yield connection
        return

    async with engine.begin() as conn:
        yield conn
