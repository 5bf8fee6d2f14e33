from .base import NAMING_CONVENTION, build_table, make_metadata
from .session import create_async_engine_from_settings, enable_sqlite_savepoints, transaction

__all__ = [
    "NAMING_CONVENTION",
    "build_table",
    "make_metadata",
    "create_async_engine_from_settings",
    "enable_sqlite_savepoints",
    "transaction",
]
