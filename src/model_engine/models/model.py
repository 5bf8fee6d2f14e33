"""
Generic Model engine.

A Model owns one table: its field descriptors, the Core `Table` built from
them and the create / update / query schemas derived from them. It exposes
bulk operations (create, find, count, update, destroy) and their
exactly-one counterparts (create_one, find_one, update_one, destroy_one).

Every operation:
  1. validates its input against the derived schema (unless disabled),
  2. compiles the query into a WHERE clause,
  3. executes a single statement,
  4. returns the affected rows as plain dicts, limited to `fields` when given.

Steps 1-2 never touch the database, so validation and programmer errors are
raised before any I/O. The exactly-one operations run inside a transaction
(a savepoint when joining a caller connection) and raise EntityNotFoundError /
MultipleEntitiesFoundError from inside it, which rolls back whatever the
statement did.
"""
import time
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Iterable, Mapping, Sequence

from sqlalchemy import ColumnElement, MetaData, delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from ..database.base import build_table
from ..database.session import transaction as open_transaction
from ..exceptions import (
    ConfigurationError,
    EntityExistsError,
    EntityNotFoundError,
    MultipleEntitiesFoundError,
    ProgrammerError,
    ValidationError,
    translate_integrity_errors,
)
from ..query import OrderBy, apply_order_by, check_filter_values, compile_query
from ..schema import FieldDescriptor, derive_schemas

logger = logging.getLogger(__name__)

Entity = dict[str, Any]

# Expected outcomes of a call; logged at INFO without a stack trace.
_EXPECTED_ERRORS = (ValidationError, EntityExistsError, EntityNotFoundError, MultipleEntitiesFoundError)


class Model:
    """
    Data access for a single table.

    Args:
        engine: AsyncEngine the statements run against
        table_name: name of the table (required)
        fields: ordered field descriptors (at least one, names unique)
        metadata: MetaData to register the table on; a fresh one by default

    Raises:
        ConfigurationError: for a missing table name or an unusable field set.
    """

    # Name of the primary key field, excluded from the create/update schemas.
    key_field: str | None = None

    def __init__(
        self,
        engine: AsyncEngine,
        table_name: str,
        fields: Sequence[FieldDescriptor],
        *,
        metadata: MetaData | None = None,
    ):
        if not table_name:
            raise ConfigurationError("A Model requires a table name.")

        fields = tuple(fields)
        if not fields:
            raise ConfigurationError(f'Model "{table_name}" requires at least one field.')

        names = [descriptor.name for descriptor in fields]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ConfigurationError(
                f'Model "{table_name}" defines field(s) more than once: {", ".join(duplicates)}',
                fields=duplicates,
            )
        self._check_fields(fields)

        self.engine = engine
        self.table_name = table_name
        self.fields = fields
        self.table = build_table(table_name, fields, metadata, key_field=self.key_field)
        self.schemas = derive_schemas(table_name, fields, key_field=self.key_field)

        logger.debug(
            "model.init",
            extra={"table": table_name, "field_names": names, "key_field": self.key_field},
        )

    def _check_fields(self, fields: Sequence[FieldDescriptor]) -> None:
        """Hook for variants with extra requirements on the field set."""

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(descriptor.name for descriptor in self.fields)

    @property
    def value_field_names(self) -> tuple[str, ...]:
        """Fields that may be written by create/update (the key excluded)."""
        return tuple(name for name in self.field_names if name != self.key_field)

    def transaction(self, connection: AsyncConnection | None = None):
        """
        Usage:
            async with users.transaction() as conn:
                user = await users.create_one({...}, connection=conn)
                await users.update_one({"key": user["key"]}, {...}, connection=conn)

        Commits when the block succeeds, rolls back when it raises. Passing an
        open `connection` joins the caller's transaction through a savepoint.
        """
        return open_transaction(self.engine, connection)

    # =================================================================================================================
    # Logging
    # =================================================================================================================

    @asynccontextmanager
    async def _logged(self, operation: str, **extra) -> AsyncIterator[dict[str, Any]]:
        """
        Log the start, outcome and duration of an operation.

        The body may put result facts (e.g. row counts) into the yielded dict;
        they are added to the success event.
        """
        context = {"table": self.table_name, "operation": operation, **extra}
        logger.debug(f"model.{operation}.start", extra=context)

        start = time.perf_counter()
        outcome: dict[str, Any] = {}
        try:
            yield outcome
        except _EXPECTED_ERRORS as exc:
            # INFO: client-level outcome, no stack trace
            logger.info(f"model.{operation}.{exc.error_code}", extra={**context, "fields": exc.fields})
            raise
        except ProgrammerError as exc:
            logger.warning(
                f"model.{operation}.programmer_error",
                extra={**context, "error": exc.message, "fields": exc.fields},
            )
            raise
        except Exception:
            logger.exception(f"model.{operation}.unexpected_error", extra=context)
            raise

        duration_ms = int((time.perf_counter() - start) * 1000)
        logger.info(f"model.{operation}.success", extra={**context, **outcome, "duration_ms": duration_ms})

    # =================================================================================================================
    # Statement building (no I/O)
    # =================================================================================================================

    def _check_known_fields(self, names: Iterable[str]) -> None:
        unknown = [name for name in names if name not in self.field_names]
        if unknown:
            raise ProgrammerError(
                f'Unknown field(s) for "{self.table_name}": {", ".join(map(str, unknown))}',
                fields=unknown,
            )

    def _columns(self, fields: Sequence[str] | None) -> tuple:
        """Columns an operation returns: all of them unless `fields` names a subset."""
        if fields is None:
            return tuple(self.table.c)
        if isinstance(fields, str) or not fields:
            raise ProgrammerError("`fields` must be a non-empty sequence of field names.")
        self._check_known_fields(fields)
        return tuple(self.table.c[name] for name in fields)

    def _where(self, query: Any, validate: bool) -> ColumnElement[bool]:
        if validate:
            check_filter_values(query)
            self.schemas.query.validate(query)
        return compile_query(self.table, query)

    def _build_insert(self, values_list: Any, validate: bool, fields: Sequence[str] | None = None):
        if not isinstance(values_list, (list, tuple)):
            raise ProgrammerError("create expects a list of value mappings.")

        rows = []
        for values in values_list:
            if validate:
                self.schemas.create.validate(values)
            elif isinstance(values, Mapping):
                self._check_known_fields(values)
            else:
                raise ProgrammerError(f"Values must be a mapping, got {type(values).__name__}.")
            rows.append(dict(values))

        statement = insert(self.table).returning(*self._columns(fields), sort_by_parameter_order=True)
        return statement, rows

    def _build_select(
        self,
        query: Any,
        validate: bool,
        order_by: Iterable[OrderBy | tuple[str, str]] | None = None,
        limit: int | None = None,
        offset: int | None = None,
        fields: Sequence[str] | None = None,
    ):
        statement = select(*self._columns(fields)).where(self._where(query, validate))
        statement = apply_order_by(statement, self.table, order_by)
        if limit is not None:
            statement = statement.limit(_non_negative("limit", limit))
        if offset is not None:
            statement = statement.offset(_non_negative("offset", offset))
        return statement

    def _build_count(self, query: Any, validate: bool):
        return select(func.count()).select_from(self.table).where(self._where(query, validate))

    def _build_update(
        self,
        query: Any,
        values: Any,
        validate_query: bool,
        validate_values: bool,
        fields: Sequence[str] | None = None,
    ):
        if validate_values:
            self.schemas.update.validate(values)
        elif not isinstance(values, Mapping):
            raise ProgrammerError(f"Values must be a mapping, got {type(values).__name__}.")
        else:
            self._check_known_fields(values)
        if not values:
            raise ProgrammerError("No values have been passed for the update.")

        where = self._where(query, validate_query)
        return update(self.table).where(where).values(dict(values)).returning(*self._columns(fields))

    def _build_delete(self, query: Any, validate: bool, fields: Sequence[str] | None = None):
        return delete(self.table).where(self._where(query, validate)).returning(*self._columns(fields))

    # =================================================================================================================
    # Execution
    # =================================================================================================================

    async def _insert(self, conn: AsyncConnection, statement, rows: list[Entity]) -> list[Entity]:
        if not rows:
            return []
        values_hint = rows[0] if len(rows) == 1 else None
        async with translate_integrity_errors(self.table_name, values_hint):
            result = await conn.execute(statement, rows)
        return [dict(row) for row in result.mappings().all()]

    async def _fetch(self, conn: AsyncConnection, statement, values_hint: Mapping[str, Any] | None = None) -> list[Entity]:
        async with translate_integrity_errors(self.table_name, values_hint):
            result = await conn.execute(statement)
        return [dict(row) for row in result.mappings().all()]

    @staticmethod
    def _expect_one(entities: list[Entity]) -> Entity:
        if not entities:
            raise EntityNotFoundError()
        if len(entities) > 1:
            raise MultipleEntitiesFoundError()
        return entities[0]

    # =================================================================================================================
    # Create
    # =================================================================================================================

    async def create(
        self,
        values_list: Sequence[Mapping[str, Any]],
        *,
        connection: AsyncConnection | None = None,
        validate: bool = True,
        fields: Sequence[str] | None = None,
    ) -> list[Entity]:
        """
        Insert every element of `values_list` in one statement.

        Returns:
            The created rows, in the order of `values_list`.

        Raises:
            ValidationError: an element does not match the create schema
            EntityExistsError: a unique constraint was violated
        """
        async with self._logged("create") as outcome:
            statement, rows = self._build_insert(values_list, validate, fields)
            outcome["provided_keys"] = sorted({key for row in rows for key in row})
            async with self.transaction(connection) as conn:
                entities = await self._insert(conn, statement, rows)
            outcome["rows"] = len(entities)
            return entities

    async def create_one(
        self,
        values: Mapping[str, Any],
        *,
        connection: AsyncConnection | None = None,
        validate: bool = True,
        fields: Sequence[str] | None = None,
    ) -> Entity:
        async with self._logged("create_one", provided_keys=_keys(values)):
            statement, rows = self._build_insert([values], validate, fields)
            async with self.transaction(connection) as conn:
                return self._expect_one(await self._insert(conn, statement, rows))

    # =================================================================================================================
    # Read
    # =================================================================================================================

    async def find(
        self,
        query: Any,
        *,
        connection: AsyncConnection | None = None,
        validate: bool = True,
        order_by: Iterable[OrderBy | tuple[str, str]] | None = None,
        limit: int | None = None,
        offset: int | None = None,
        fields: Sequence[str] | None = None,
    ) -> list[Entity]:
        """
        Return every row matching `query` (possibly none).

        `order_by` clauses are applied in the given sequence; `limit` and
        `offset` are applied when not None. `fields` limits the returned
        columns to the named fields.
        """
        async with self._logged("find") as outcome:
            statement = self._build_select(query, validate, order_by, limit, offset, fields)
            async with self.transaction(connection) as conn:
                entities = await self._fetch(conn, statement)
            outcome["rows"] = len(entities)
            return entities

    async def find_one(
        self,
        query: Any,
        *,
        connection: AsyncConnection | None = None,
        validate: bool = True,
        fields: Sequence[str] | None = None,
    ) -> Entity:
        async with self._logged("find_one"):
            statement = self._build_select(query, validate, fields=fields)
            async with self.transaction(connection) as conn:
                return self._expect_one(await self._fetch(conn, statement))

    async def count(
        self,
        query: Any,
        *,
        connection: AsyncConnection | None = None,
        validate: bool = True,
    ) -> int:
        async with self._logged("count") as outcome:
            statement = self._build_count(query, validate)
            async with self.transaction(connection) as conn:
                result = await conn.execute(statement)
                total = int(result.scalar_one())
            outcome["count"] = total
            return total

    # =================================================================================================================
    # Update
    # =================================================================================================================

    async def update(
        self,
        query: Any,
        values: Mapping[str, Any],
        *,
        connection: AsyncConnection | None = None,
        validate_query: bool = True,
        validate_values: bool = True,
        fields: Sequence[str] | None = None,
    ) -> list[Entity]:
        """
        Apply `values` to every row matching `query`.

        The query and the values are validated independently; either check can
        be turned off on its own.

        Returns:
            The updated rows.
        """
        async with self._logged("update", provided_keys=_keys(values)) as outcome:
            statement = self._build_update(query, values, validate_query, validate_values, fields)
            async with self.transaction(connection) as conn:
                entities = await self._fetch(conn, statement, values)
            outcome["rows"] = len(entities)
            return entities

    async def update_one(
        self,
        query: Any,
        values: Mapping[str, Any],
        *,
        connection: AsyncConnection | None = None,
        validate_query: bool = True,
        validate_values: bool = True,
        fields: Sequence[str] | None = None,
    ) -> Entity:
        async with self._logged("update_one", provided_keys=_keys(values)):
            statement = self._build_update(query, values, validate_query, validate_values, fields)
            async with self.transaction(connection) as conn:
                return self._expect_one(await self._fetch(conn, statement, values))

    # =================================================================================================================
    # Delete
    # =================================================================================================================

    async def destroy(
        self,
        query: Any,
        *,
        connection: AsyncConnection | None = None,
        validate: bool = True,
        fields: Sequence[str] | None = None,
    ) -> list[Entity]:
        """Delete every row matching `query` and return the deleted rows."""
        async with self._logged("destroy") as outcome:
            statement = self._build_delete(query, validate, fields)
            async with self.transaction(connection) as conn:
                entities = await self._fetch(conn, statement)
            outcome["rows"] = len(entities)
            return entities

    async def destroy_one(
        self,
        query: Any,
        *,
        connection: AsyncConnection | None = None,
        validate: bool = True,
        fields: Sequence[str] | None = None,
    ) -> Entity:
        async with self._logged("destroy_one"):
            statement = self._build_delete(query, validate, fields)
            async with self.transaction(connection) as conn:
                return self._expect_one(await self._fetch(conn, statement))


def _keys(values: Any) -> list[str] | None:
    # keys only, never values
    if isinstance(values, Mapping):
        return sorted(str(key) for key in values)
    return None


def _non_negative(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise ProgrammerError(f'"{name}" must be a non-negative integer, got {value!r}.')
    return value
