"""
Compile parsed queries into SQLAlchemy filter clauses.

    query        -> OR of its items (false() when there are none)
    item         -> AND of its conditions (true() when there are none)
    condition    -> IN / NOT IN for arrays, = / <> for scalars,
                    IS NULL / IS NOT NULL for None
"""
from typing import Any, Iterable, NamedTuple, Sequence

from sqlalchemy import ColumnElement, Select, Table, and_, false, or_, true

from ..exceptions import ProgrammerError
from .items import ARRAY_TYPES, Condition, check_filter_value, parse_query

ORDER_DIRECTIONS = ("asc", "desc")


class OrderBy(NamedTuple):
    field: str
    direction: str = "asc"


def get_column(table: Table, name: str):
    try:
        return table.c[name]
    except KeyError:
        raise ProgrammerError(f'"{name}" is not a field of "{table.name}".', fields=[name]) from None


def compile_condition(table: Table, condition: Condition) -> ColumnElement[bool]:
    column = get_column(table, condition.field)
    value = condition.value
    check_filter_value(value)

    if isinstance(value, ARRAY_TYPES):
        values = list(value)
        return column.not_in(values) if condition.negated else column.in_(values)
    if value is None:
        return column.is_not(None) if condition.negated else column.is_(None)
    return column != value if condition.negated else column == value


def compile_query_item(table: Table, conditions: Sequence[Condition]) -> ColumnElement[bool]:
    if not conditions:
        return true()
    return and_(*(compile_condition(table, condition) for condition in conditions))


def compile_query(table: Table, query: Any) -> ColumnElement[bool]:
    """
    Build the WHERE clause for `query` against `table`.

    Raises:
        ProgrammerError: empty array, unset value, unknown field or a query
            item that is not a mapping.
    """
    items = parse_query(query)
    if not items:
        return false()
    return or_(*(compile_query_item(table, conditions) for conditions in items))


def apply_order_by(statement: Select, table: Table, order_by: Iterable[OrderBy | tuple[str, str]] | None) -> Select:
    """Apply ordering clauses in the given sequence."""
    if not order_by:
        return statement

    for entry in order_by:
        field, direction = OrderBy(*entry)
        direction = str(direction).lower()
        if direction not in ORDER_DIRECTIONS:
            raise ProgrammerError(f'Invalid order direction "{direction}" for "{field}".', fields=[field])
        column = get_column(table, field)
        statement = statement.order_by(column.asc() if direction == "asc" else column.desc())
    return statement
