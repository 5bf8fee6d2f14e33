"""
Query item parsing.

A query item is a mapping of field names to filter values. A key prefixed with
`!` negates the filter on that field:

    {"name": "a"}                 name = 'a'
    {"!name": ["a", "b"]}         name NOT IN ('a', 'b')
    [{"name": "a"}, {"key": 2}]   name = 'a' OR key = 2

Items are parsed once into Condition records so the compiler never looks at
the prefix again.
"""
from dataclasses import dataclass
from typing import Any, Mapping

from ..exceptions import ProgrammerError
from ..schema.derivation import NEGATION_PREFIX

ARRAY_TYPES = (list, tuple, set, frozenset)


class _Unset:
    """Marker for a filter value that was never given one."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


@dataclass(frozen=True)
class Condition:
    field: str
    negated: bool
    value: Any


def check_filter_value(value: Any) -> None:
    """
    Raises:
        ProgrammerError: for an empty array or an unset value, array elements included.
    """
    if isinstance(value, ARRAY_TYPES):
        if not value:
            raise ProgrammerError("An empty array has been passed.")
        if any(element is UNSET for element in value):
            raise ProgrammerError("An undefined value has been passed.")
    elif value is UNSET:
        raise ProgrammerError("An undefined value has been passed.")


def check_filter_values(query: Any) -> None:
    """
    Run check_filter_value over every value of a query.

    Malformed shapes are skipped here; reporting them is the job of the query schema.
    """
    items = query if isinstance(query, (list, tuple)) else [query]
    for item in items:
        if isinstance(item, Mapping):
            for value in item.values():
                check_filter_value(value)


def parse_query_item(item: Any) -> tuple[Condition, ...]:
    if not isinstance(item, Mapping):
        raise ProgrammerError(f"A query item must be a mapping, got {type(item).__name__}.")

    conditions = []
    for key, value in item.items():
        if not isinstance(key, str):
            raise ProgrammerError(f"A query field name must be a string, got {type(key).__name__}.", fields=[str(key)])
        check_filter_value(value)
        if key.startswith(NEGATION_PREFIX):
            conditions.append(Condition(key[len(NEGATION_PREFIX):], True, value))
        else:
            conditions.append(Condition(key, False, value))
    return tuple(conditions)


def parse_query(query: Any) -> tuple[tuple[Condition, ...], ...]:
    """
    Parse a query into a disjunction of conjunctions.

    A single mapping is a one-item disjunction, a list an n-item one; an empty
    list is an empty disjunction and matches nothing.
    """
    if isinstance(query, (list, tuple)):
        return tuple(parse_query_item(item) for item in query)
    return (parse_query_item(query),)
