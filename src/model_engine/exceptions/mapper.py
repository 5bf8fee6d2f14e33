"""
Translate backend and schema failures into Model engine errors.

    - unique constraint violations -> EntityExistsError (per-field detail)
    - pydantic validation failures -> ValidationError (path-keyed detail)

Any other backend error is re-raised untouched.
"""
import re
import logging
from contextlib import asynccontextmanager
from typing import Any, Iterable, Mapping

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError

from .base import EntityExistsError, ErrorItem, ValidationError
from .integrity_classifier import ConstraintViolation, IntegrityDiagnostics, classify_integrity_error

logger = logging.getLogger(__name__)

# Postgres: 'Key (email, name)=(a@b.com, a) already exists.'
_POSTGRES_UNIQUE_DETAIL = re.compile(r"Key \((?P<fields>.*)\)=\((?P<values>.*)\) already exists\.", flags=re.IGNORECASE)
# SQLite: 'UNIQUE constraint failed: users.email, users.name'
_SQLITE_UNIQUE_MESSAGE = re.compile(r"UNIQUE constraint failed: (?P<cols>[^\n]+)", flags=re.IGNORECASE)


# -----------------------
# Unique violation parsing
# -----------------------

def parse_unique_violation_detail(detail: str | None) -> tuple[list[str], list[str]] | None:
    """
    Parse the Postgres detail text `Key (<fields>)=(<values>) already exists.`

    Returns (fields, values) or None when the text does not have that shape.
    """
    if not detail:
        return None

    m = _POSTGRES_UNIQUE_DETAIL.search(detail)
    if not m:
        return None

    fields = [f.strip().strip('"') for f in m.group("fields").split(", ")]
    values = m.group("values").split(", ")
    return fields, values


def _parse_sqlite_unique_message(msg: str) -> list[str] | None:
    m = _SQLITE_UNIQUE_MESSAGE.search(msg)
    if not m:
        return None
    return [c.split(".")[-1].strip() for c in re.split(r",\s*", m.group("cols").strip())]


def build_entity_exists_error(
    diagnostics: IntegrityDiagnostics,
    table: str,
    values_hint: Mapping[str, Any] | None = None,
) -> EntityExistsError:
    """
    Build an EntityExistsError from backend diagnostics.

    `values_hint` is the single row that was written, if known; it fills in the
    conflicting values when the backend only reports the column names.
    """
    parsed = parse_unique_violation_detail(diagnostics.detail) or parse_unique_violation_detail(diagnostics.message)
    if parsed:
        fields, values = parsed
    else:
        fields = _parse_sqlite_unique_message(diagnostics.message) or []
        values = None
        if fields and values_hint is not None and all(f in values_hint for f in fields):
            values = [str(values_hint[f]) for f in fields]

    return EntityExistsError(
        diagnostics.table or table,
        fields=fields,
        values=values,
        constraint=diagnostics.constraint,
    )


@asynccontextmanager
async def translate_integrity_errors(table: str, values_hint: Mapping[str, Any] | None = None):
    """
    Usage:
        async with translate_integrity_errors(self.table_name):
            ... statement that may violate a unique constraint ...

    Unique violations become EntityExistsError; everything else propagates unchanged.
    Rolling back is left to whoever owns the transaction.
    """
    try:
        yield
    except IntegrityError as exc:
        violation, diagnostics = classify_integrity_error(exc)
        if violation is not ConstraintViolation.UNIQUE:
            raise

        error = build_entity_exists_error(diagnostics, table, values_hint)
        # INFO: duplicates are an expected client-level outcome
        logger.info(
            "mapper.duplicate_detected",
            extra={"table": error.table, "fields": error.fields, "constraint": error.constraint},
        )
        raise error from exc


# -----------------------
# Schema validation parsing
# -----------------------

_MISSING = object()


def _resolve(value: Any, path: Iterable[str | int]) -> Any:
    current = value
    for part in path:
        if isinstance(current, Mapping) and part in current:
            current = current[part]
        elif isinstance(current, (list, tuple)) and isinstance(part, int) and 0 <= part < len(current):
            current = current[part]
        else:
            return _MISSING
    return current


def _normalize_loc(loc: tuple, known_keys: set[str] | None) -> tuple[str | int, ...]:
    """
    Keep the parts of a pydantic error location that address the input itself.
    Union member tags such as 'int' or 'list[int]' end the path; a key at the
    top level or right after a list index is always kept (unknown keys).
    """
    parts: list[str | int] = []
    for index, part in enumerate(loc):
        key_position = index == 0 or isinstance(loc[index - 1], int)
        if isinstance(part, int) or known_keys is None or part in known_keys or key_position:
            parts.append(part)
        else:
            break
    return tuple(parts)


def parse_validation_error(
    exc: PydanticValidationError,
    value: Any,
    known_keys: set[str] | None = None,
) -> dict[str, list[ErrorItem]]:
    """
    Parse a pydantic ValidationError into `{path: [ErrorItem, ...]}`.

    The path is the dot-joined location inside `value` ("" for the value as a
    whole). When the location cannot be resolved against `value` (for instance a
    missing required field), the whole input is attached instead of a sub-value.
    """
    details: dict[str, list[ErrorItem]] = {}
    for error in exc.errors():
        loc = _normalize_loc(tuple(error.get("loc", ())), known_keys)
        path = ".".join(str(part) for part in loc)

        resolved = _resolve(value, loc)
        item = ErrorItem(
            value=value if resolved is _MISSING else resolved,
            type=error["type"],
            message=error["msg"],
        )
        details.setdefault(path, []).append(item)
    return details


def raise_mapped_validation_error(
    exc: PydanticValidationError,
    value: Any,
    known_keys: set[str] | None = None,
) -> None:
    details = parse_validation_error(exc, value, known_keys)
    raise ValidationError(value, details) from exc
