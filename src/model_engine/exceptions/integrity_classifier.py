"""
Classification of backend integrity errors.

SQLAlchemy raises a single `IntegrityError` for every constraint violation; the
driver error behind it (`exc.orig`) carries the details. This module decides
which kind of constraint failed and extracts the diagnostics the mapper needs:
    - Postgres drivers expose a SQLSTATE code and structured diagnostics
      (psycopg: `orig.diag`, asyncpg: the wrapped exception in `orig.__cause__`).
    - SQLite and others only expose a message, so we fall back to keywords.

The result is an internal tag; callers only ever see the app-level errors
raised by `mapper.py`.
"""
import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ConstraintViolation(str, Enum):
    UNIQUE = "unique"
    NOT_NULL = "not_null"
    FOREIGN_KEY = "foreign_key"
    CHECK = "check"
    UNKNOWN = "unknown"


# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"


PGCODE_VIOLATION_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION.value: ConstraintViolation.UNIQUE,
    PostgresErrorCodes.NOT_NULL_VIOLATION.value: ConstraintViolation.NOT_NULL,
    PostgresErrorCodes.FOREIGN_KEY_VIOLATION.value: ConstraintViolation.FOREIGN_KEY,
    PostgresErrorCodes.CHECK_VIOLATION.value: ConstraintViolation.CHECK,
}


@dataclass(frozen=True)
class IntegrityDiagnostics:
    """Structured backend diagnostics; any attribute may be missing."""

    code: str | None = None
    detail: str | None = None
    constraint: str | None = None
    table: str | None = None
    message: str = ""


def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def extract_diagnostics(exc: IntegrityError) -> IntegrityDiagnostics:
    """
    Collect code, detail, constraint and table name from whichever driver raised.
    """
    orig = exc.orig
    message = str(orig) if orig is not None else str(exc)

    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    detail = constraint = table = None

    # psycopg / psycopg2
    diag = getattr(orig, "diag", None)
    if diag is not None:
        detail = getattr(diag, "message_detail", None)
        constraint = getattr(diag, "constraint_name", None)
        table = getattr(diag, "table_name", None)

    # asyncpg (wrapped by SQLAlchemy's adapter)
    cause = getattr(orig, "__cause__", None)
    if cause is not None:
        code = code or getattr(cause, "sqlstate", None)
        detail = detail or getattr(cause, "detail", None)
        constraint = constraint or getattr(cause, "constraint_name", None)
        table = table or getattr(cause, "table_name", None)

    return IntegrityDiagnostics(code=code, detail=detail, constraint=constraint, table=table, message=message)


def _classify_from_code(diagnostics: IntegrityDiagnostics) -> ConstraintViolation | None:
    if not diagnostics.code:
        return None

    violation = PGCODE_VIOLATION_MAP.get(diagnostics.code)
    if violation is not None:
        logger.debug(
            "Postgres integrity diagnostic",
            extra={"pgcode": diagnostics.code, "constraint_name": diagnostics.constraint},
        )
        return violation

    logger.warning(
        "Unknown Postgres integrity error code encountered",
        extra={"pgcode": diagnostics.code, "constraint_name": diagnostics.constraint},
    )
    return ConstraintViolation.UNKNOWN


def _classify_from_generic_message(msg: str) -> ConstraintViolation:
    normalized = msg.lower()

    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate"]):
        return ConstraintViolation.UNIQUE

    if _match_any(normalized, ["not null constraint", "not null", "null value in column"]):
        return ConstraintViolation.NOT_NULL

    if _match_any(normalized, ["foreign key constraint", "foreign key", "is not present in table"]):
        return ConstraintViolation.FOREIGN_KEY

    if _match_any(normalized, ["check constraint", "check failed"]):
        return ConstraintViolation.CHECK

    logger.warning("Unknown integrity error message encountered", extra={"message_snippet": (msg or "")[:200]})
    return ConstraintViolation.UNKNOWN


def classify_integrity_error(exc: IntegrityError) -> tuple[ConstraintViolation, IntegrityDiagnostics]:
    """
    Classify a SQLAlchemy IntegrityError.

    Returns:
        A tuple of (ConstraintViolation, IntegrityDiagnostics)
    """
    diagnostics = extract_diagnostics(exc)

    violation = _classify_from_code(diagnostics)
    if violation is not None:
        return violation, diagnostics

    return _classify_from_generic_message(diagnostics.message), diagnostics
