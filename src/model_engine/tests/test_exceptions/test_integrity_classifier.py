from sqlalchemy.exc import IntegrityError

from model_engine.exceptions import ConstraintViolation, classify_integrity_error


class FakeDiag:
    def __init__(self, detail=None, constraint=None, table=None):
        self.message_detail = detail
        self.constraint_name = constraint
        self.table_name = table


class FakePsycopgError(Exception):
    def __init__(self, message, sqlstate=None, diag=None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.diag = diag


class FakeAsyncpgError(Exception):
    def __init__(self, message, sqlstate, detail=None, constraint=None, table=None):
        super().__init__(message)
        self.sqlstate = sqlstate
        self.detail = detail
        self.constraint_name = constraint
        self.table_name = table


def make_integrity_error(orig) -> IntegrityError:
    return IntegrityError("INSERT INTO users ...", {}, orig)


def test_psycopg_unique_violation():
    orig = FakePsycopgError(
        "duplicate key value violates unique constraint",
        sqlstate="23505",
        diag=FakeDiag("Key (name)=(a) already exists.", "uq_users_name", "users"),
    )

    violation, diagnostics = classify_integrity_error(make_integrity_error(orig))

    assert violation is ConstraintViolation.UNIQUE
    assert diagnostics.detail == "Key (name)=(a) already exists."
    assert diagnostics.constraint == "uq_users_name"
    assert diagnostics.table == "users"


def test_asyncpg_wrapped_error():
    cause = FakeAsyncpgError("not null", "23502", table="users")
    orig = Exception("adapted asyncpg error")
    orig.__cause__ = cause

    violation, diagnostics = classify_integrity_error(make_integrity_error(orig))

    assert violation is ConstraintViolation.NOT_NULL
    assert diagnostics.code == "23502"
    assert diagnostics.table == "users"


def test_unknown_code():
    orig = FakePsycopgError("exclusion", sqlstate="23P01")
    violation, _ = classify_integrity_error(make_integrity_error(orig))
    assert violation is ConstraintViolation.UNKNOWN


def test_sqlite_messages():
    cases = {
        "UNIQUE constraint failed: users.name": ConstraintViolation.UNIQUE,
        "NOT NULL constraint failed: users.name": ConstraintViolation.NOT_NULL,
        "FOREIGN KEY constraint failed": ConstraintViolation.FOREIGN_KEY,
        "CHECK constraint failed: positive_weight": ConstraintViolation.CHECK,
        "something else entirely": ConstraintViolation.UNKNOWN,
    }
    for message, expected in cases.items():
        violation, diagnostics = classify_integrity_error(make_integrity_error(Exception(message)))
        assert violation is expected, message
        assert diagnostics.message == message
