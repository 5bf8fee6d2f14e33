"""
Logging filters.

CorrelationIdFilter stamps every LogRecord with the correlation id of the
current context so the log lines of one logical unit of work (a request, a
job, a batch of Model calls) can be grouped. The id lives in a ContextVar, so
it follows the code across `await` boundaries and stays isolated between
concurrent tasks.

    token = set_correlation_id("job-42")
    try:
        await users.create_one({...})      # logged with correlation_id="job-42"
    finally:
        reset_correlation_id(token)

RedactFilter masks sensitive `extra` attributes before any handler sees them.
"""
import logging
from logging import LogRecord
import contextvars

_correlation_id_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


def set_correlation_id(correlation_id: str | None) -> contextvars.Token:
    """
    Set the correlation id of the current context.

    Returns:
        token: pass it to reset_correlation_id() to restore the previous id
    """
    return _correlation_id_ctx.set(correlation_id)


def reset_correlation_id(token: contextvars.Token) -> None:
    _correlation_id_ctx.reset(token)


def get_correlation_id() -> str | None:
    return _correlation_id_ctx.get()


class CorrelationIdFilter(logging.Filter):
    """
    Guarantee every LogRecord has a `correlation_id` attribute.

    An id passed explicitly through `extra` wins, then the context id, then "-".
    Always returns True.
    """

    def filter(self, record: LogRecord) -> bool:
        record.correlation_id = (
            getattr(record, "correlation_id", None) or get_correlation_id() or "-"
        )
        return True


class RedactFilter(logging.Filter):
    SENSITIVE = {"password", "secret", "token", "access_token", "refresh_token", "ssn", "authorization"}
    MASK = "***REDACTED***"

    def filter(self, record: LogRecord) -> bool:
        for key in list(record.__dict__.keys()):
            if key.lower() in self.SENSITIVE:
                record.__dict__[key] = self.MASK
        return True
