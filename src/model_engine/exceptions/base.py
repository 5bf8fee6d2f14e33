"""
Custom exceptions raised by the Model engine.

Every error the engine raises on its own behalf derives from `ModelError`.
Backend errors that are not unique-constraint violations are never wrapped:
they reach the caller unchanged.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping


@dataclass(frozen=True)
class ErrorItem:
    """A single violation attached to a field path."""

    value: Any
    type: str
    message: str


# canonical model-level exception

class ModelError(Exception):
    """
    Base exception for Model engine errors.

    - message: human-friendly message (safe to show to clients)
    - fields: optional list of field names related to the error (e.g., ['name'])
    - constraint: optional DB constraint name or identifier (for logs only)
    - error_code: canonical short code (e.g., 'duplicate', 'invalid_input') used by clients
    """

    # Map canonical error_code -> default HTTP status.
    ERROR_CODE_TO_STATUS = {
        "duplicate": 409,
        "invalid_input": 422,
        "not_found": 404,
        "multiple_found": 409,
        "configuration": 500,
        "programmer_error": 500,
    }

    def __init__(self, message: str, *, fields: Iterable[str] | None = None,
                 constraint: str | None = None, error_code: str | None = None):
        super().__init__(message)
        self.message = message
        self.fields = list(fields) if fields else None
        self.constraint = constraint
        self.error_code = error_code

    def __str__(self) -> str:
        base = self.message
        parts = []
        if self.fields:
            parts.append(f"fields: {', '.join(self.fields)}")
        if self.constraint:
            parts.append(f"constraint: {self.constraint}")
        if self.error_code:
            parts.append(f"code: {self.error_code}")
        if parts:
            return f"{base} ({'; '.join(parts)})"
        return base

    def to_payload(self) -> dict:
        """
        Return a JSON-serializable dict describing the error.
        Standard shape:
            {
                "detail": "A human-friendly message",
                "code": "duplicate",           # optional canonical code
                "fields": ["name"],            # optional list for client usage
            }
        The constraint name is left out on purpose.
        """
        payload: dict[str, Any] = {"detail": self.message}
        if self.error_code:
            payload["code"] = self.error_code
        if self.fields:
            payload["fields"] = list(self.fields)
        return payload

    def http_status(self) -> int:
        """
        Return the HTTP status code that should accompany this error, 400 when
        the error_code is unknown or missing.
        """
        if self.error_code:
            return self.ERROR_CODE_TO_STATUS.get(self.error_code, 400)
        return 400


class ConfigurationError(ModelError):
    """Raised at construction time when a model definition is unusable."""

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="configuration")


class ProgrammerError(ModelError):
    """
    Raised when the caller passes an input that can only be a bug on their side,
    e.g. an empty array or the UNSET sentinel as a query filter value.
    Always raised before any I/O.
    """

    def __init__(self, message: str, *, fields: Iterable[str] | None = None):
        super().__init__(message, fields=fields, error_code="programmer_error")


class ValidationError(ModelError):
    """
    The submitted input failed schema validation.

    - value: the original value that was validated
    - details: field path -> ordered list of ErrorItem ("" is the input as a whole)
    """

    def __init__(self, value: Any, details: Mapping[str, list[ErrorItem]],
                 message: str = "The submitted input failed to pass the required validation tests"):
        fields = [path for path in details if path]
        super().__init__(message, fields=fields, error_code="invalid_input")
        self.value = value
        self.details = dict(details)

    def to_payload(self) -> dict:
        payload = super().to_payload()
        payload["errors"] = {
            path: [{"type": item.type, "message": item.message} for item in items]
            for path, items in self.details.items()
        }
        return payload


class EntityExistsError(ModelError):
    """A unique constraint was violated by the submitted values."""

    def __init__(self, table: str, fields: Iterable[str] | None = None,
                 values: Iterable[str] | None = None, *, constraint: str | None = None):
        self.table = table
        self.values = list(values) if values else None
        super().__init__(
            "An entity already exists with the submitted unique field values",
            fields=fields,
            constraint=constraint,
            error_code="duplicate",
        )
        self.details = self._build_details()

    def _build_details(self) -> dict[str, list[ErrorItem]]:
        if not self.fields:
            return {}

        quoted_fields = ", ".join(f'"{self.table}.{field}"' for field in self.fields)
        plural = "s" if len(self.fields) > 1 else ""
        if self.values:
            quoted_values = ", ".join(f"'{value}'" for value in self.values)
            message = (
                f'A "{self.table}" entity already exists with the same value {quoted_values}'
                f" in the {quoted_fields} field{plural}"
            )
        else:
            quoted_values = None
            message = f'A "{self.table}" entity already exists with the same value in the {quoted_fields} field{plural}'

        return {
            field: [ErrorItem(value=quoted_values, type="any.db_unique_constraint", message=message)]
            for field in self.fields
        }


class EntityNotFoundError(ModelError):
    def __init__(self):
        super().__init__("No entity exists that matches the submitted query", error_code="not_found")


class MultipleEntitiesFoundError(ModelError):
    def __init__(self):
        super().__init__("Multiple entities exist that match the submitted query", error_code="multiple_found")


__all__ = [
    "ErrorItem",
    "ModelError",
    "ConfigurationError",
    "ProgrammerError",
    "ValidationError",
    "EntityExistsError",
    "EntityNotFoundError",
    "MultipleEntitiesFoundError",
]
