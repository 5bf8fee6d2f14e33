"""
Field descriptors: the value shape of a single table field.

A descriptor is plain data. The same descriptor produces the SQLAlchemy column
type the statements are typed with and the pydantic annotation the derived
validation schemas check values against.
"""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Callable, Literal, Optional

from pydantic import AfterValidator, Field
from sqlalchemy import JSON, Boolean, DateTime, Integer, Numeric, String
from sqlalchemy.types import TypeEngine


class FieldKind(str, Enum):
    BOOLEAN = "boolean"
    INTEGER = "integer"
    STRING = "string"
    DECIMAL = "decimal"
    TIMESTAMP = "timestamp"
    OBJECT = "object"


_PYTHON_TYPES: dict[FieldKind, Any] = {
    FieldKind.BOOLEAN: bool,
    FieldKind.INTEGER: int,
    FieldKind.STRING: str,
    FieldKind.DECIMAL: Decimal,
    FieldKind.TIMESTAMP: datetime,
}


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Describes one field of a table.

    Constraints that do not apply to the kind are ignored
    (e.g. `max_length` on an INTEGER field).
    """

    name: str
    kind: FieldKind
    nullable: bool = False
    max_length: int | None = None
    min_length: int | None = None
    minimum: int | Decimal | None = None
    maximum: int | Decimal | None = None
    pattern: str | None = None
    choices: tuple[Any, ...] | None = None
    unique: bool = False
    # value shape of the entries of an OBJECT field
    value_descriptor: Optional["FieldDescriptor"] = None
    # extra predicate run after type validation; raise ValueError to reject
    check: Callable[[Any], Any] | None = field(default=None, compare=False)

    # --- pydantic side ---

    def base_annotation(self) -> Any:
        """Annotation for a single non-null value of this field."""
        if self.choices:
            annotation: Any = Literal[self.choices]
        elif self.kind is FieldKind.OBJECT:
            value = self.value_descriptor.annotation() if self.value_descriptor else Any
            annotation = dict[Annotated[str, Field(min_length=1)], value]
        else:
            annotation = _PYTHON_TYPES[self.kind]

        constraints: dict[str, Any] = {}
        if self.kind is FieldKind.STRING and not self.choices:
            if self.max_length is not None:
                constraints["max_length"] = self.max_length
            if self.min_length is not None:
                constraints["min_length"] = self.min_length
            if self.pattern is not None:
                constraints["pattern"] = self.pattern
        if self.kind in (FieldKind.INTEGER, FieldKind.DECIMAL) and not self.choices:
            if self.minimum is not None:
                constraints["ge"] = self.minimum
            if self.maximum is not None:
                constraints["le"] = self.maximum

        metadata: list[Any] = []
        if constraints:
            metadata.append(Field(**constraints))
        if self.check is not None:
            metadata.append(AfterValidator(self.check))
        if metadata:
            annotation = Annotated[(annotation, *metadata)]
        return annotation

    def annotation(self) -> Any:
        """Annotation for a stored value of this field, null included when allowed."""
        base = self.base_annotation()
        return Optional[base] if self.nullable else base

    # --- SQLAlchemy side ---

    def sa_type(self) -> TypeEngine:
        if self.kind is FieldKind.BOOLEAN:
            return Boolean()
        if self.kind is FieldKind.INTEGER:
            return Integer()
        if self.kind is FieldKind.STRING:
            return String(self.max_length)
        if self.kind is FieldKind.DECIMAL:
            return Numeric(asdecimal=True)
        if self.kind is FieldKind.TIMESTAMP:
            return DateTime(timezone=True)
        return JSON()
