"""
Validation schema derivation.

Given the ordered field descriptors of a table this module derives three
immutable schemas:

    create  - every non-key field required
    update  - every non-key field optional
    query   - for every field `f`, the mutually exclusive keys `f` and `!f`,
              each accepting a value or a non-empty list of values; the query
              itself is one such item or a list of them

All schemas are strict (no type coercion), reject unknown keys and report every
violation rather than stopping at the first one.

Field names are never used as pydantic attribute names: each field is stored
under a generated attribute with the real name as its alias, so table fields
may be called anything (`key`, `model_config`, `!name` ...).
"""
from dataclasses import dataclass
from typing import Any, Annotated, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, create_model, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from ..exceptions.mapper import raise_mapped_validation_error
from .fields import FieldDescriptor

NEGATION_PREFIX = "!"

_SCHEMA_CONFIG = ConfigDict(strict=True, extra="forbid", populate_by_name=False)


class ValuesSchema:
    """Validates a mapping of field values (create or update)."""

    def __init__(self, model: type[BaseModel], field_names: Sequence[str]):
        self.model = model
        self.field_names = tuple(field_names)
        self._known_keys = set(self.field_names)

    def validate(self, values: Any) -> None:
        """
        Raises:
            ValidationError: with every violation found in `values`.
        """
        try:
            self.model.model_validate(values)
        except PydanticValidationError as exc:
            raise_mapped_validation_error(exc, values, self._known_keys)


class QuerySchema:
    """Validates a query: one query item or a list of query items."""

    def __init__(self, item_model: type[BaseModel], field_names: Sequence[str]):
        self.item_model = item_model
        self.field_names = tuple(field_names)
        self._items = TypeAdapter(list[item_model], config=ConfigDict(strict=True))
        self._known_keys = set(self.field_names) | {NEGATION_PREFIX + name for name in self.field_names}

    def validate(self, query: Any) -> None:
        """
        Raises:
            ValidationError: with every violation found in `query`.
        """
        try:
            if isinstance(query, (list, tuple)):
                self._items.validate_python(list(query))
            else:
                self.item_model.model_validate(query)
        except PydanticValidationError as exc:
            raise_mapped_validation_error(exc, query, self._known_keys)


@dataclass(frozen=True)
class ModelSchemas:
    create: ValuesSchema
    update: ValuesSchema
    query: QuerySchema


def _exclusive_negation_validator(pairs: Sequence[tuple[str, str, str]]):
    """Reject a query item that sets both `f` and `!f`."""

    def check_exclusive_negation(self):
        present = self.model_fields_set
        for positive, negative, name in pairs:
            if positive in present and negative in present:
                raise PydanticCustomError(
                    "object.xor",
                    '"{name}" conflicts with its negation "{negation}"',
                    {"name": name, "negation": NEGATION_PREFIX + name},
                )
        return self

    return model_validator(mode="after")(check_exclusive_negation)


def build_values_model(name: str, fields: Sequence[FieldDescriptor], *, required: bool) -> type[BaseModel]:
    definitions: dict[str, Any] = {}
    for index, descriptor in enumerate(fields):
        if required:
            field_info = Field(alias=descriptor.name)
        else:
            field_info = Field(default=None, alias=descriptor.name)
        definitions[f"field_{index}"] = (descriptor.annotation(), field_info)
    return create_model(name, __config__=_SCHEMA_CONFIG, **definitions)


def build_query_item_model(name: str, fields: Sequence[FieldDescriptor]) -> type[BaseModel]:
    definitions: dict[str, Any] = {}
    pairs: list[tuple[str, str, str]] = []
    for index, descriptor in enumerate(fields):
        value = descriptor.annotation()
        accepted = Union[value, Annotated[list[value], Field(min_length=1)]]

        positive, negative = f"field_{index}", f"negated_field_{index}"
        definitions[positive] = (accepted, Field(default=None, alias=descriptor.name))
        definitions[negative] = (accepted, Field(default=None, alias=NEGATION_PREFIX + descriptor.name))
        pairs.append((positive, negative, descriptor.name))

    return create_model(
        name,
        __config__=_SCHEMA_CONFIG,
        __validators__={"check_exclusive_negation": _exclusive_negation_validator(pairs)},
        **definitions,
    )


def derive_schemas(
    table_name: str,
    fields: Sequence[FieldDescriptor],
    key_field: str | None = None,
) -> ModelSchemas:
    """
    Derive the create, update and query schemas for a table.

    Args:
        table_name: used to name the generated models
        fields: ordered field descriptors, key included
        key_field: name of the primary key field; excluded from create/update

    Returns:
        ModelSchemas
    """
    value_fields = [f for f in fields if f.name != key_field]
    value_names = [f.name for f in value_fields]

    create = build_values_model(f"{table_name}_create_values", value_fields, required=True)
    update = build_values_model(f"{table_name}_update_values", value_fields, required=False)
    query_item = build_query_item_model(f"{table_name}_query_item", fields)

    return ModelSchemas(
        create=ValuesSchema(create, value_names),
        update=ValuesSchema(update, value_names),
        query=QuerySchema(query_item, [f.name for f in fields]),
    )

