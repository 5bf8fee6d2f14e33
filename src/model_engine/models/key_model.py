from typing import Any, Mapping, Sequence

from sqlalchemy.ext.asyncio import AsyncConnection

from ..exceptions import ConfigurationError, ProgrammerError
from ..schema import FieldDescriptor, FieldKind
from .model import Entity, Model

KEY_KINDS = (FieldKind.INTEGER, FieldKind.STRING)


class KeyModel(Model):
    """
    Model of a table whose primary key is the `key` field.

    `key` is assigned by the database, so it is left out of the create and
    update schemas; it can still be queried like any other field.
    """

    key_field = "key"

    def _check_fields(self, fields: Sequence[FieldDescriptor]) -> None:
        key = next((descriptor for descriptor in fields if descriptor.name == self.key_field), None)
        if key is None:
            raise ConfigurationError(f'A KeyModel requires a "{self.key_field}" field.', fields=[self.key_field])
        if key.kind not in KEY_KINDS:
            raise ConfigurationError(
                f'The "{self.key_field}" field must be an integer or a string, not {key.kind.value}.',
                fields=[self.key_field],
            )
        if key.nullable:
            raise ConfigurationError(f'The "{self.key_field}" field cannot be nullable.', fields=[self.key_field])

    async def find_by_key(
        self,
        key: Any,
        *,
        connection: AsyncConnection | None = None,
        validate: bool = True,
        fields: Sequence[str] | None = None,
    ) -> Entity:
        return await self.find_one({self.key_field: key}, connection=connection, validate=validate, fields=fields)

    async def update_by_key(
        self,
        key: Any,
        values: Mapping[str, Any],
        *,
        connection: AsyncConnection | None = None,
        validate_query: bool = True,
        validate_values: bool = True,
        fields: Sequence[str] | None = None,
    ) -> Entity:
        return await self.update_one(
            {self.key_field: key},
            values,
            connection=connection,
            validate_query=validate_query,
            validate_values=validate_values,
            fields=fields,
        )

    async def destroy_by_key(
        self,
        key: Any,
        *,
        connection: AsyncConnection | None = None,
        validate: bool = True,
        fields: Sequence[str] | None = None,
    ) -> Entity:
        return await self.destroy_one({self.key_field: key}, connection=connection, validate=validate, fields=fields)

    def _split_entity(self, entity: Any) -> tuple[Any, dict[str, Any]]:
        if not isinstance(entity, Mapping) or self.key_field not in entity:
            raise ProgrammerError(f'The entity has no "{self.key_field}" field.', fields=[self.key_field])
        values = {name: value for name, value in entity.items() if name in self.value_field_names}
        return entity[self.key_field], values

    async def save(
        self,
        entity: Mapping[str, Any],
        *,
        connection: AsyncConnection | None = None,
        validate: bool = True,
        fields: Sequence[str] | None = None,
    ) -> Entity:
        """
        Write the non-key fields of `entity` to the row with the entity's key.
        Entries that are not fields of the model are left out.

        Returns:
            The saved row.
        """
        key, values = self._split_entity(entity)
        return await self.update_by_key(
            key,
            values,
            connection=connection,
            validate_query=validate,
            validate_values=validate,
            fields=fields,
        )

    async def delete(
        self,
        entity: Mapping[str, Any],
        *,
        connection: AsyncConnection | None = None,
        validate: bool = True,
        fields: Sequence[str] | None = None,
    ) -> Entity:
        key, _ = self._split_entity(entity)
        return await self.destroy_by_key(key, connection=connection, validate=validate, fields=fields)
