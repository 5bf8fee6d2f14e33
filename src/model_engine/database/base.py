"""
Table construction from field descriptors.

Tables are plain SQLAlchemy Core `Table` objects; every Model builds its own
from the descriptors it was given.
"""
from typing import Sequence

from sqlalchemy import Column, MetaData, Table
from sqlalchemy.exc import InvalidRequestError

from ..exceptions import ConfigurationError
from ..schema import FieldDescriptor, FieldKind

# Naming convention for constraints and indexes
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


def make_metadata() -> MetaData:
    return MetaData(naming_convention=NAMING_CONVENTION)


def build_table(
    name: str,
    fields: Sequence[FieldDescriptor],
    metadata: MetaData | None = None,
    key_field: str | None = None,
) -> Table:
    """
    Build the Core table for `fields`.

    The `key_field` column becomes the primary key (auto-incrementing when it
    is an INTEGER); every other column takes its nullability and uniqueness
    from its descriptor.

    Raises:
        ConfigurationError: if `metadata` already holds a table with this name.
    """
    if metadata is None:
        metadata = make_metadata()

    columns = []
    for descriptor in fields:
        if descriptor.name == key_field:
            columns.append(Column(
                descriptor.name,
                descriptor.sa_type(),
                primary_key=True,
                autoincrement=descriptor.kind is FieldKind.INTEGER,
            ))
        else:
            columns.append(Column(
                descriptor.name,
                descriptor.sa_type(),
                nullable=descriptor.nullable,
                unique=descriptor.unique,
            ))

    try:
        return Table(name, metadata, *columns)
    except InvalidRequestError as exc:
        raise ConfigurationError(f'Table "{name}" is already defined on this MetaData.') from exc
