from . import catalog
from .fields import FieldKind, FieldDescriptor
from .derivation import NEGATION_PREFIX, ModelSchemas, QuerySchema, ValuesSchema, derive_schemas

__all__ = [
    "catalog",
    "FieldKind",
    "FieldDescriptor",
    "NEGATION_PREFIX",
    "ModelSchemas",
    "QuerySchema",
    "ValuesSchema",
    "derive_schemas",
]
