"""
model_engine: a generic data access layer over SQLAlchemy Core.

    from model_engine import KeyModel, catalog, create_async_engine_from_settings

    engine = create_async_engine_from_settings()
    users = KeyModel(engine, "users", [
        catalog.integer_key(),
        catalog.label("name", unique=True),
        catalog.boolean("active"),
    ])

    user = await users.create_one({"name": "a", "active": True})
    await users.find([{"name": "a"}, {"!active": True}])
"""
from .database import create_async_engine_from_settings, make_metadata
from .exceptions import (
    ModelError,
    ConfigurationError,
    ProgrammerError,
    ValidationError,
    EntityExistsError,
    EntityNotFoundError,
    MultipleEntitiesFoundError,
)
from .models import Entity, KeyModel, Model
from .query import UNSET, OrderBy
from .schema import FieldDescriptor, FieldKind, catalog

__all__ = [
    "create_async_engine_from_settings",
    "make_metadata",
    "ModelError",
    "ConfigurationError",
    "ProgrammerError",
    "ValidationError",
    "EntityExistsError",
    "EntityNotFoundError",
    "MultipleEntitiesFoundError",
    "Entity",
    "KeyModel",
    "Model",
    "UNSET",
    "OrderBy",
    "FieldDescriptor",
    "FieldKind",
    "catalog",
]
