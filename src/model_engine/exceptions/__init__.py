# model_engine/
# │
# ├── exceptions/
# │   ├── __init__.py
# │   ├── base.py                    # Engine-level errors (e.g. ValidationError, EntityExistsError)
# │   ├── integrity_classifier.py    # SQL-level / DB-specific classification
# │   └── mapper.py                  # Map SQL-level and schema failures to engine-level errors

from .base import (
    ErrorItem,
    ModelError,
    ConfigurationError,
    ProgrammerError,
    ValidationError,
    EntityExistsError,
    EntityNotFoundError,
    MultipleEntitiesFoundError,
)
from .integrity_classifier import ConstraintViolation, classify_integrity_error
from .mapper import parse_validation_error, translate_integrity_errors

__all__ = [
    "ErrorItem",
    "ModelError",
    "ConfigurationError",
    "ProgrammerError",
    "ValidationError",
    "EntityExistsError",
    "EntityNotFoundError",
    "MultipleEntitiesFoundError",
    "ConstraintViolation",
    "classify_integrity_error",
    "parse_validation_error",
    "translate_integrity_errors",
]
