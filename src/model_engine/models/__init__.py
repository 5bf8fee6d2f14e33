from .model import Entity, Model
from .key_model import KeyModel

__all__ = ["Entity", "Model", "KeyModel"]
