"""Read-only, validated data objects.

A repository is built once from a mapping of field names to values. Fields
are declared as class annotations, validated through setter hooks, filled
from defaults, checked for required values, and then frozen. Only exposed
fields are readable.

    class Event(Repository):
        __name: str
        start_date: str = "2020-01-01"

        def set_name(self, value):
            self.name = value

        def set_start_date(self, value):
            self.start_date = value

    Event({"name": "launch", "start-date": "2024-05-01"}).to_dict()
"""

from .core.config import NAME_STYLES, RepositoryConfig, config_from_env
from .core.contracts import FieldDescriptor, RepositoryInterface, Visibility
from .core.exceptions import (
    DuplicateProperties,
    EmptyRequirements,
    InvalidValue,
    ReadOnlyProperty,
    RepositoryConfigurationError,
    RepositoryError,
    UnknownProperty,
    UnknownSetter,
)
from .core.fields import MISSING, FieldSpec, Schema, field, is_empty
from .core.repository import AbstractRepository, Repository

__all__ = [
    "AbstractRepository",
    "Repository",
    "RepositoryInterface",
    "RepositoryConfig",
    "NAME_STYLES",
    "config_from_env",
    "FieldDescriptor",
    "Visibility",
    "FieldSpec",
    "Schema",
    "MISSING",
    "field",
    "is_empty",
    "RepositoryError",
    "UnknownProperty",
    "UnknownSetter",
    "DuplicateProperties",
    "EmptyRequirements",
    "InvalidValue",
    "ReadOnlyProperty",
    "RepositoryConfigurationError",
]
