from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class RepositoryInterface(Protocol):
    """
    Anything that can export its visible fields as a plain mapping.
    """

    def to_dict(self) -> Dict[str, Any]:
        """
        Return the exposed fields as an ordered name -> value mapping.
        """
        ...


class Visibility(str, Enum):
    """
    Whether a field is readable through the public read path.
    """

    EXPOSED = "exposed"
    HIDDEN = "hidden"


@dataclass(frozen=True)
class FieldDescriptor:
    """
    Per-instance facts about a declared field, as reported by describe().
    """

    name: str
    visibility: Visibility
    required: bool
    has_default: bool
    has_custom_default: bool
    has_setter_hook: bool
    has_getter_hook: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "visibility": self.visibility.value,
            "required": self.required,
            "has_default": self.has_default,
            "has_custom_default": self.has_custom_default,
            "has_setter_hook": self.has_setter_hook,
            "has_getter_hook": self.has_getter_hook,
        }
