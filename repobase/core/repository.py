from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from copy import deepcopy
from typing import (
    Any,
    Callable,
    ClassVar,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Set,
    Tuple,
)

from repobase.utils.hashing import stable_sha256
from repobase.utils.json_safe import to_jsonable

from .config import RepositoryConfig
from .contracts import FieldDescriptor, Visibility
from .exceptions import (
    DuplicateProperties,
    EmptyRequirements,
    InvalidValue,
    ReadOnlyProperty,
    UnknownProperty,
    UnknownSetter,
)
from .fields import Schema, declare_fields, is_empty
from .naming import field_to_property, hook_name, property_to_field

log = logging.getLogger("repobase.repository")

# Instance bookkeeping. These are never fields, whatever a subclass declares.
_BOOKKEEPING = frozenset({"_values", "_exposed", "_constructing"})


class AbstractRepository(ABC):
    """
    Read-only, validated data object built once from a mapping.

    Construction pipeline
    1. Field discovery: the class schema is built once per class from its
       annotations (see repobase.core.fields).
    2. Visibility: exposed = declared - hidden_field_names() - field(hidden=True).
       Optional/required name clashes are rejected here.
    3. Assignment: every input key is resolved (kebab-case allowed) and passed
       to its setter hook, or stored directly in lenient mode.
    4. Defaulting: empty fields take custom_defaults() or their static default.
    5. Required validation: every required field must be non-empty.

    Any failure raises from __init__; no partially built object escapes.

    After construction the object is read-only. Exposed fields are read with
    get(name), attribute access, to_dict(), to_json() or iteration. Hidden
    fields are reported as unknown.

    Hooks
    - setter ``set_<name>(value)`` (snake) / ``set<Name>(value)`` (camel) runs
      during construction and stores with ``self.<name> = value`` or
      ``self._store(name, value)``.
    - getter ``get_<name>()`` / ``get<Name>()`` transforms the value on read.
      Getters must read through ``self._stored(name)``.
    """

    repository_config: ClassVar[RepositoryConfig] = RepositoryConfig()
    __repository_schema__: ClassVar[Schema] = Schema(fields=())

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        declare_fields(cls, reserved=_reserved_names())
        cls.__repository_schema__ = Schema.for_class(cls)
        log.debug(
            "declared repository %s with fields %s",
            cls.__qualname__,
            ", ".join(cls.__repository_schema__.public) or "(none)",
        )

    def __init__(self, data: Optional[Mapping[str, Any]] = None) -> None:
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise InvalidValue(
                f"{type(self).__name__} expects a mapping of field names to values, "
                f"got {type(data).__name__}"
            )

        schema = self._schema()
        object.__setattr__(self, "_constructing", True)
        object.__setattr__(self, "_values", {key: None for key in schema.public})
        object.__setattr__(self, "_exposed", ())

        try:
            self._initialize_properties()
            self._set_property_values(data)
            self._set_default_property_values()

            missing = self._find_empty_requirements()
            if missing:
                raise EmptyRequirements(missing)
        finally:
            object.__setattr__(self, "_constructing", False)

        log.debug("constructed %s", type(self).__qualname__)

    # ------------------------------
    # Capabilities
    # ------------------------------

    @abstractmethod
    def hidden_field_names(self) -> Iterable[str]:
        """
        Names of fields that must never be exposed through the read path.
        """

    @abstractmethod
    def custom_defaults(self) -> Mapping[str, Any]:
        """
        Computed defaults (e.g. the current time), indexed by field name.
        They take precedence over defaults declared in the class body.
        """

    @abstractmethod
    def required_field_names(self) -> Iterable[str]:
        """
        Names of fields that must be non-empty once construction finishes,
        in addition to ``__name`` and field(required=True) declarations.
        """

    # ------------------------------
    # Construction steps
    # ------------------------------

    @classmethod
    def _schema(cls) -> Schema:
        return cls.__repository_schema__

    def _config(self) -> RepositoryConfig:
        return type(self).repository_config

    def _resolve_all(self, names: Iterable[str]) -> Set[str]:
        schema = self._schema()
        keys: Set[str] = set()
        for name in names or ():
            key = schema.resolve(name)
            if key is None:
                raise UnknownProperty(name)
            keys.add(key)
        return keys

    def _initialize_properties(self) -> None:
        schema = self._schema()
        hidden = self._resolve_all(self.hidden_field_names())
        hidden.update(key for key, spec in schema.public.items() if spec.hidden)
        hidden.update(_BOOKKEEPING)

        exposed = tuple(key for key in schema.public if key not in hidden)
        object.__setattr__(self, "_exposed", exposed)

        if self._config().reject_duplicates:
            clashes = schema.clashes(exposed)
            if clashes:
                raise DuplicateProperties(clashes)

    def _set_property_values(self, data: Mapping[str, Any]) -> None:
        schema = self._schema()
        config = self._config()

        for field_name, value in data.items():
            key = schema.resolve(field_name)
            if key is None and isinstance(field_name, str):
                key = schema.resolve(self.convert_field_to_property(field_name))
            if key is None:
                raise UnknownProperty(str(field_name))

            setter = self._hook("set", key)
            if setter is not None:
                setter(value)
            elif config.require_setters:
                raise UnknownSetter(hook_name("set", key, config.name_style))
            else:
                self._values[key] = value

    def _set_default_property_values(self) -> None:
        schema = self._schema()
        custom = {}
        for name, value in (self.custom_defaults() or {}).items():
            key = schema.resolve(name)
            if key is None:
                raise UnknownProperty(name)
            custom[key] = value

        for key, spec in schema.public.items():
            if not is_empty(self._values[key]):
                continue
            if key in custom:
                self._values[key] = custom[key]
            elif spec.has_default:
                self._values[key] = spec.make_default()
            else:
                continue
            log.debug("defaulted %s.%s", type(self).__qualname__, key)

    def _find_empty_requirements(self) -> List[str]:
        schema = self._schema()
        required = self._resolve_all(self.required_field_names())
        required.update(key for key, spec in schema.public.items() if spec.required)

        return [
            schema.public[key].name
            for key in schema.public
            if key in required and is_empty(self._values[key])
        ]

    def convert_field_to_property(self, field_name: str) -> str:
        """Turn an HTML-style ``event-name`` into this class's property name."""
        return field_to_property(field_name, self._config().name_style)

    def convert_property_to_field(self, name: str) -> str:
        """Turn a property name into an HTML-style ``event-name``."""
        return property_to_field(name, self._config().name_style)

    # ------------------------------
    # Internal access for hooks
    # ------------------------------

    def _hook(self, prefix: str, key: str) -> Optional[Callable[..., Any]]:
        name = hook_name(prefix, key, self._config().name_style)
        if not callable(getattr(type(self), name, None)):
            return None
        return getattr(self, name)

    def _store(self, name: str, value: Any) -> None:
        """Store ``value`` for field ``name``; only valid during construction."""
        key = self._schema().resolve(name)
        if key is None:
            raise UnknownProperty(name)
        if not self.__dict__.get("_constructing", False):
            raise ReadOnlyProperty(key)
        self._values[key] = value

    def _stored(self, name: str) -> Any:
        """Raw stored value of any declared field, hidden ones included."""
        key = self._schema().resolve(name)
        if key is None:
            raise UnknownProperty(name)
        return self._values[key]

    # ------------------------------
    # Read path
    # ------------------------------

    def _exposed_key(self, name: Any) -> str:
        key = self._schema().resolve(name)
        if key is None or key not in self._exposed:
            raise UnknownProperty(str(name))
        return key

    def get(self, name: str) -> Any:
        """Copy of an exposed field's value, passed through its getter hook if any.

        Callers never receive the stored object itself.
        """
        key = self._exposed_key(name)
        getter = self._hook("get", key)
        if getter is not None:
            return deepcopy(getter())
        return deepcopy(self._values[key])

    def has(self, name: str) -> bool:
        """Whether ``name`` is an exposed field."""
        key = self._schema().resolve(name)
        return key is not None and key in self._exposed

    def field_names(self) -> Tuple[str, ...]:
        """Exposed field names in declaration order."""
        return self._exposed

    def to_dict(self) -> Dict[str, Any]:
        return {key: self.get(key) for key in self._exposed}

    def to_json(self, **dumps_kwargs: Any) -> str:
        return json.dumps(to_jsonable(self.to_dict()), **dumps_kwargs)

    def to_fields(self) -> Dict[str, Any]:
        """Like to_dict() but keyed by HTML-style field names.

        The result can be passed back to the constructor.
        """
        return {self.convert_property_to_field(key): value for key, value in self.to_dict().items()}

    def fingerprint(self) -> str:
        """Stable SHA-256 of the exposed content."""
        return stable_sha256(self.to_dict())

    def describe(self) -> Tuple[FieldDescriptor, ...]:
        schema = self._schema()
        custom = self._resolve_all((self.custom_defaults() or {}).keys())
        required = self._resolve_all(self.required_field_names())

        return tuple(
            FieldDescriptor(
                name=key,
                visibility=Visibility.EXPOSED if key in self._exposed else Visibility.HIDDEN,
                required=spec.required or key in required,
                has_default=spec.has_default,
                has_custom_default=key in custom,
                has_setter_hook=self._hook("set", key) is not None,
                has_getter_hook=self._hook("get", key) is not None,
            )
            for key, spec in schema.public.items()
        )

    def __iter__(self) -> Iterator[Tuple[str, Any]]:
        for key in self._exposed:
            yield key, self.get(key)

    def __len__(self) -> int:
        return len(self._exposed)

    def __contains__(self, name: object) -> bool:
        return self.has(name)  # type: ignore[arg-type]

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails, i.e. for field names.
        if name.startswith("_"):
            key = self._schema().resolve(name)
            values = self.__dict__.get("_values")
            if key is None or values is None:
                raise AttributeError(name)
            if self.__dict__.get("_constructing", False):
                return values[key]
            if key not in self._exposed:
                raise UnknownProperty(name)
            return deepcopy(values[key])
        return self.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        if not self.__dict__.get("_constructing", False):
            raise ReadOnlyProperty(name)

        key = self._schema().resolve(name)
        if key is not None:
            self._values[key] = value
        elif name.startswith("_") and name not in _BOOKKEEPING:
            object.__setattr__(self, name, value)
        else:
            raise UnknownProperty(name)

    def __delattr__(self, name: str) -> None:
        raise ReadOnlyProperty(name)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.fingerprint() == other.fingerprint()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__qualname__, self.fingerprint()))

    def __copy__(self) -> "AbstractRepository":
        return self

    def __deepcopy__(self, memo: Dict[int, Any]) -> "AbstractRepository":
        # instances never change after construction
        return self

    def __repr__(self) -> str:
        body = ", ".join(f"{key}={value!r}" for key, value in self)
        return f"{type(self).__name__}({body})"


def _reserved_names() -> frozenset:
    return frozenset(dir(AbstractRepository)) | _BOOKKEEPING


class Repository(AbstractRepository):
    """
    Default repository: hides nothing, no custom defaults, and no required
    fields beyond ``__name`` and field(required=True) declarations.

    Extend this one unless you need to hide fields or compute defaults.
    """

    def hidden_field_names(self) -> Iterable[str]:
        return ()

    def custom_defaults(self) -> Mapping[str, Any]:
        return {}

    def required_field_names(self) -> Iterable[str]:
        return ()
