from __future__ import annotations

import inspect
import typing
from collections import Counter
from collections.abc import Sized
from copy import deepcopy
from dataclasses import dataclass, field as dc_field
from types import FunctionType
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from .exceptions import RepositoryConfigurationError

REQUIRED_MARKER = "__"

OWN_FIELDS_ATTR = "__repository_own_fields__"


class _Missing:
    """Sentinel for "no static default declared"."""

    _instance: Optional["_Missing"] = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def is_empty(value: Any) -> bool:
    """Return True when ``value`` counts as "not provided".

    None, the empty string and empty collections are empty. Zero, ``"0"``
    and False are deliberately treated as real values.
    """

    if value is None:
        return True
    if isinstance(value, (bool, int, float, complex)):
        return False
    if isinstance(value, str):
        return value == ""
    if isinstance(value, Sized):
        try:
            return len(value) == 0
        except TypeError:
            return False
    return False


@dataclass(frozen=True)
class FieldDeclaration:
    """Options attached to a field through :func:`field`."""

    default: Any = MISSING
    default_factory: Optional[Callable[[], Any]] = None
    required: bool = False
    hidden: bool = False

    def __post_init__(self) -> None:
        if self.default is not MISSING and self.default_factory is not None:
            raise RepositoryConfigurationError("cannot specify both default and default_factory")


def field(
    *,
    default: Any = MISSING,
    default_factory: Optional[Callable[[], Any]] = None,
    required: bool = False,
    hidden: bool = False,
) -> Any:
    """Declare a repository field with explicit options.

    Example::

        class Event(Repository):
            name: str = field(required=True)
            tags: list = field(default_factory=list)
            secret: str = field(hidden=True)
    """

    return FieldDeclaration(
        default=default,
        default_factory=default_factory,
        required=required,
        hidden=hidden,
    )


@dataclass(frozen=True)
class FieldSpec:
    """Immutable description of one declared field.

    ``name`` is the logical name callers use. ``attr_name`` is the name as
    written in the class body, which differs for required-convention fields
    (``__bar`` declares logical ``bar``). ``raw_name`` is the key Python
    stored in the class annotations (``_Owner__bar`` after name mangling).
    """

    name: str
    attr_name: str
    raw_name: str
    owner: str
    annotation: Any = None
    default: Any = MISSING
    default_factory: Optional[Callable[[], Any]] = None
    required: bool = False
    hidden: bool = False

    @property
    def by_convention(self) -> bool:
        return self.attr_name.startswith(REQUIRED_MARKER)

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING or self.default_factory is not None

    def make_default(self) -> Any:
        """Build a fresh default value; mutable defaults are never shared."""
        if self.default_factory is not None:
            return self.default_factory()
        return deepcopy(self.default)


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        text = annotation.strip()
        return text.startswith("ClassVar") or text.startswith("typing.ClassVar")
    return annotation is typing.ClassVar or typing.get_origin(annotation) is typing.ClassVar


def _mangle_prefix(cls: type) -> str:
    return "_" + cls.__name__.lstrip("_") + REQUIRED_MARKER


def _split_name(cls: type, raw_name: str) -> Optional[Tuple[str, str]]:
    """Map an annotation key to ``(logical name, declared name)``.

    Returns None for names that are not data fields.
    """

    if raw_name.startswith("__") and raw_name.endswith("__"):
        return None

    prefix = _mangle_prefix(cls)
    if raw_name.startswith(prefix) and len(raw_name) > len(prefix):
        logical = raw_name[len(prefix):]
        return logical, REQUIRED_MARKER + logical

    if raw_name.startswith("_"):
        return None
    return raw_name, raw_name


def declare_fields(cls: type, *, reserved: FrozenSet[str] = frozenset()) -> Tuple[FieldSpec, ...]:
    """Build the field specs declared directly on ``cls``.

    Class-level default values are moved into the specs and removed from the
    class so instance attribute reads fall through to the controlled read
    path. The result is stored on the class for :func:`collect_fields`.
    """

    specs: List[FieldSpec] = []
    for raw_name, annotation in inspect.get_annotations(cls).items():
        if _is_classvar(annotation):
            continue
        split = _split_name(cls, raw_name)
        if split is None:
            continue
        logical, attr_name = split

        if logical in reserved:
            raise RepositoryConfigurationError(
                f"{cls.__qualname__}.{attr_name} shadows a repository method"
            )

        value = cls.__dict__.get(raw_name, MISSING)
        if isinstance(value, (FunctionType, property, classmethod, staticmethod)):
            raise RepositoryConfigurationError(
                f"{cls.__qualname__}.{attr_name} is annotated as a field but bound to a callable"
            )

        if isinstance(value, FieldDeclaration):
            decl = value
        else:
            decl = FieldDeclaration(default=value)

        specs.append(
            FieldSpec(
                name=logical,
                attr_name=attr_name,
                raw_name=raw_name,
                owner=cls.__qualname__,
                annotation=annotation,
                default=decl.default,
                default_factory=decl.default_factory,
                required=decl.required or attr_name.startswith(REQUIRED_MARKER),
                hidden=decl.hidden,
            )
        )

        if raw_name in cls.__dict__:
            delattr(cls, raw_name)

    own = tuple(specs)
    setattr(cls, OWN_FIELDS_ATTR, own)
    return own


def collect_fields(cls: type) -> Tuple[FieldSpec, ...]:
    """All fields of ``cls`` in declaration order, base classes first.

    A subclass redeclaring a field replaces the inherited spec in place.
    """

    merged: Dict[str, FieldSpec] = {}
    for klass in reversed(cls.__mro__):
        for spec in klass.__dict__.get(OWN_FIELDS_ATTR, ()):
            merged[spec.attr_name] = spec
    return tuple(merged.values())


@dataclass(frozen=True)
class Schema:
    """Per-class field table.

    ``public`` maps the key used by get/to_dict/iteration to its spec, in
    declaration order. Public keys are logical names, except that when a
    plain field and a required-convention field share a logical name, the
    latter keeps its declared ``__name``.

    ``aliases`` maps every accepted spelling (public key, declared name,
    mangled name) to the public key.
    """

    fields: Tuple[FieldSpec, ...]
    public: Mapping[str, FieldSpec] = dc_field(default_factory=dict)
    aliases: Mapping[str, str] = dc_field(default_factory=dict)

    @classmethod
    def build(cls, fields: Iterable[FieldSpec]) -> "Schema":
        fields = tuple(fields)
        counts = Counter(spec.name for spec in fields)

        public: Dict[str, FieldSpec] = {}
        for spec in fields:
            key = spec.attr_name if counts[spec.name] > 1 and spec.by_convention else spec.name
            public[key] = spec

        aliases: Dict[str, str] = {key: key for key in public}
        for key, spec in public.items():
            aliases.setdefault(spec.attr_name, key)
            aliases.setdefault(spec.raw_name, key)

        return cls(fields=fields, public=public, aliases=aliases)

    @classmethod
    def for_class(cls, klass: type) -> "Schema":
        return cls.build(collect_fields(klass))

    def resolve(self, name: Any) -> Optional[str]:
        """Public key for ``name`` or None if it names no field."""
        if not isinstance(name, str):
            return None
        return self.aliases.get(name)

    def clashes(self, keys: Iterable[str]) -> List[str]:
        """Logical names shared by more than one of ``keys``."""
        counts = Counter(self.public[key].name for key in keys)
        return sorted(name for name, n in counts.items() if n > 1)
