from __future__ import annotations

import re

_DASH_LETTER = re.compile(r"-(\w)")
_CAMEL_HUMP = re.compile(r"(?<=[a-z])([A-Z])")


def kebab_to_camel(field: str) -> str:
    """``event-name`` -> ``eventName``."""
    return _DASH_LETTER.sub(lambda m: m.group(1).upper(), field)


def kebab_to_snake(field: str) -> str:
    """``event-name`` -> ``event_name``."""
    return field.replace("-", "_")


def camel_to_kebab(name: str) -> str:
    """``eventName`` -> ``event-name``."""
    return _CAMEL_HUMP.sub(lambda m: "-" + m.group(1).lower(), name)


def snake_to_kebab(name: str) -> str:
    """``event_name`` -> ``event-name``. Leading underscores are kept."""
    stripped = name.lstrip("_")
    return name[: len(name) - len(stripped)] + stripped.replace("_", "-")


def field_to_property(field: str, style: str) -> str:
    """Convert an HTML-style field name into a property name in ``style``."""
    if style == "camel":
        return kebab_to_camel(field)
    return kebab_to_snake(field)


def property_to_field(name: str, style: str) -> str:
    """Convert a property name in ``style`` into an HTML-style field name."""
    if style == "camel":
        return camel_to_kebab(name)
    return snake_to_kebab(name)


def hook_name(prefix: str, name: str, style: str) -> str:
    """Name of the setter/getter hook for ``name``.

    snake: ``hook_name("set", "start_date")`` -> ``set_start_date``
    camel: ``hook_name("set", "startDate")`` -> ``setStartDate``
    """

    if style == "camel":
        return prefix + name[:1].upper() + name[1:]
    return f"{prefix}_{name}"
