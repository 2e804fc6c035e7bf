from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping, Optional

from .exceptions import RepositoryConfigurationError

NAME_STYLES = ("snake", "camel")


@dataclass(frozen=True, slots=True)
class RepositoryConfig:
    """Behaviour switches for a repository class.

    A class opts in by setting ``repository_config``; subclasses inherit it.

    - require_setters: a value for a field without a setter hook raises
      UnknownSetter. When False the raw value is stored directly.
    - reject_duplicates: declaring ``bar`` and ``__bar`` on the same class
      raises DuplicateProperties at construction.
    - name_style: identifier style used to convert kebab-case input keys and
      to name setter/getter hooks ("snake" or "camel").
    """

    require_setters: bool = True
    reject_duplicates: bool = True
    name_style: str = "snake"

    def __post_init__(self) -> None:
        if self.name_style not in NAME_STYLES:
            raise RepositoryConfigurationError(
                f"name_style must be one of {', '.join(NAME_STYLES)}; got {self.name_style!r}"
            )

    def with_changes(self, **changes: Any) -> "RepositoryConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)


def _env_bool(environ: Mapping[str, str], name: str, default: bool) -> bool:
    """Read a 0/1 environment flag, falling back to ``default``."""

    raw = environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return bool(int(raw))
    except ValueError:
        return default


def config_from_env(
    base: Optional[RepositoryConfig] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RepositoryConfig:
    """Overlay REPOBASE_* environment variables on top of ``base``.

    Recognised variables:
    - REPOBASE_REQUIRE_SETTERS ("0" / "1")
    - REPOBASE_REJECT_DUPLICATES ("0" / "1")
    - REPOBASE_NAME_STYLE ("snake" / "camel")

    Unset or unparsable values keep the value from ``base``.
    """

    base = base or RepositoryConfig()
    env = os.environ if environ is None else environ

    style = env.get("REPOBASE_NAME_STYLE", "").strip().lower()
    if style not in NAME_STYLES:
        style = base.name_style

    return RepositoryConfig(
        require_setters=_env_bool(env, "REPOBASE_REQUIRE_SETTERS", base.require_setters),
        reject_duplicates=_env_bool(env, "REPOBASE_REJECT_DUPLICATES", base.reject_duplicates),
        name_style=style,
    )
