from __future__ import annotations

import argparse
import importlib
import json
import logging
import os
import sys
from typing import Any, Dict, List, Type

from repobase.cli.models import CheckOut, DescribeOut, FieldOut
from repobase.core.config import NAME_STYLES, RepositoryConfig, config_from_env
from repobase.core.exceptions import (
    EmptyRequirements,
    RepositoryConfigurationError,
    RepositoryError,
)
from repobase.core.repository import AbstractRepository
from repobase.utils.json_safe import to_jsonable

log = logging.getLogger("repobase.cli")


def load_repository_class(path: str) -> Type[AbstractRepository]:
    """Import ``package.module:ClassName`` and check it is a repository."""

    module_name, sep, class_name = path.partition(":")
    if not sep or not module_name or not class_name:
        raise RepositoryConfigurationError(
            f"expected 'package.module:ClassName', got {path!r}"
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise RepositoryConfigurationError(f"cannot import {module_name}: {e}") from e

    obj: Any = module
    for part in class_name.split("."):
        obj = getattr(obj, part, None)
        if obj is None:
            raise RepositoryConfigurationError(f"{module_name} has no attribute {class_name}")

    if not isinstance(obj, type) or not issubclass(obj, AbstractRepository):
        raise RepositoryConfigurationError(f"{path} is not a repository class")
    return obj


def with_config(
    cls: Type[AbstractRepository], config: RepositoryConfig
) -> Type[AbstractRepository]:
    """Subclass ``cls`` with a different configuration (no-op if unchanged)."""

    if config == cls.repository_config:
        return cls
    return type(
        cls.__name__,
        (cls,),
        {"repository_config": config, "__module__": cls.__module__, "__qualname__": cls.__qualname__},
    )


def _resolve_config(cls: Type[AbstractRepository], args: argparse.Namespace) -> RepositoryConfig:
    config = config_from_env(cls.repository_config)
    changes: Dict[str, Any] = {}
    if getattr(args, "lenient", False):
        changes["require_setters"] = False
    if getattr(args, "allow_duplicates", False):
        changes["reject_duplicates"] = False
    if getattr(args, "style", None):
        changes["name_style"] = args.style
    return config.with_changes(**changes) if changes else config


def _print_json(payload: Any, indent: int) -> None:
    print(json.dumps(to_jsonable(payload), indent=indent or None))


def _read_json(path: str) -> Any:
    """Read a JSON file."""

    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def cmd_check(args: argparse.Namespace) -> int:
    """Construct a repository from a JSON object and report the outcome.

    Exit codes: 0 valid, 3 rejected by the repository, 2 usage/IO error.
    """

    try:
        cls = load_repository_class(args.repository)
        cls = with_config(cls, _resolve_config(cls, args))
    except RepositoryConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    path = os.path.abspath(args.path)
    try:
        data = _read_json(path)
    except FileNotFoundError:
        print(f"error: file not found: {path}", file=sys.stderr)
        return 2
    except (OSError, json.JSONDecodeError) as e:
        print(f"error: cannot read {path}: {e}", file=sys.stderr)
        return 2

    if not isinstance(data, dict):
        print(f"error: {path} must contain a JSON object", file=sys.stderr)
        return 2

    name = f"{cls.__module__}:{cls.__qualname__}"
    try:
        repo = cls(data)
    except RepositoryError as e:
        log.info("rejected %s: %s", name, type(e).__name__)
        out = CheckOut(
            ok=False,
            repository=name,
            error=str(e),
            error_type=type(e).__name__,
            missing=list(e.missing) if isinstance(e, EmptyRequirements) else [],
        )
        _print_json(out.model_dump(), args.indent)
        return 3

    out = CheckOut(
        ok=True,
        repository=name,
        data=to_jsonable(repo.to_dict()),
        fingerprint=repo.fingerprint(),
    )
    _print_json(out.model_dump(), args.indent)
    return 0


def cmd_describe(args: argparse.Namespace) -> int:
    """Print the declared fields of a repository class."""

    try:
        cls = load_repository_class(args.repository)
        config = _resolve_config(cls, args)
    except RepositoryConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    schema = cls.__repository_schema__
    fields: List[FieldOut] = []
    for key, spec in schema.public.items():
        fields.append(
            FieldOut(
                name=key,
                declared_as=spec.attr_name,
                required=spec.required,
                hidden=spec.hidden,
                has_default=spec.has_default,
                default=to_jsonable(spec.default) if spec.default_factory is None and spec.has_default else None,
            )
        )

    out = DescribeOut(
        repository=f"{cls.__module__}:{cls.__qualname__}",
        name_style=config.name_style,
        require_setters=config.require_setters,
        reject_duplicates=config.reject_duplicates,
        fields=fields,
    )
    _print_json(out.model_dump(), args.indent)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser."""
    p = argparse.ArgumentParser(prog="repobase", description="Validate data against repository classes")
    sub = p.add_subparsers(dest="cmd", required=True)

    cp = sub.add_parser("check", help="Construct a repository from a JSON file")
    cp.add_argument("repository", help="Repository class as package.module:ClassName")
    cp.add_argument("path", help="Path to a JSON file holding one object")
    cp.add_argument(
        "--lenient",
        action="store_true",
        help="Store values for fields without setter hooks instead of failing",
    )
    cp.add_argument(
        "--allow-duplicates",
        action="store_true",
        help="Do not reject optional/required fields sharing a name",
    )
    cp.add_argument("--style", choices=NAME_STYLES, default=None, help="Override the naming style")
    cp.add_argument("--indent", type=int, default=2, help="JSON indent (0 for compact)")
    cp.set_defaults(func=cmd_check)

    dp = sub.add_parser("describe", help="Print the declared fields of a repository class")
    dp.add_argument("repository", help="Repository class as package.module:ClassName")
    dp.add_argument("--indent", type=int, default=2, help="JSON indent (0 for compact)")
    dp.set_defaults(func=cmd_describe)

    return p


def _log_level() -> int:
    """Level from REPOBASE_LOG_LEVEL; unknown names fall back to WARNING."""

    level = logging.getLevelName(os.environ.get("REPOBASE_LOG_LEVEL", "").strip().upper())
    return level if isinstance(level, int) else logging.WARNING


def main(argv: List[str] | None = None) -> int:
    """CLI entry."""
    logging.basicConfig(level=_log_level())
    parser = build_parser()
    args = parser.parse_args(argv)
    return int(args.func(args))


if __name__ == "__main__":
    raise SystemExit(main())
