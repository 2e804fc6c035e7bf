import hashlib
import json
from typing import Any

from repobase.utils.json_safe import to_jsonable


def canonical_json(payload: Any) -> str:
    """
    Deterministic JSON text: sorted keys, no insignificant whitespace.
    """
    return json.dumps(to_jsonable(payload), sort_keys=True, separators=(",", ":"))


def stable_sha256(payload: Any) -> str:
    """
    SHA-256 hex digest of the canonical JSON form of ``payload``.
    """
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()
