from __future__ import annotations

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class CheckOut(BaseModel):
    """Result of constructing a repository from a JSON document."""

    ok: bool
    repository: str
    data: Dict[str, Any] = Field(default_factory=dict)
    fingerprint: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    missing: List[str] = Field(default_factory=list)


class FieldOut(BaseModel):
    """One declared field of a repository class."""

    name: str
    declared_as: str
    required: bool
    hidden: bool
    has_default: bool
    default: Any = None


class DescribeOut(BaseModel):
    """Schema summary of a repository class."""

    repository: str
    name_style: str
    require_setters: bool
    reject_duplicates: bool
    fields: List[FieldOut] = Field(default_factory=list)
