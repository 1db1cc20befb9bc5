"""Canonical rule - a permission tagged with the source it was aggregated from."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from permset.domain.value_objects import PermissionSource


@dataclass(frozen=True)
class Rule:
    """Normalized, source-tagged permission used for evaluation."""

    id: str
    name: str
    action: str | list[str]
    subject: str | list[str] | None
    inverted: bool
    source: PermissionSource
    created_at: datetime | None = None
    fields: list[str] | None = None
    conditions: dict[str, Any] | None = None
    reason: str = ""
    organization_id: str | None = None
    updated_at: datetime | None = None
    expires_at: datetime | None = None

    @property
    def actions(self) -> list[str]:
        return list(self.action) if isinstance(self.action, list) else [self.action]

    @property
    def subjects(self) -> list[str] | None:
        if self.subject is None:
            return None
        return list(self.subject) if isinstance(self.subject, list) else [self.subject]
