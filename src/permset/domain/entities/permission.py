"""Permission entity - one grant or deny rule as stored."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class Permission:
    """Permission - action(s) on subject(s), optionally narrowed by fields and conditions.

    ``inverted`` turns the grant into a deny. ``fields`` and ``conditions`` are
    the decoded forms of their JSON storage columns.
    """

    id: str
    name: str
    action: str | list[str]
    subject: str | list[str] | None
    created_at: datetime
    inverted: bool = False
    fields: list[str] | None = None
    conditions: dict[str, Any] | None = None
    reason: str | None = None
    organization_id: str | None = None
    updated_at: datetime | None = None
    expires_at: datetime | None = None
