"""Permission set entity - a named bundle of permissions."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class PermissionSet:
    """Permission set - assignable to users and members as a unit."""

    id: str
    name: str
    created_at: datetime
    description: str | None = None
    organization_id: str | None = None
    updated_at: datetime | None = None
