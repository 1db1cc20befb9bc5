"""Permission request/response DTOs."""

from dataclasses import dataclass
from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from permset.domain.entities import Permission, PermissionSet


def _non_empty_verbs(value: str | list[str]) -> str | list[str]:
    verbs = value if isinstance(value, list) else [value]
    if not verbs or any(not v.strip() for v in verbs):
        raise ValueError("must be a non-empty string or a non-empty list of non-empty strings")
    return value


Verbs = Annotated[str | list[str], AfterValidator(_non_empty_verbs)]


class PermissionCreateInput(BaseModel):
    """Body of a create-permission request."""

    model_config = ConfigDict(extra="forbid")

    id: str | None = Field(default=None, min_length=1)
    name: str = Field(min_length=1)
    action: Verbs
    subject: Verbs | None = None
    inverted: bool = False
    fields: list[str] | None = None
    conditions: dict[str, Any] | None = None
    reason: str | None = None
    organization_id: str | None = Field(default=None, min_length=1)
    expires_at: datetime | None = None


class PermissionUpdateInput(BaseModel):
    """Body of a partial permission update; only supplied fields change."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1)
    action: Verbs | None = None
    subject: Verbs | None = None
    inverted: bool | None = None
    fields: list[str] | None = None
    conditions: dict[str, Any] | None = None
    reason: str | None = None
    organization_id: str | None = Field(default=None, min_length=1)
    expires_at: datetime | None = None


@dataclass
class PermissionDetails:
    """Permission plus the relations requested through includes."""

    permission: Permission
    permission_sets: list[PermissionSet] | None = None
    users: list[dict[str, Any]] | None = None
    members: list[dict[str, Any]] | None = None
