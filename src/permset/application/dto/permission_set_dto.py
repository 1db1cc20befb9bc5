"""Permission set request/response DTOs."""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from permset.domain.entities import Permission, PermissionSet


class PermissionSetCreateInput(BaseModel):
    """Body of a create-permission-set request."""

    model_config = ConfigDict(extra="forbid")

    id: str | None = Field(default=None, min_length=1)
    name: str = Field(min_length=1)
    description: str | None = None
    organization_id: str | None = Field(default=None, min_length=1)


class PermissionSetUpdateInput(BaseModel):
    """Body of a partial permission set update."""

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    organization_id: str | None = Field(default=None, min_length=1)


@dataclass
class PermissionSetDetails:
    """Permission set plus the relations requested through includes."""

    permission_set: PermissionSet
    permissions: list[Permission] | None = None
    users: list[dict[str, Any]] | None = None
    members: list[dict[str, Any]] | None = None
