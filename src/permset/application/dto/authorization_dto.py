"""Check-permission and ability DTOs."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from permset.domain.entities import Rule


class IdsInput(BaseModel):
    """List of ids for batch assignment, removal and deletion."""

    model_config = ConfigDict(extra="forbid")

    ids: list[str] = Field(min_length=1)


class CheckPermissionInput(BaseModel):
    """Evaluation request: may ``action`` be performed on ``subject``?"""

    model_config = ConfigDict(extra="forbid")

    action: str = Field(min_length=1)
    subject: str = Field(min_length=1)
    user_id: str | None = Field(default=None, min_length=1)
    member_id: str | None = Field(default=None, min_length=1)
    resource: dict[str, Any] | None = None
    fields: list[str] | None = None
    context: dict[str, Any] | None = None


@dataclass
class CheckPermissionResult:
    """Decision plus diagnostics."""

    allowed: bool
    reason: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"allowed": self.allowed, "meta": self.meta}
        if self.reason is not None:
            body["reason"] = self.reason
        return body


@dataclass
class AbilitySnapshot:
    """Sorted, source-tagged, uninterpolated rules for one identity."""

    rules: list[Rule]
    user_id: str | None = None
    member_id: str | None = None
