"""Membership port - resolves a user's member id within an organization."""

from typing import Protocol


class MembershipResolver(Protocol):
    async def resolve_member_id(self, user_id: str, organization_id: str) -> str | None: ...
