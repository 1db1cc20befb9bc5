"""Get ability use case - rule snapshot for client-side evaluation."""

from permset.application.dto.authorization_dto import AbilitySnapshot
from permset.application.ports.membership import MembershipResolver
from permset.application.services.permission_aggregator import PermissionAggregator
from permset.domain.exceptions import Forbidden, Unauthorized
from permset.domain.value_objects import AuthorizationMode


class GetAbilityUseCase:
    """Sorted, source-tagged rules for the requesting identity, uninterpolated."""

    def __init__(
        self,
        aggregator: PermissionAggregator,
        membership: MembershipResolver,
        mode: AuthorizationMode,
    ) -> None:
        self._aggregator = aggregator
        self._membership = membership
        self._mode = mode

    async def execute(
        self, user_id: str | None, organization_id: str | None = None
    ) -> AbilitySnapshot:
        if not user_id:
            raise Unauthorized()
        member_id = None
        if organization_id:
            member_id = await self._membership.resolve_member_id(user_id, organization_id)
        if self._mode is AuthorizationMode.MEMBER and member_id is None:
            raise Forbidden()
        rules = await self._aggregator.aggregate(self._mode, user_id, member_id)
        return AbilitySnapshot(rules=rules, user_id=user_id, member_id=member_id)
