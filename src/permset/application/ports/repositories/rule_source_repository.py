"""Rule source port - raw permission rows reachable from a principal."""

from collections.abc import Sequence
from typing import Any, Protocol

from permset.domain.value_objects import Principal


class RuleSourceRepository(Protocol):
    """Reads used by the permission aggregator. Rows are stored permission rows."""

    async def direct_permissions(
        self, principal: Principal, principal_id: str
    ) -> list[dict[str, Any]]: ...

    async def permission_set_ids(
        self, principal: Principal, principal_id: str
    ) -> list[str]: ...

    async def permissions_for_sets(
        self, permission_set_ids: Sequence[str]
    ) -> dict[str, list[dict[str, Any]]]: ...
