"""Permission aggregator - merges the four rule sources into one ordered list."""

import asyncio
import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from permset.application.ports.repositories import RuleSourceRepository
from permset.domain.entities import Rule
from permset.domain.services.rule_converter import to_rule
from permset.domain.services.rule_priority import sort_rules_by_priority
from permset.domain.value_objects import AuthorizationMode, PermissionSource, Principal

logger = logging.getLogger(__name__)

_SOURCES = {
    Principal.USER: (PermissionSource.USER_DIRECT, PermissionSource.USER_PERMISSION_SET),
    Principal.MEMBER: (PermissionSource.MEMBER_DIRECT, PermissionSource.MEMBER_PERMISSION_SET),
}


def flatten_grouped_records(
    grouped: Mapping[str, Sequence[Mapping[str, Any]]] | Iterable[Sequence[Mapping[str, Any]]],
) -> list[Mapping[str, Any]]:
    """Concatenate per-group rows, keeping the first occurrence of each id."""
    groups = grouped.values() if isinstance(grouped, Mapping) else grouped
    seen: set[str] = set()
    flat: list[Mapping[str, Any]] = []
    for rows in groups:
        for row in rows:
            key = str(row["id"])
            if key in seen:
                continue
            seen.add(key)
            flat.append(row)
    return flat


class PermissionAggregator:
    """Collects direct and set-derived permissions for a user and/or member."""

    def __init__(self, rule_sources: RuleSourceRepository) -> None:
        self._rule_sources = rule_sources

    async def aggregate(
        self,
        mode: AuthorizationMode,
        user_id: str | None = None,
        member_id: str | None = None,
    ) -> list[Rule]:
        """Return every applicable rule, sorted lowest to highest priority."""
        collections = []
        if mode.includes_users and user_id:
            collections.append(self._collect(Principal.USER, user_id))
        if mode.includes_members and member_id:
            collections.append(self._collect(Principal.MEMBER, member_id))
        if not collections:
            return []
        groups = await asyncio.gather(*collections)
        rules = [rule for group in groups for rule in group]
        logger.debug(
            "Aggregated %d rules (user=%s, member=%s, mode=%s)",
            len(rules),
            user_id,
            member_id,
            mode,
        )
        return sort_rules_by_priority(rules)

    async def _collect(self, principal: Principal, principal_id: str) -> list[Rule]:
        direct_source, set_source = _SOURCES[principal]
        direct, from_sets = await asyncio.gather(
            self._rule_sources.direct_permissions(principal, principal_id),
            self._set_permissions(principal, principal_id),
        )
        return [to_rule(row, direct_source) for row in direct] + [
            to_rule(row, set_source) for row in from_sets
        ]

    async def _set_permissions(
        self, principal: Principal, principal_id: str
    ) -> list[Mapping[str, Any]]:
        set_ids = await self._rule_sources.permission_set_ids(principal, principal_id)
        if not set_ids:
            return []
        grouped = await self._rule_sources.permissions_for_sets(set_ids)
        return flatten_grouped_records(grouped)
