"""Ability port - compiled rule set answering can/cannot questions."""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from permset.domain.entities import Rule


class Ability(Protocol):
    """Evaluator over an ordered rule list (last applicable rule wins)."""

    def can(
        self,
        action: str,
        subject: str,
        resource: Mapping[str, Any] | None = None,
        field: str | None = None,
    ) -> bool: ...

    def cannot(
        self,
        action: str,
        subject: str,
        resource: Mapping[str, Any] | None = None,
        field: str | None = None,
    ) -> bool: ...

    def can_all_fields(
        self,
        action: str,
        subject: str,
        fields: Sequence[str],
        resource: Mapping[str, Any] | None = None,
    ) -> bool: ...

    def deny_reason(
        self,
        action: str,
        subject: str,
        resource: Mapping[str, Any] | None = None,
        fields: Sequence[str] = (),
    ) -> str | None: ...


class AbilityBuilder(Protocol):
    """Builds a fresh Ability from priority-sorted rules and an evaluation context."""

    def build(
        self,
        rules: Sequence[Rule],
        context: Mapping[str, Any] | None = None,
    ) -> Ability: ...
