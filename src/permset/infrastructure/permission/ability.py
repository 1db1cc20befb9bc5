"""Rule-based ability: registers grants/denials and answers can/cannot.

Semantics follow CASL: rules are applied in registration order and the last
applicable rule wins. ``manage`` matches every action and ``all`` every
subject type. Conditions are MongoDB-style queries matched with mongoquery.
"""

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from fnmatch import fnmatchcase
from typing import Any

from mongoquery import Query, QueryError

from permset.domain.entities import Rule
from permset.infrastructure.permission.interpolation import interpolate_rule, sanitize_context

logger = logging.getLogger(__name__)

ANY_ACTION = "manage"
ANY_SUBJECT = "all"

_QUERY_OPERATORS = frozenset(
    {
        "$eq",
        "$ne",
        "$gt",
        "$gte",
        "$lt",
        "$lte",
        "$in",
        "$nin",
        "$exists",
        "$regex",
        "$options",
        "$all",
        "$size",
        "$elemMatch",
        "$and",
        "$or",
        "$nor",
        "$not",
        "$mod",
        "$type",
    }
)


def check_query_operators(conditions: Any) -> None:
    """Raise ValueError for any operator outside the supported query subset."""
    if isinstance(conditions, Mapping):
        for key, value in conditions.items():
            if isinstance(key, str) and key.startswith("$") and key not in _QUERY_OPERATORS:
                raise ValueError(f"Unsupported query operator: {key}")
            check_query_operators(value)
    elif isinstance(conditions, list):
        for item in conditions:
            check_query_operators(item)


@dataclass(frozen=True)
class AbilityRule:
    """One registered (action, subject) grant or denial."""

    action: str
    subject: str
    inverted: bool = False
    fields: tuple[str, ...] | None = None
    conditions: Mapping[str, Any] | None = None
    reason: str | None = None
    rule_id: str | None = None
    query: Query | None = None

    def matches_action(self, action: str) -> bool:
        return self.action == action or self.action == ANY_ACTION

    def matches_subject(self, subject: str) -> bool:
        return self.subject == subject or self.subject == ANY_SUBJECT

    def matches_field(self, field: str | None) -> bool:
        if not self.fields:
            return True
        if field is None:
            return not self.inverted
        return any(fnmatchcase(field, pattern) for pattern in self.fields)

    def matches_conditions(self, resource: Mapping[str, Any] | None) -> bool:
        if self.query is None:
            return True
        if resource is None:
            return not self.inverted
        try:
            return bool(self.query.match(resource))
        except (QueryError, TypeError, ValueError) as e:
            logger.error("Condition evaluation failed for permission %s: %s", self.rule_id, e)
            return self.inverted


class RuleAbility:
    """Immutable evaluator over registered ability rules."""

    def __init__(self, rules: Sequence[AbilityRule]) -> None:
        self._rules = tuple(rules)

    @property
    def rules(self) -> tuple[AbilityRule, ...]:
        return self._rules

    def rules_for(
        self, action: str, subject: str, field: str | None = None
    ) -> list[AbilityRule]:
        """Candidate rules, highest priority first."""
        return [
            rule
            for rule in reversed(self._rules)
            if rule.matches_action(action)
            and rule.matches_subject(subject)
            and rule.matches_field(field)
        ]

    def relevant_rule_for(
        self,
        action: str,
        subject: str,
        resource: Mapping[str, Any] | None = None,
        field: str | None = None,
    ) -> AbilityRule | None:
        for rule in self.rules_for(action, subject, field):
            if rule.matches_conditions(resource):
                return rule
        return None

    def can(
        self,
        action: str,
        subject: str,
        resource: Mapping[str, Any] | None = None,
        field: str | None = None,
    ) -> bool:
        rule = self.relevant_rule_for(action, subject, resource, field)
        return rule is not None and not rule.inverted

    def cannot(
        self,
        action: str,
        subject: str,
        resource: Mapping[str, Any] | None = None,
        field: str | None = None,
    ) -> bool:
        return not self.can(action, subject, resource, field)

    def can_all_fields(
        self,
        action: str,
        subject: str,
        fields: Sequence[str],
        resource: Mapping[str, Any] | None = None,
    ) -> bool:
        """Permitted only if every requested field is permitted on its own."""
        if not fields:
            return self.can(action, subject, resource)
        return all(self.can(action, subject, resource, f) for f in fields)

    def deny_reason(
        self,
        action: str,
        subject: str,
        resource: Mapping[str, Any] | None = None,
        fields: Sequence[str] = (),
    ) -> str | None:
        """Reason attached to the deny rule that decided a refusal, if any."""
        for field in fields or (None,):
            rule = self.relevant_rule_for(action, subject, resource, field)
            if rule is not None and rule.inverted and rule.reason:
                return rule.reason
        return None


def _expand(rule: Rule) -> list[AbilityRule]:
    """One registration per (action, subject) pair."""
    query = None
    if rule.conditions:
        check_query_operators(rule.conditions)
        query = Query(rule.conditions)
    fields = tuple(rule.fields) if rule.fields else None
    reason = (rule.reason or None) if rule.inverted else None
    return [
        AbilityRule(
            action=action,
            subject=subject,
            inverted=rule.inverted,
            fields=fields,
            conditions=rule.conditions,
            reason=reason,
            rule_id=rule.id,
            query=query,
        )
        for action in rule.actions
        for subject in (rule.subjects or [ANY_SUBJECT])
    ]


class RuleAbilityBuilder:
    """Builds a fresh RuleAbility per call; holds no state between builds."""

    def build(
        self,
        rules: Sequence[Rule],
        context: Mapping[str, Any] | None = None,
    ) -> RuleAbility:
        sanitized: dict[str, Any] | None = None
        if context is not None:
            validation = sanitize_context(context)
            if not validation.is_valid:
                logger.warning(
                    "Evaluation context sanitized, rejected: %s", "; ".join(validation.errors)
                )
            sanitized = validation.sanitized_context

        registered: list[AbilityRule] = []
        for rule in rules:
            try:
                effective = interpolate_rule(rule, sanitized) if sanitized is not None else rule
                registered.extend(_expand(effective))
            except Exception as e:
                logger.error("Skipping permission %s (%s): %s", rule.id, rule.name, e)
        return RuleAbility(registered)
