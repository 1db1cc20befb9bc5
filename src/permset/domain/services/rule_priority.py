"""Deterministic priority ordering of aggregated rules.

The evaluator applies rules in list order and the last applicable rule wins,
so rules that must be able to override others go later. The cascade:

1. Source rank: member set < member direct < user set < user direct.
   Organization-wide set grants are laid down first; explicit user grants last.
2. Allow before deny within a source, so a deny can subtract from a grant.
3. General before specific: specificity = 2 * has conditions + 1 * has fields.
4. Older before newer (``updated_at`` falling back to ``created_at``).
5. Id, lexically.

This ranking is client-visible authorization behavior; keep the table as is.
"""

from collections.abc import Iterable
from datetime import datetime

from permset.domain.entities import Rule


def specificity(rule: Rule) -> int:
    """2 for non-empty conditions plus 1 for non-empty fields."""
    score = 0
    if rule.conditions:
        score += 2
    if rule.fields:
        score += 1
    return score


def _timestamp(rule: Rule) -> float:
    moment: datetime | None = rule.updated_at or rule.created_at
    return moment.timestamp() if moment is not None else 0.0


def priority_key(rule: Rule) -> tuple[int, bool, int, float, str]:
    """Sort key; a total order for rules with distinct ids."""
    return (
        rule.source.rank,
        rule.inverted,
        specificity(rule),
        _timestamp(rule),
        rule.id,
    )


def sort_rules_by_priority(rules: Iterable[Rule]) -> list[Rule]:
    """Return a new list ordered lowest to highest priority."""
    return sorted(rules, key=priority_key)
