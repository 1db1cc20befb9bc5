"""Template interpolation of rule conditions against an evaluation context.

Condition leaves such as ``{"author_id": "{{user.id}}"}`` are rendered with a
jinja2 sandbox limited to mapping lookups: no attribute access, calls,
filters or statements. Every failure falls back to the literal string; nothing
here raises.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Any

from jinja2 import ChainableUndefined, Template, Undefined
from jinja2.sandbox import SandboxedEnvironment

from permset.domain.entities import Rule
from permset.domain.services.template_policy import (
    DANGEROUS_KEYS,
    template_errors,
    validate_template_variables,
)

logger = logging.getLogger(__name__)

__all__ = [
    "DANGEROUS_KEYS",
    "ContextValidation",
    "interpolate_conditions",
    "interpolate_rule",
    "sanitize_context",
    "validate_template_variables",
]


class _LookupOnlyEnvironment(SandboxedEnvironment):
    """Sandbox that resolves ``a.b`` only as a key lookup on mappings."""

    def getattr(self, obj: Any, attribute: str) -> Any:
        return self.getitem(obj, attribute)

    def getitem(self, obj: Any, argument: Any) -> Any:
        if isinstance(obj, Mapping) and argument in obj:
            return obj[argument]
        return self.undefined(obj=obj, name=argument)


def _finalize(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str | int | float | Undefined):
        return value
    # Mappings, lists and objects have no textual form in a query value.
    logger.warning("Template placeholder resolved to %s, rendered empty", type(value).__name__)
    return ""


_env = _LookupOnlyEnvironment(
    autoescape=False,
    undefined=ChainableUndefined,
    finalize=_finalize,
    keep_trailing_newline=True,
)
# Placeholders resolve against the evaluation context only.
_env.globals.clear()


@lru_cache(maxsize=512)
def _compile(template: str) -> Template:
    return _env.from_string(template)


def _interpolate_string(value: str, context: Mapping[str, Any]) -> str:
    if "{{" not in value:
        return value
    errors = template_errors(value)
    if errors:
        logger.error("Template validation failed for %r: %s", value, "; ".join(errors))
        return value
    try:
        rendered = _compile(value).render(dict(context))
    except Exception as e:
        logger.error("Template interpolation failed for %r: %s", value, e)
        return value
    if not isinstance(rendered, str):
        logger.error(
            "Template interpolation produced %s for %r", type(rendered).__name__, value
        )
        return value
    return rendered


def interpolate_conditions(value: Any, context: Mapping[str, Any]) -> Any:
    """Recursively render string leaves; drop dangerous mapping keys."""
    if value is None:
        return None
    if isinstance(value, str):
        return _interpolate_string(value, context)
    if isinstance(value, list):
        return [interpolate_conditions(item, context) for item in value]
    if isinstance(value, Mapping):
        result: dict[str, Any] = {}
        for key, item in value.items():
            if key in DANGEROUS_KEYS:
                logger.error("Dropping dangerous key %r from conditions", key)
                continue
            result[key] = interpolate_conditions(item, context)
        return result
    return value


def interpolate_rule(rule: Rule, context: Mapping[str, Any]) -> Rule:
    """Rule with interpolated conditions, or the rule unchanged on failure."""
    if not rule.conditions:
        return rule
    try:
        return replace(rule, conditions=interpolate_conditions(rule.conditions, context))
    except Exception as e:
        logger.error(
            "Template interpolation failed for permission %s (%s): %s", rule.id, rule.name, e
        )
        return rule


@dataclass
class ContextValidation:
    """Outcome of context sanitization."""

    is_valid: bool
    sanitized_context: dict[str, Any]
    errors: list[str] = field(default_factory=list)


def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, str | int | float | bool)


def _sanitize_mapping(
    obj: Mapping[str, Any], path: str, errors: list[str]
) -> dict[str, Any]:
    sanitized: dict[str, Any] = {}
    for key, value in obj.items():
        key_path = f"{path}.{key}"
        if key in DANGEROUS_KEYS:
            errors.append(f"Dangerous context key: {key_path}")
            continue
        if _is_scalar(value):
            sanitized[key] = value
        elif isinstance(value, Mapping):
            sanitized[key] = _sanitize_mapping(value, key_path, errors)
        else:
            errors.append(f"Invalid context value type for key {key_path}: {type(value).__name__}")
    return sanitized


def sanitize_context(context: Mapping[str, Any]) -> ContextValidation:
    """Strip dangerous keys and non-plain values from an evaluation context.

    The sanitized context is usable even when ``is_valid`` is false.
    """
    errors: list[str] = []
    sanitized: dict[str, Any] = {}
    for key, value in context.items():
        if not isinstance(key, str) or key in DANGEROUS_KEYS:
            errors.append(f"Dangerous context key: {key}")
            continue
        if _is_scalar(value):
            sanitized[key] = value
        elif isinstance(value, Mapping):
            sanitized[key] = _sanitize_mapping(value, key, errors)
        else:
            errors.append(f"Invalid context value type for key {key}: {type(value).__name__}")
    return ContextValidation(is_valid=not errors, sanitized_context=sanitized, errors=errors)
