"""Conversion between stored permission rows and their in-memory forms.

Stored rows keep ``fields`` and ``conditions`` (and list-valued ``action`` /
``subject``) as JSON text. Decoding never raises: a corrupt optional column
is logged and treated as absent so the rest of the rule stays usable.
"""

import json
import logging
import re
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from permset.domain.entities import Permission, PermissionSet, Rule
from permset.domain.value_objects import PermissionSource

logger = logging.getLogger(__name__)

_ISO_8601_UTC = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?Z$")
_JSON_COLUMNS = ("fields", "conditions")
_VERB_COLUMNS = ("action", "subject")


def _revive(value: Any) -> Any:
    if isinstance(value, str) and _ISO_8601_UTC.match(value):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, list):
        return [_revive(v) for v in value]
    return value


def _revive_object(obj: dict[str, Any]) -> dict[str, Any]:
    return {k: _revive(v) for k, v in obj.items()}


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(UTC)
        return value.strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z"
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def safe_json_parse(data: Any, context: str | None = None) -> Any:
    """Decode a JSON column; ``None`` on absence or parse failure.

    Already-decoded values (dicts, lists, scalars) pass through unchanged.
    UTC ISO-8601 strings inside the document come back as ``datetime``.
    """
    if data is None:
        return None
    if not isinstance(data, str):
        return data
    if not data.strip():
        return None
    try:
        return _revive(json.loads(data, object_hook=_revive_object))
    except ValueError as e:
        logger.error(
            "Error parsing JSON%s: %s (data=%r)",
            f" in {context}" if context else "",
            e,
            data[:100],
        )
        return None


def _decode_fields(raw: Any, context: str) -> list[str] | None:
    value = safe_json_parse(raw, context)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(f, str) for f in value):
        logger.error("Ignoring malformed fields in %s: expected a list of strings", context)
        return None
    return value


def _decode_conditions(raw: Any, context: str) -> dict[str, Any] | None:
    value = safe_json_parse(raw, context)
    if value is None:
        return None
    if not isinstance(value, dict):
        logger.error("Ignoring malformed conditions in %s: expected an object", context)
        return None
    return value


def _decode_verbs(raw: Any) -> str | list[str] | None:
    """Action/subject column: plain text, or a JSON array for multi-valued rules."""
    if raw is None or raw == "":
        return None
    if isinstance(raw, list):
        return list(raw)
    if isinstance(raw, str) and raw.startswith("["):
        value = safe_json_parse(raw)
        if isinstance(value, list) and all(isinstance(v, str) for v in value):
            return value
    return raw


def to_rule(stored: Mapping[str, Any], source: PermissionSource) -> Rule:
    """Map a stored permission row plus its source tag to a canonical rule."""
    context = f"permission {stored.get('id')}"
    return Rule(
        id=str(stored["id"]),
        name=stored.get("name") or "",
        action=_decode_verbs(stored.get("action")) or "",
        subject=_decode_verbs(stored.get("subject")),
        inverted=bool(stored.get("inverted") or False),
        source=source,
        created_at=stored.get("created_at"),
        fields=_decode_fields(stored.get("fields"), context),
        conditions=_decode_conditions(stored.get("conditions"), context),
        reason=stored.get("reason") or "",
        organization_id=stored.get("organization_id"),
        updated_at=stored.get("updated_at"),
        expires_at=stored.get("expires_at"),
    )


def permission_from_storage(stored: Mapping[str, Any]) -> Permission:
    """Map a stored permission row to the entity with decoded JSON columns."""
    context = f"permission {stored.get('id')}"
    return Permission(
        id=str(stored["id"]),
        name=stored.get("name") or "",
        action=_decode_verbs(stored.get("action")) or "",
        subject=_decode_verbs(stored.get("subject")),
        created_at=stored.get("created_at"),
        inverted=bool(stored.get("inverted") or False),
        fields=_decode_fields(stored.get("fields"), context),
        conditions=_decode_conditions(stored.get("conditions"), context),
        reason=stored.get("reason"),
        organization_id=stored.get("organization_id"),
        updated_at=stored.get("updated_at"),
        expires_at=stored.get("expires_at"),
    )


def permission_to_storage(values: Mapping[str, Any]) -> dict[str, Any]:
    """Encode the JSON columns of a (possibly partial) permission mapping.

    Only keys present in ``values`` are emitted, so the result doubles as a
    partial update payload.
    """
    data = dict(values)
    for key in _JSON_COLUMNS:
        if key in data and data[key] is not None:
            data[key] = json.dumps(data[key], default=_json_default)
    for key in _VERB_COLUMNS:
        if isinstance(data.get(key), list):
            data[key] = json.dumps(data[key])
    return data


def permission_set_from_storage(stored: Mapping[str, Any]) -> PermissionSet:
    return PermissionSet(
        id=str(stored["id"]),
        name=stored.get("name") or "",
        created_at=stored.get("created_at"),
        description=stored.get("description"),
        organization_id=stored.get("organization_id"),
        updated_at=stored.get("updated_at"),
    )
