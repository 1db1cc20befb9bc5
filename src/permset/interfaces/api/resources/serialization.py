"""Response bodies and shared request parsing for the API resources."""

from datetime import datetime
from typing import Any

import falcon
import falcon.asgi

from permset.application.dto.pagination import ListQuery, Page
from permset.application.dto.permission_dto import PermissionDetails
from permset.application.dto.permission_set_dto import PermissionSetDetails
from permset.domain.entities import Permission, PermissionSet, Rule


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _plain(row: dict[str, Any]) -> dict[str, Any]:
    return {k: _iso(v) if isinstance(v, datetime) else v for k, v in row.items()}


def permission_to_dict(p: Permission) -> dict[str, Any]:
    return {
        "id": p.id,
        "name": p.name,
        "action": p.action,
        "subject": p.subject,
        "inverted": p.inverted,
        "fields": p.fields,
        "conditions": p.conditions,
        "reason": p.reason,
        "organization_id": p.organization_id,
        "created_at": _iso(p.created_at),
        "updated_at": _iso(p.updated_at),
        "expires_at": _iso(p.expires_at),
    }


def permission_set_to_dict(s: PermissionSet) -> dict[str, Any]:
    return {
        "id": s.id,
        "name": s.name,
        "description": s.description,
        "organization_id": s.organization_id,
        "created_at": _iso(s.created_at),
        "updated_at": _iso(s.updated_at),
    }


def rule_to_dict(r: Rule) -> dict[str, Any]:
    return {
        "id": r.id,
        "name": r.name,
        "action": r.action,
        "subject": r.subject,
        "inverted": r.inverted,
        "fields": r.fields,
        "conditions": r.conditions,
        "reason": r.reason,
        "source": str(r.source),
        "organization_id": r.organization_id,
        "expires_at": _iso(r.expires_at),
    }


def permission_details_to_dict(d: PermissionDetails) -> dict[str, Any]:
    body = permission_to_dict(d.permission)
    if d.permission_sets is not None:
        body["permission_sets"] = [permission_set_to_dict(s) for s in d.permission_sets]
    if d.users is not None:
        body["users"] = [_plain(u) for u in d.users]
    if d.members is not None:
        body["members"] = [_plain(m) for m in d.members]
    return body


def permission_set_details_to_dict(d: PermissionSetDetails) -> dict[str, Any]:
    body = permission_set_to_dict(d.permission_set)
    if d.permissions is not None:
        body["permissions"] = [permission_to_dict(p) for p in d.permissions]
    if d.users is not None:
        body["users"] = [_plain(u) for u in d.users]
    if d.members is not None:
        body["members"] = [_plain(m) for m in d.members]
    return body


def page_to_dict(page: Page, item_to_dict) -> dict[str, Any]:
    return {
        "items": [item_to_dict(item) for item in page.items],
        "pagination": page.pagination(),
    }


def includes(req: falcon.asgi.Request, allowed: tuple[str, ...]) -> dict[str, bool]:
    """``?include=a,b`` as ``include_a=True`` keyword arguments."""
    requested = set(req.get_param_as_list("include") or [])
    unknown = requested - set(allowed)
    if unknown:
        raise falcon.HTTPBadRequest(
            title="Invalid include", description=f"Unknown include: {', '.join(sorted(unknown))}"
        )
    return {f"include_{name}": name in requested for name in allowed}


def list_query(req: falcon.asgi.Request, default_limit: int, max_limit: int) -> ListQuery:
    limit = req.get_param_as_int("limit", min_value=1) or default_limit
    page = req.get_param_as_int("page", min_value=1) or 1
    return ListQuery(
        limit=min(limit, max_limit),
        page=page,
        search=req.get_param("search"),
        organization_id=req.get_param("organization_id"),
        include_expired=req.get_param_as_bool("include_expired") or False,
    )
