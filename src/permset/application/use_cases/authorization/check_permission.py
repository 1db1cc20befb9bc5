"""Check permission use case."""

import logging
from collections.abc import Mapping
from typing import Any

from permset.application.dto.authorization_dto import (
    CheckPermissionInput,
    CheckPermissionResult,
)
from permset.application.ports import AbilityBuilder
from permset.application.services.permission_aggregator import PermissionAggregator
from permset.domain.value_objects import AuthorizationMode

logger = logging.getLogger(__name__)

ACCESS_DENIED = "Access denied for action '{action}' on '{subject}'"
EVALUATION_FAILED = "Permission evaluation failed"


class CheckPermissionUseCase:
    """Aggregate, build an ability for the identity, and evaluate one request."""

    def __init__(
        self,
        aggregator: PermissionAggregator,
        ability_builder: AbilityBuilder,
        mode: AuthorizationMode,
    ) -> None:
        self._aggregator = aggregator
        self._ability_builder = ability_builder
        self._mode = mode

    async def execute(
        self,
        request: CheckPermissionInput,
        session_user: Mapping[str, Any] | None = None,
    ) -> CheckPermissionResult:
        """Evaluate ``request``; store failures propagate, evaluation failures deny."""
        user_id = request.user_id or (session_user or {}).get("id")
        rules = await self._aggregator.aggregate(self._mode, user_id, request.member_id)
        meta = {
            "has_permissions": bool(rules),
            "source": "ability",
            "total_permissions": len(rules),
        }

        context: dict[str, Any] = {
            "user": dict(session_user) if session_user else {"id": user_id},
            "resource": request.resource,
        }
        if request.member_id:
            context["member"] = {"id": request.member_id}
        context.update(request.context or {})

        fields = request.fields or []
        try:
            ability = self._ability_builder.build(rules, context)
            allowed = ability.can_all_fields(
                request.action, request.subject, fields, request.resource
            )
            reason = None
            if not allowed:
                reason = ability.deny_reason(
                    request.action, request.subject, request.resource, fields
                ) or ACCESS_DENIED.format(action=request.action, subject=request.subject)
        except Exception:
            logger.exception(
                "Permission evaluation failed for %s on %s", request.action, request.subject
            )
            return CheckPermissionResult(allowed=False, reason=EVALUATION_FAILED, meta=meta)

        return CheckPermissionResult(allowed=allowed, reason=reason, meta=meta)
