"""Checks that depend on the configured authorization mode."""

from typing import Any

from permset.domain.exceptions import ValidationFailed
from permset.domain.services.template_policy import invalid_condition_templates
from permset.domain.value_objects import AuthorizationMode, Principal


def check_organization_scope(mode: AuthorizationMode, organization_id: str | None) -> None:
    """organization_id: absent in user mode, required in member mode, optional in both."""
    if mode is AuthorizationMode.USER and organization_id is not None:
        raise ValidationFailed(
            "organization_id is not supported in user authorization mode",
            field="organization_id",
        )
    if mode is AuthorizationMode.MEMBER and not organization_id:
        raise ValidationFailed(
            "organization_id is required in member authorization mode",
            field="organization_id",
        )


def check_principal_enabled(mode: AuthorizationMode, principal: Principal) -> None:
    if principal is Principal.USER and not mode.includes_users:
        raise ValidationFailed(
            f"User assignments are not available in {mode} authorization mode", field="ids"
        )
    if principal is Principal.MEMBER and not mode.includes_members:
        raise ValidationFailed(
            f"Member assignments are not available in {mode} authorization mode", field="ids"
        )


def check_condition_templates(conditions: Any) -> None:
    invalid = invalid_condition_templates(conditions)
    if invalid:
        raise ValidationFailed(
            code="INVALID_TEMPLATE_STRING",
            field="conditions",
            details={"templates": invalid},
        )
