"""Falcon ASGI application - route table."""

from dataclasses import dataclass

import falcon.asgi

from permset.interfaces.api.errors import register_error_handlers
from permset.interfaces.api.resources.authorization import (
    AbilityResource,
    CheckPermissionResource,
)
from permset.interfaces.api.resources.health import HealthResource
from permset.interfaces.api.resources.permission_sets import (
    PermissionSetAssigneesResource,
    PermissionSetResource,
    PermissionSetsDeleteResource,
    PermissionSetsResource,
)
from permset.interfaces.api.resources.permissions import (
    PermissionAssigneesResource,
    PermissionResource,
    PermissionsDeleteResource,
    PermissionsResource,
)


@dataclass
class Resources:
    health: HealthResource
    check_permission: CheckPermissionResource
    ability: AbilityResource
    permissions: PermissionsResource
    permissions_delete: PermissionsDeleteResource
    permission: PermissionResource
    permission_assignees: PermissionAssigneesResource
    permission_sets: PermissionSetsResource
    permission_sets_delete: PermissionSetsDeleteResource
    permission_set: PermissionSetResource
    permission_set_assignees: PermissionSetAssigneesResource


def create_app(resources: Resources, middleware: list | None = None) -> falcon.asgi.App:
    """Create Falcon ASGI app with routes and error handlers."""
    app = falcon.asgi.App(middleware=middleware or [])
    register_error_handlers(app)
    app.add_route("/v1/health", resources.health)
    app.add_route("/v1/health/ready", resources.health, suffix="ready")
    app.add_route("/v1/check-permission", resources.check_permission)
    app.add_route("/v1/ability", resources.ability)
    app.add_route("/v1/permissions", resources.permissions)
    app.add_route("/v1/permissions/delete", resources.permissions_delete)
    app.add_route("/v1/permissions/{permission_id}", resources.permission)
    app.add_route("/v1/permissions/{permission_id}/{assignee}", resources.permission_assignees)
    app.add_route("/v1/permission-sets", resources.permission_sets)
    app.add_route("/v1/permission-sets/delete", resources.permission_sets_delete)
    app.add_route("/v1/permission-sets/{permission_set_id}", resources.permission_set)
    app.add_route(
        "/v1/permission-sets/{permission_set_id}/{assignee}",
        resources.permission_set_assignees,
    )
    return app
