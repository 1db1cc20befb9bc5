"""Application entry point and composition root."""

import asyncio
import logging

import falcon.asgi

from permset import __version__
from permset.application.services.permission_aggregator import PermissionAggregator
from permset.application.use_cases.authorization.check_permission import (
    CheckPermissionUseCase,
)
from permset.application.use_cases.authorization.get_ability import GetAbilityUseCase
from permset.application.use_cases.permission.assign_permission import AssignPermissionUseCase
from permset.application.use_cases.permission.create_permissions import (
    CreatePermissionsUseCase,
)
from permset.application.use_cases.permission.delete_permissions import (
    DeletePermissionsUseCase,
)
from permset.application.use_cases.permission.get_permission import GetPermissionUseCase
from permset.application.use_cases.permission.list_permissions import ListPermissionsUseCase
from permset.application.use_cases.permission.revoke_permission import RevokePermissionUseCase
from permset.application.use_cases.permission.update_permission import (
    UpdatePermissionUseCase,
)
from permset.application.use_cases.permission_set.assign_permission_set import (
    AssignPermissionSetUseCase,
)
from permset.application.use_cases.permission_set.create_permission_sets import (
    CreatePermissionSetsUseCase,
)
from permset.application.use_cases.permission_set.delete_permission_sets import (
    DeletePermissionSetsUseCase,
)
from permset.application.use_cases.permission_set.get_permission_set import (
    GetPermissionSetUseCase,
)
from permset.application.use_cases.permission_set.list_permission_sets import (
    ListPermissionSetsUseCase,
)
from permset.application.use_cases.permission_set.manage_set_permissions import (
    ManageSetPermissionsUseCase,
)
from permset.application.use_cases.permission_set.revoke_permission_set import (
    RevokePermissionSetUseCase,
)
from permset.application.use_cases.permission_set.update_permission_set import (
    UpdatePermissionSetUseCase,
)
from permset.config import Settings, get_settings
from permset.domain.value_objects import AuthorizationMode
from permset.infrastructure.auth.keycloak_provider import KeycloakProvider
from permset.infrastructure.auth.membership_resolver import StoreMembershipResolver
from permset.infrastructure.permission.ability import RuleAbilityBuilder
from permset.infrastructure.persistence.assignment import AssignmentManager
from permset.infrastructure.persistence.permission_repository import StorePermissionRepository
from permset.infrastructure.persistence.permission_set_repository import (
    StorePermissionSetRepository,
)
from permset.infrastructure.persistence.postgres.connection import create_pool
from permset.infrastructure.persistence.postgres.store_adapter import PostgresStoreAdapter
from permset.infrastructure.persistence.relations import RelationLoader
from permset.infrastructure.persistence.rule_source_repository import StoreRuleSourceRepository
from permset.interfaces.api.app import Resources, create_app
from permset.interfaces.api.middleware.auth import AuthMiddleware
from permset.interfaces.api.middleware.pool_lifespan import PoolLifespanMiddleware
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

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_resources(store, settings: Settings) -> Resources:
    """Wire repositories, use cases and resources over one store adapter."""
    mode = AuthorizationMode(settings.authorization_mode)
    assignments = AssignmentManager(store, chunk_size=settings.batch_chunk_size)
    relations = RelationLoader(
        store,
        chunk_size=settings.batch_chunk_size,
        max_relation_limit=settings.max_relation_limit,
    )
    permissions = StorePermissionRepository(store, assignments, relations)
    permission_sets = StorePermissionSetRepository(store, assignments, relations)
    aggregator = PermissionAggregator(StoreRuleSourceRepository(relations))

    delete_permissions = DeletePermissionsUseCase(permissions)
    delete_permission_sets = DeletePermissionSetsUseCase(permission_sets)
    limits = {
        "default_limit": settings.pagination_default_limit,
        "max_limit": settings.pagination_max_limit,
    }
    return Resources(
        health=HealthResource(store),
        check_permission=CheckPermissionResource(
            CheckPermissionUseCase(aggregator, RuleAbilityBuilder(), mode)
        ),
        ability=AbilityResource(
            GetAbilityUseCase(aggregator, StoreMembershipResolver(store), mode)
        ),
        permissions=PermissionsResource(
            ListPermissionsUseCase(permissions),
            CreatePermissionsUseCase(permissions, mode),
            **limits,
        ),
        permissions_delete=PermissionsDeleteResource(delete_permissions),
        permission=PermissionResource(
            GetPermissionUseCase(permissions),
            UpdatePermissionUseCase(permissions, mode),
            delete_permissions,
        ),
        permission_assignees=PermissionAssigneesResource(
            AssignPermissionUseCase(permissions, mode),
            RevokePermissionUseCase(permissions, mode),
        ),
        permission_sets=PermissionSetsResource(
            ListPermissionSetsUseCase(permission_sets),
            CreatePermissionSetsUseCase(permission_sets, mode),
            **limits,
        ),
        permission_sets_delete=PermissionSetsDeleteResource(delete_permission_sets),
        permission_set=PermissionSetResource(
            GetPermissionSetUseCase(permission_sets),
            UpdatePermissionSetUseCase(permission_sets, mode),
            delete_permission_sets,
        ),
        permission_set_assignees=PermissionSetAssigneesResource(
            ManageSetPermissionsUseCase(permission_sets),
            AssignPermissionSetUseCase(permission_sets, mode),
            RevokePermissionSetUseCase(permission_sets, mode),
        ),
    )


def create_permset_app(settings: Settings | None = None) -> falcon.asgi.App:
    """Composition root - build Falcon app with all dependencies."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    pool = create_pool(settings)
    store = PostgresStoreAdapter(pool)

    keycloak = (
        KeycloakProvider(
            server_url=settings.keycloak_url,
            realm=settings.keycloak_realm,
            client_id=settings.keycloak_client_id,
            client_secret=settings.keycloak_client_secret,
        )
        if settings.keycloak_client_secret
        else None
    )
    if keycloak is None:
        logger.warning("Keycloak client secret not set; requests carry no session user")

    logger.info(
        "permset v%s starting (authorization_mode=%s, environment=%s)",
        __version__,
        settings.authorization_mode,
        settings.environment,
    )
    return create_app(
        build_resources(store, settings),
        middleware=[
            PoolLifespanMiddleware(pool),
            AuthMiddleware(keycloak, settings.organization_header),
        ],
    )


async def run_server(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run uvicorn server."""
    import uvicorn

    app = create_permset_app()
    config = uvicorn.Config(app, host=host, port=port, lifespan="on")
    await uvicorn.Server(config).serve()


def main() -> None:
    """CLI entry point."""
    asyncio.run(run_server())
