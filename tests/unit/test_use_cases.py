"""Unit tests for use cases over the store-backed repositories."""

from datetime import UTC, datetime, timedelta

import pytest

from permset.application.dto.authorization_dto import CheckPermissionInput
from permset.application.dto.pagination import ListQuery
from permset.application.dto.permission_dto import (
    PermissionCreateInput,
    PermissionUpdateInput,
)
from permset.application.dto.permission_set_dto import PermissionSetCreateInput
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
from permset.application.use_cases.permission_set.manage_set_permissions import (
    ManageSetPermissionsUseCase,
)
from permset.domain.exceptions import (
    Conflict,
    Forbidden,
    NotFound,
    Unauthorized,
    ValidationFailed,
)
from permset.domain.value_objects import AuthorizationMode, Principal, Relation
from permset.infrastructure.auth.membership_resolver import StoreMembershipResolver
from permset.infrastructure.permission.ability import RuleAbilityBuilder
from permset.infrastructure.persistence.assignment import AssignmentManager
from permset.infrastructure.persistence.permission_repository import StorePermissionRepository
from permset.infrastructure.persistence.permission_set_repository import (
    StorePermissionSetRepository,
)
from permset.infrastructure.persistence.relations import RelationLoader
from permset.infrastructure.persistence.rule_source_repository import (
    StoreRuleSourceRepository,
)

from tests.conftest import FakeStoreAdapter, permission_row


def _permissions(store: FakeStoreAdapter) -> StorePermissionRepository:
    return StorePermissionRepository(store, AssignmentManager(store), RelationLoader(store))


def _permission_sets(store: FakeStoreAdapter) -> StorePermissionSetRepository:
    return StorePermissionSetRepository(store, AssignmentManager(store), RelationLoader(store))


def _aggregator(store: FakeStoreAdapter) -> PermissionAggregator:
    return PermissionAggregator(StoreRuleSourceRepository(RelationLoader(store)))


# --- CreatePermissionsUseCase ---


@pytest.mark.asyncio
async def test_create_many_in_one_transaction(store: FakeStoreAdapter) -> None:
    use_case = CreatePermissionsUseCase(_permissions(store), AuthorizationMode.USER)
    created = await use_case.execute(
        [
            PermissionCreateInput(name="read posts", action="read", subject="Post"),
            PermissionCreateInput(
                name="edit own", action=["update", "delete"], subject="Post",
                conditions={"author_id": "{{user.id}}"},
            ),
        ]
    )
    assert [p.name for p in created] == ["read posts", "edit own"]
    assert created[1].action == ["update", "delete"]
    assert created[1].conditions == {"author_id": "{{user.id}}"}
    assert all(p.id and p.created_at for p in created)
    assert store.transactions == 1


@pytest.mark.asyncio
async def test_create_rolls_back_on_duplicate(store: FakeStoreAdapter) -> None:
    store.seed(Relation.PERMISSION, permission_row("taken"))
    use_case = CreatePermissionsUseCase(_permissions(store), AuthorizationMode.USER)
    with pytest.raises(Conflict) as exc:
        await use_case.execute(
            [
                PermissionCreateInput(name="fresh", action="read", subject="Post"),
                PermissionCreateInput(id="taken", name="dup", action="read", subject="Post"),
            ]
        )
    assert exc.value.code == "DUPLICATE_ENTRY"
    assert [r["id"] for r in store.rows(Relation.PERMISSION)] == ["taken"]


@pytest.mark.asyncio
async def test_create_checks_organization_against_mode(store: FakeStoreAdapter) -> None:
    user_mode = CreatePermissionsUseCase(_permissions(store), AuthorizationMode.USER)
    with pytest.raises(ValidationFailed) as exc:
        await user_mode.execute(
            [PermissionCreateInput(name="x", action="read", subject="Post", organization_id="o1")]
        )
    assert exc.value.field == "organization_id"

    member_mode = CreatePermissionsUseCase(_permissions(store), AuthorizationMode.MEMBER)
    with pytest.raises(ValidationFailed):
        await member_mode.execute([PermissionCreateInput(name="x", action="read")])
    assert store.rows(Relation.PERMISSION) == []


@pytest.mark.asyncio
async def test_create_rejects_unsafe_templates(store: FakeStoreAdapter) -> None:
    use_case = CreatePermissionsUseCase(_permissions(store), AuthorizationMode.BOTH)
    with pytest.raises(ValidationFailed) as exc:
        await use_case.execute(
            [
                PermissionCreateInput(
                    name="x", action="read", subject="Post",
                    conditions={"owner": "{{process.env.SECRET}}"},
                )
            ]
        )
    assert exc.value.code == "INVALID_TEMPLATE_STRING"
    assert exc.value.field == "conditions"


# --- Get / list / update / delete permission ---


@pytest.mark.asyncio
async def test_get_permission_with_includes(store: FakeStoreAdapter) -> None:
    store.seed(Relation.PERMISSION, permission_row("p1"))
    store.seed(Relation.USER, {"id": "u1", "email": "a@example.com"})
    store.seed(Relation.USER_PERMISSION, {"user_id": "u1", "permission_id": "p1"})
    details = await GetPermissionUseCase(_permissions(store)).execute(
        "p1", include_users=True, include_permission_sets=True
    )
    assert details.permission.id == "p1"
    assert details.users == [{"id": "u1", "email": "a@example.com"}]
    assert details.permission_sets == []
    assert details.members is None


@pytest.mark.asyncio
async def test_get_missing_permission(store: FakeStoreAdapter) -> None:
    with pytest.raises(NotFound) as exc:
        await GetPermissionUseCase(_permissions(store)).execute("nope")
    assert exc.value.code == "PERMISSION_NOT_FOUND"


@pytest.mark.asyncio
async def test_find_permission_by_name(store: FakeStoreAdapter) -> None:
    store.seed(
        Relation.PERMISSION,
        permission_row("p1", name="admin", organization_id="o1"),
        permission_row("p2", name="admin", organization_id="o2"),
    )
    found = await GetPermissionUseCase(_permissions(store)).by_name("admin", "o2")
    assert found.id == "p2"


@pytest.mark.asyncio
async def test_list_paginates_newest_first_without_expired(store: FakeStoreAdapter) -> None:
    base = datetime(2025, 1, 1, tzinfo=UTC)
    store.seed(
        Relation.PERMISSION,
        *(permission_row(f"p{i}", created_at=base + timedelta(days=i)) for i in range(5)),
        permission_row("old", created_at=base, expires_at=datetime.now(UTC) - timedelta(days=1)),
    )
    use_case = ListPermissionsUseCase(_permissions(store))
    page = await use_case.execute(ListQuery(limit=2, page=2))
    assert [d.permission.id for d in page.items] == ["p2", "p1"]
    assert page.pagination() == {
        "current_page": 2,
        "total": 5,
        "total_pages": 3,
        "has_next": True,
        "has_prev": True,
    }
    everything = await use_case.execute(ListQuery(limit=10, include_expired=True))
    assert everything.total == 6


@pytest.mark.asyncio
async def test_list_search_by_name(store: FakeStoreAdapter) -> None:
    store.seed(
        Relation.PERMISSION,
        permission_row("p1", name="read posts"),
        permission_row("p2", name="delete users"),
    )
    page = await ListPermissionsUseCase(_permissions(store)).execute(
        ListQuery(limit=10, search="posts")
    )
    assert [d.permission.id for d in page.items] == ["p1"]


@pytest.mark.asyncio
async def test_partial_update_keeps_other_fields(store: FakeStoreAdapter) -> None:
    store.seed(Relation.PERMISSION, permission_row("p1", reason="keep me"))
    store.seed(Relation.USER_PERMISSION, {"user_id": "u1", "permission_id": "p1"})
    use_case = UpdatePermissionUseCase(_permissions(store), AuthorizationMode.USER)
    updated = await use_case.execute("p1", PermissionUpdateInput(fields=["title"]))
    assert updated.fields == ["title"]
    assert updated.reason == "keep me"
    assert updated.updated_at is not None
    assert len(store.rows(Relation.USER_PERMISSION)) == 1


@pytest.mark.asyncio
async def test_update_rejects_null_required_field(store: FakeStoreAdapter) -> None:
    store.seed(Relation.PERMISSION, permission_row("p1"))
    use_case = UpdatePermissionUseCase(_permissions(store), AuthorizationMode.USER)
    with pytest.raises(ValidationFailed):
        await use_case.execute("p1", PermissionUpdateInput(name=None))


@pytest.mark.asyncio
async def test_update_missing_permission(store: FakeStoreAdapter) -> None:
    use_case = UpdatePermissionUseCase(_permissions(store), AuthorizationMode.USER)
    with pytest.raises(NotFound):
        await use_case.execute("nope", PermissionUpdateInput(reason="x"))


@pytest.mark.asyncio
async def test_delete_one_and_many(store: FakeStoreAdapter) -> None:
    store.seed(
        Relation.PERMISSION, permission_row("p1"), permission_row("p2"), permission_row("p3")
    )
    store.seed(Relation.USER_PERMISSION, {"user_id": "u1", "permission_id": "p1"})
    use_case = DeletePermissionsUseCase(_permissions(store))
    await use_case.execute_one("p1")
    assert store.rows(Relation.USER_PERMISSION) == []
    with pytest.raises(NotFound):
        await use_case.execute_one("p1")
    assert await use_case.execute(["p2", "p3", "ghost"]) == 2
    assert store.rows(Relation.PERMISSION) == []


# --- Assignment use cases ---


@pytest.mark.asyncio
async def test_assign_and_revoke_users(store: FakeStoreAdapter) -> None:
    store.seed(Relation.PERMISSION, permission_row("p1"))
    repo = _permissions(store)
    assign = AssignPermissionUseCase(repo, AuthorizationMode.USER)
    assert await assign.execute("p1", Principal.USER, ["u1", "u2", "u1"]) == 2
    assert await assign.execute("p1", Principal.USER, ["u1"]) == 1
    assert len(store.rows(Relation.USER_PERMISSION)) == 2
    await RevokePermissionUseCase(repo, AuthorizationMode.USER).execute(
        "p1", Principal.USER, ["u2"]
    )
    assert store.rows(Relation.USER_PERMISSION) == [{"permission_id": "p1", "user_id": "u1"}]


@pytest.mark.asyncio
async def test_assign_member_rejected_in_user_mode(store: FakeStoreAdapter) -> None:
    store.seed(Relation.PERMISSION, permission_row("p1"))
    assign = AssignPermissionUseCase(_permissions(store), AuthorizationMode.USER)
    with pytest.raises(ValidationFailed):
        await assign.execute("p1", Principal.MEMBER, ["m1"])


@pytest.mark.asyncio
async def test_assign_unknown_permission(store: FakeStoreAdapter) -> None:
    assign = AssignPermissionUseCase(_permissions(store), AuthorizationMode.BOTH)
    with pytest.raises(NotFound):
        await assign.execute("nope", Principal.MEMBER, ["m1"])


# --- Permission set use cases ---


@pytest.mark.asyncio
async def test_permission_set_lifecycle(store: FakeStoreAdapter) -> None:
    store.seed(Relation.PERMISSION, permission_row("p1"), permission_row("p2"))
    repo = _permission_sets(store)
    [created] = await CreatePermissionSetsUseCase(repo, AuthorizationMode.USER).execute(
        [PermissionSetCreateInput(name="editors")]
    )
    manage = ManageSetPermissionsUseCase(repo)
    assert await manage.add(created.id, ["p1", "p2"]) == 2
    await AssignPermissionSetUseCase(repo, AuthorizationMode.USER).execute(
        created.id, Principal.USER, ["u1"]
    )
    details = await GetPermissionSetUseCase(repo).execute(
        created.id, include_permissions=True, include_users=True
    )
    assert sorted(p.id for p in details.permissions) == ["p1", "p2"]
    assert details.users == []  # the user row lives in the identity service

    await manage.remove(created.id, ["p2"])
    assert len(store.rows(Relation.PERMISSION_PERMISSION_SET)) == 1

    await DeletePermissionSetsUseCase(repo).execute_one(created.id)
    assert store.rows(Relation.PERMISSION_SET) == []
    assert store.rows(Relation.PERMISSION_PERMISSION_SET) == []
    assert store.rows(Relation.USER_PERMISSION_SET) == []
    assert len(store.rows(Relation.PERMISSION)) == 2


@pytest.mark.asyncio
async def test_missing_permission_set(store: FakeStoreAdapter) -> None:
    with pytest.raises(NotFound) as exc:
        await GetPermissionSetUseCase(_permission_sets(store)).execute("nope")
    assert exc.value.code == "PERMISSION_SET_NOT_FOUND"
    with pytest.raises(NotFound):
        await ManageSetPermissionsUseCase(_permission_sets(store)).add("nope", ["p1"])


# --- CheckPermissionUseCase ---


@pytest.fixture
def authored(store: FakeStoreAdapter) -> FakeStoreAdapter:
    store.seed(
        Relation.PERMISSION,
        permission_row("read", action="read", subject="Post"),
        permission_row(
            "edit-own",
            action="update",
            subject="Post",
            conditions='{"author_id": "{{user.id}}"}',
        ),
        permission_row(
            "no-delete", action="delete", subject="Post", inverted=True, reason="Posts are kept"
        ),
    )
    store.seed(
        Relation.USER_PERMISSION,
        {"user_id": "u1", "permission_id": "read"},
        {"user_id": "u1", "permission_id": "edit-own"},
        {"user_id": "u1", "permission_id": "no-delete"},
    )
    return store


def _check(store: FakeStoreAdapter, builder=None) -> CheckPermissionUseCase:
    return CheckPermissionUseCase(
        _aggregator(store), builder or RuleAbilityBuilder(), AuthorizationMode.USER
    )


@pytest.mark.asyncio
async def test_check_allows_with_meta(authored) -> None:
    result = await _check(authored).execute(
        CheckPermissionInput(action="read", subject="Post", user_id="u1")
    )
    assert result.allowed
    assert result.reason is None
    assert result.meta == {"has_permissions": True, "source": "ability", "total_permissions": 3}


@pytest.mark.asyncio
async def test_check_conditions_use_session_user(authored) -> None:
    use_case = _check(authored)
    own = CheckPermissionInput(action="update", subject="Post", resource={"author_id": "u1"})
    other = CheckPermissionInput(action="update", subject="Post", resource={"author_id": "u2"})
    assert (await use_case.execute(own, {"id": "u1"})).allowed
    denied = await use_case.execute(other, {"id": "u1"})
    assert not denied.allowed
    assert denied.reason == "Access denied for action 'update' on 'Post'"


@pytest.mark.asyncio
async def test_check_reports_deny_reason(authored) -> None:
    result = await _check(authored).execute(
        CheckPermissionInput(action="delete", subject="Post", user_id="u1")
    )
    assert not result.allowed
    assert result.reason == "Posts are kept"


@pytest.mark.asyncio
async def test_check_without_rules(store: FakeStoreAdapter) -> None:
    result = await _check(store).execute(
        CheckPermissionInput(action="read", subject="Post", user_id="ghost")
    )
    assert not result.allowed
    assert result.meta["has_permissions"] is False


@pytest.mark.asyncio
async def test_check_evaluation_failure_denies(authored) -> None:
    class BrokenBuilder:
        def build(self, rules, context=None):
            raise RuntimeError("engine down")

    result = await _check(authored, BrokenBuilder()).execute(
        CheckPermissionInput(action="read", subject="Post", user_id="u1")
    )
    assert not result.allowed
    assert result.reason == "Permission evaluation failed"


# --- GetAbilityUseCase ---


@pytest.mark.asyncio
async def test_ability_requires_session(store: FakeStoreAdapter) -> None:
    use_case = GetAbilityUseCase(
        _aggregator(store), StoreMembershipResolver(store), AuthorizationMode.USER
    )
    with pytest.raises(Unauthorized):
        await use_case.execute(None)


@pytest.mark.asyncio
async def test_ability_member_mode_needs_membership(store: FakeStoreAdapter) -> None:
    use_case = GetAbilityUseCase(
        _aggregator(store), StoreMembershipResolver(store), AuthorizationMode.MEMBER
    )
    with pytest.raises(Forbidden):
        await use_case.execute("u1", "org-1")


@pytest.mark.asyncio
async def test_ability_resolves_member(store: FakeStoreAdapter) -> None:
    store.seed(Relation.MEMBER, {"id": "m1", "user_id": "u1", "organization_id": "org-1"})
    store.seed(Relation.PERMISSION, permission_row("p1", organization_id="org-1"))
    store.seed(Relation.MEMBER_PERMISSION, {"member_id": "m1", "permission_id": "p1"})
    use_case = GetAbilityUseCase(
        _aggregator(store), StoreMembershipResolver(store), AuthorizationMode.MEMBER
    )
    snapshot = await use_case.execute("u1", "org-1")
    assert snapshot.member_id == "m1"
    assert [r.id for r in snapshot.rules] == ["p1"]
