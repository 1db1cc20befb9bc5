"""Repository ports."""

from permset.application.ports.repositories.permission_repository import (
    PermissionRepository,
)
from permset.application.ports.repositories.permission_set_repository import (
    PermissionSetRepository,
)
from permset.application.ports.repositories.rule_source_repository import (
    RuleSourceRepository,
)

__all__ = [
    "PermissionRepository",
    "PermissionSetRepository",
    "RuleSourceRepository",
]
