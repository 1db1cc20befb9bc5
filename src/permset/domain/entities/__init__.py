"""Domain entities."""

from permset.domain.entities.permission import Permission
from permset.domain.entities.permission_set import PermissionSet
from permset.domain.entities.rule import Rule

__all__ = [
    "Permission",
    "PermissionSet",
    "Rule",
]
