"""Domain value objects."""

from permset.domain.value_objects.authorization_mode import AuthorizationMode
from permset.domain.value_objects.permission_source import PermissionSource
from permset.domain.value_objects.principal import Principal
from permset.domain.value_objects.relation import Relation

__all__ = [
    "AuthorizationMode",
    "PermissionSource",
    "Principal",
    "Relation",
]
