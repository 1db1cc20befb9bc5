"""Application ports - interfaces for external adapters."""

from permset.application.ports.ability import Ability, AbilityBuilder
from permset.application.ports.store_adapter import (
    SortBy,
    StoreAdapter,
    TransactionalStoreAdapter,
    Where,
)

__all__ = [
    "Ability",
    "AbilityBuilder",
    "SortBy",
    "StoreAdapter",
    "TransactionalStoreAdapter",
    "Where",
]
