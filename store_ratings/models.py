from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet


class Role(str, Enum):
    USER = "user"
    STORE = "store"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: object) -> "Role":
        """Map a stored/claimed role string onto the enum (raises ValueError)."""
        if isinstance(value, cls):
            return value
        return cls(str(value or "").strip().lower())


class Operation(str, Enum):
    VIEW_PROFILE = "view_profile"
    CHANGE_PASSWORD = "change_password"

    BROWSE_STORES = "browse_stores"
    RATE_STORE = "rate_store"

    VIEW_OWN_STORE_RATINGS = "view_own_store_ratings"
    CHANGE_STORE_PASSWORD = "change_store_password"

    ADMIN_STATS = "admin_stats"
    ADMIN_LIST_USERS = "admin_list_users"
    ADMIN_LIST_STORES = "admin_list_stores"
    ADMIN_CREATE_USER = "admin_create_user"
    ADMIN_CREATE_STORE = "admin_create_store"


_COMMON: FrozenSet[Operation] = frozenset({Operation.VIEW_PROFILE, Operation.CHANGE_PASSWORD})

ROLE_PERMISSIONS: Dict[Role, FrozenSet[Operation]] = {
    Role.USER: _COMMON | {Operation.BROWSE_STORES, Operation.RATE_STORE},
    Role.STORE: _COMMON | {Operation.VIEW_OWN_STORE_RATINGS, Operation.CHANGE_STORE_PASSWORD},
    Role.ADMIN: _COMMON
    | {
        Operation.ADMIN_STATS,
        Operation.ADMIN_LIST_USERS,
        Operation.ADMIN_LIST_STORES,
        Operation.ADMIN_CREATE_USER,
        Operation.ADMIN_CREATE_STORE,
    },
}


def is_permitted(role: Role, operation: Operation) -> bool:
    return operation in ROLE_PERMISSIONS[role]


@dataclass(frozen=True)
class Principal:
    """Identity established from a verified bearer token."""

    user_id: int
    role: Role


@dataclass(frozen=True)
class RatingAggregate:
    count: int
    average: float
