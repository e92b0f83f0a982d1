"""
Typed permission check: {actor, action, resource} -> allow/deny.

Routes never compare role strings; they ask is_allowed() (usually through
the require_permission decorator) and the answer comes from the
(action, resource) -> permission code table below plus the role grants in
definitions.DEFAULT_ROLE_PERMISSIONS.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .definitions import DEFAULT_ROLE_PERMISSIONS


class Action(str, Enum):
    VIEW = "view"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"
    ADJUST = "adjust"
    NOTIFY = "notify"


class Resource(str, Enum):
    STOCK = "stock"
    STAFF = "staff"
    CUSTOMER = "customer"
    TRANSACTION = "transaction"
    DASHBOARD = "dashboard"
    USER = "user"


@dataclass(frozen=True)
class Actor:
    id: str
    role: str
    is_active: bool = True

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(id=user.id, role=user.role, is_active=bool(user.is_active))


POLICY: dict[tuple[Action, Resource], str] = {
    (Action.VIEW, Resource.STOCK): "VIEW_STOCK",
    (Action.CREATE, Resource.STOCK): "MANAGE_STOCK",
    (Action.UPDATE, Resource.STOCK): "MANAGE_STOCK",
    (Action.DELETE, Resource.STOCK): "DELETE_STOCK",
    (Action.ADJUST, Resource.STOCK): "ADJUST_STOCK",
    (Action.NOTIFY, Resource.STOCK): "SEND_STOCK_ALERTS",

    (Action.VIEW, Resource.TRANSACTION): "VIEW_TRANSACTIONS",
    (Action.CREATE, Resource.TRANSACTION): "CREATE_TRANSACTIONS",
    (Action.APPROVE, Resource.TRANSACTION): "APPROVE_TRANSACTIONS",

    (Action.VIEW, Resource.STAFF): "VIEW_STAFF",
    (Action.CREATE, Resource.STAFF): "MANAGE_STAFF",
    (Action.UPDATE, Resource.STAFF): "MANAGE_STAFF",
    (Action.DELETE, Resource.STAFF): "DELETE_STAFF",

    (Action.VIEW, Resource.CUSTOMER): "VIEW_CUSTOMERS",
    (Action.CREATE, Resource.CUSTOMER): "MANAGE_CUSTOMERS",
    (Action.UPDATE, Resource.CUSTOMER): "MANAGE_CUSTOMERS",
    (Action.DELETE, Resource.CUSTOMER): "DELETE_CUSTOMERS",

    (Action.VIEW, Resource.DASHBOARD): "VIEW_DASHBOARD",

    (Action.VIEW, Resource.USER): "VIEW_USERS",
    (Action.CREATE, Resource.USER): "CREATE_USER",
}


def permission_code_for(action: Action, resource: Resource) -> str | None:
    return POLICY.get((Action(action), Resource(resource)))


def get_role_permissions(role: str) -> set[str]:
    return set(DEFAULT_ROLE_PERMISSIONS.get(role, ()))


def is_allowed(actor: Actor, action: Action, resource: Resource) -> bool:
    """
    Decide whether actor may perform action on resource.

    Unknown (action, resource) pairs and inactive actors are denied.
    """
    if actor is None or not actor.is_active:
        return False
    code = permission_code_for(action, resource)
    if code is None:
        return False
    return code in get_role_permissions(actor.role)
