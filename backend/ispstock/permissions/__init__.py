# Overview: Permission system package.
# Re-exports the policy check and the permission catalogue.

from .categories import PermissionCategory
from .definitions import PERMISSION_DEFINITIONS, DEFAULT_ROLE_PERMISSIONS
from .policy import (
    Action,
    Resource,
    Actor,
    POLICY,
    is_allowed,
    permission_code_for,
    get_role_permissions,
)
from .helpers import get_all_permission_codes, get_permission_definition

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "Action",
    "Resource",
    "Actor",
    "POLICY",
    "is_allowed",
    "permission_code_for",
    "get_role_permissions",
    "get_all_permission_codes",
    "get_permission_definition",
]
