# permissions/roles.py

from __future__ import annotations

from typing import Iterable, Optional

from rest_framework.permissions import BasePermission


# =========================================================
# ROLE CONSTANTS (STAFF JOB ROLES)
# =========================================================
ROLE_ADMIN = "admin"
ROLE_SELLER = "seller"
ROLE_CUSTOM = "custom"  # permissions come only from the user's explicit list

STAFF_ROLES = {
    ROLE_ADMIN,
    ROLE_SELLER,
    ROLE_CUSTOM,
}

ROLE_CHOICES = [
    (ROLE_ADMIN, "Administrador"),
    (ROLE_SELLER, "Vendedor"),
    (ROLE_CUSTOM, "Personalizado"),
]


# =========================================================
# PERMISSIONS (THE REAL PERMISSION LANGUAGE)
# =========================================================
# Views protect permissions, not raw roles.
PERM_ALL = "*"

PERM_SALES_READ = "sales:read"
PERM_SALES_CREATE = "sales:create"
PERM_SALES_CANCEL = "sales:cancel"

PERM_PRODUCTS_READ = "products:read"
PERM_PRODUCTS_MANAGE = "products:manage"

PERM_CLIENTS_READ = "clients:read"
PERM_CLIENTS_MANAGE = "clients:manage"

PERM_USERS_MANAGE = "users:manage"
PERM_REPORTS_VIEW = "reports:view"
PERM_SETTINGS_MANAGE = "settings:manage"
PERM_EXPENSES_MANAGE = "expenses:manage"
PERM_CASHFLOW_READ = "cashflow:read"

ALL_PERMISSIONS = {
    PERM_SALES_READ,
    PERM_SALES_CREATE,
    PERM_SALES_CANCEL,
    PERM_PRODUCTS_READ,
    PERM_PRODUCTS_MANAGE,
    PERM_CLIENTS_READ,
    PERM_CLIENTS_MANAGE,
    PERM_USERS_MANAGE,
    PERM_REPORTS_VIEW,
    PERM_SETTINGS_MANAGE,
    PERM_EXPENSES_MANAGE,
    PERM_CASHFLOW_READ,
}

ASSIGNABLE_PERMISSIONS = ALL_PERMISSIONS | {PERM_ALL}


# =========================================================
# ROLE → PERMISSION MAP (DEFAULT)
# =========================================================
ROLE_PERMISSIONS: dict[str, set[str]] = {
    ROLE_ADMIN: {
        *ALL_PERMISSIONS,
    },
    ROLE_SELLER: {
        PERM_SALES_READ,
        PERM_SALES_CREATE,
        PERM_PRODUCTS_READ,
        PERM_CLIENTS_READ,
        # deliberately NOT sales:cancel
    },
    ROLE_CUSTOM: set(),
}


# =========================================================
# Helpers
# =========================================================
def get_user_role(user) -> Optional[str]:
    return getattr(user, "role", None)


def is_admin(user) -> bool:
    if not user or not getattr(user, "is_authenticated", False):
        return False
    return get_user_role(user) == ROLE_ADMIN or bool(getattr(user, "is_superuser", False))


def normalize_permissions(values: Iterable[str] | None) -> list[str]:
    """
    Strip, de-duplicate and validate a permission list.
    Unknown permission strings raise ValueError.
    """
    out: list[str] = []
    for raw in values or []:
        p = str(raw or "").strip()
        if not p:
            continue
        if p not in ASSIGNABLE_PERMISSIONS:
            raise ValueError(f"Unknown permission: {p}")
        if p not in out:
            out.append(p)
    return out


def effective_permissions_for(user) -> set[str]:
    """
    admin role or '*' => everything
    seller => role defaults + explicit grants
    custom => explicit grants only
    """
    if not user or not getattr(user, "is_authenticated", False):
        return set()

    explicit = set(getattr(user, "permissions", None) or [])

    if is_admin(user) or PERM_ALL in explicit:
        return set(ALL_PERMISSIONS)

    role = get_user_role(user)
    perms = set(ROLE_PERMISSIONS.get(role, set()))
    return (perms | explicit) & ALL_PERMISSIONS


def has_permission(user, permission: str) -> bool:
    return permission in effective_permissions_for(user)


# =========================================================
# Base Role Permission (Internal Use)
# =========================================================
class BaseRolePermission(BasePermission):
    """
    Base permission for role-based access control.

    Subclasses must define:
    - allowed_roles (set)
    """

    allowed_roles: set[str] = set()

    def has_permission(self, request, view):
        user = request.user

        if not user or not user.is_authenticated:
            return False

        user_role = get_user_role(user)
        if not user_role:
            return False

        return user_role in self.allowed_roles


# =========================================================
# Permission-string checks (RECOMMENDED FOR NEW CODE)
# =========================================================
class HasPermission(BasePermission):
    """
    Require a specific permission string.

    Usage:
        permission_classes = [IsAuthenticated, HasPermission]
        required_permission = PERM_SALES_CANCEL
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_permission", None)
        if not required:
            # If not set, deny-by-default to avoid accidental open endpoints
            return False

        return required in effective_permissions_for(user)


class HasAnyPermission(BasePermission):
    """
    Require ANY permission from a set.

    Usage:
        view.required_any_permissions = {PERM_SALES_READ, PERM_REPORTS_VIEW}
    """

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False

        required = getattr(view, "required_any_permissions", None)
        if not required:
            return False

        perms = effective_permissions_for(user)
        return any(p in perms for p in set(required))


class IsAdmin(BaseRolePermission):
    allowed_roles = {ROLE_ADMIN}


class IsStaff(BaseRolePermission):
    allowed_roles = STAFF_ROLES
