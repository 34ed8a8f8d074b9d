"""
Core permissions utilities for role-based access control.
"""
from enum import Enum
from typing import Dict, List, Set

from ..auth.models import UserRole
from ..auth.exceptions import PermissionDeniedException

class Permission(str, Enum):
    """
    Permission types for role-based access control.
    """
    # Own records
    VIEW_OWN_PATIENT_RECORD = "view_own_patient_record"
    UPDATE_OWN_PATIENT_RECORD = "update_own_patient_record"

    # Any patient's records
    LIST_PATIENTS = "list_patients"
    VIEW_ANY_PATIENT_RECORD = "view_any_patient_record"
    CREATE_PATIENT_DETAILS = "create_patient_details"
    UPDATE_ANY_PATIENT_RECORD = "update_any_patient_record"


# Role-based permission mapping
ROLE_PERMISSIONS: Dict[UserRole, List[Permission]] = {
    UserRole.PROVIDER: [
        # Providers work across every patient's records
        Permission.VIEW_OWN_PATIENT_RECORD,
        Permission.UPDATE_OWN_PATIENT_RECORD,
        Permission.LIST_PATIENTS,
        Permission.VIEW_ANY_PATIENT_RECORD,
        Permission.CREATE_PATIENT_DETAILS,
        Permission.UPDATE_ANY_PATIENT_RECORD,
    ],
    UserRole.PATIENT: [
        Permission.VIEW_OWN_PATIENT_RECORD,
        Permission.UPDATE_OWN_PATIENT_RECORD,
    ],
}


def get_permissions_for_role(role: UserRole) -> Set[Permission]:
    """
    Get permissions for a specific role.

    Args:
        role: User role

    Returns:
        Set[Permission]: Set of permissions for the role
    """
    return set(ROLE_PERMISSIONS.get(role, []))


def roles_with_permission(permission: Permission) -> List[UserRole]:
    """
    Get every role that holds a permission.

    Args:
        permission: Permission to look up

    Returns:
        List[UserRole]: Roles granted the permission
    """
    return [role for role, permissions in ROLE_PERMISSIONS.items() if permission in permissions]


def has_permission(role: UserRole, permission: Permission) -> bool:
    """
    Check if a role has a specific permission.

    Args:
        role: User role
        permission: Permission to check

    Returns:
        bool: True if the role has the permission
    """
    return permission in get_permissions_for_role(role)


def ensure_patient_access(claims, user_id: str, write: bool = False) -> None:
    """
    Allow a caller to reach a patient's record if they own it or may act on any record.

    Args:
        claims: Verified token claims of the caller
        user_id: Owner of the record being accessed
        write: Whether the caller wants to modify the record

    Raises:
        PermissionDeniedException: If the caller may not access the record
    """
    any_permission = Permission.UPDATE_ANY_PATIENT_RECORD if write else Permission.VIEW_ANY_PATIENT_RECORD
    own_permission = Permission.UPDATE_OWN_PATIENT_RECORD if write else Permission.VIEW_OWN_PATIENT_RECORD

    if has_permission(claims.role, any_permission):
        return
    if str(claims.id) == str(user_id) and has_permission(claims.role, own_permission):
        return
    raise PermissionDeniedException()
