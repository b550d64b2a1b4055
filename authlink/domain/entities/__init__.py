"""Export domain entities for use across the application.

Importing this package registers every table on `SQLModel.metadata`.
"""

from .access_control import Group, GroupRole, Permission, Role, RolePermission, UserGroup, UserRole
from .external_identity import ExternalIdentity
from .external_token import ExternalToken
from .login_attempt import LoginAttempt
from .session import Session
from .user import User, normalize_identifier

__all__ = [
    "User",
    "normalize_identifier",
    "Session",
    "LoginAttempt",
    "ExternalIdentity",
    "ExternalToken",
    "Role",
    "Permission",
    "Group",
    "UserRole",
    "UserGroup",
    "GroupRole",
    "RolePermission",
]
