"""Role, permission and group tables used to resolve access-token claims.

Only the read side matters to authentication: a user's effective roles are the
roles assigned directly plus the roles of every group the user belongs to, and
each role contributes its permissions.
"""

import uuid

from sqlmodel import Column, Field, SQLModel, String


class Role(SQLModel, table=True):
    __tablename__ = "roles"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(sa_column=Column(String(128), unique=True, nullable=False))


class Permission(SQLModel, table=True):
    __tablename__ = "permissions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(sa_column=Column(String(128), unique=True, nullable=False))


class Group(SQLModel, table=True):
    __tablename__ = "groups"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(sa_column=Column(String(128), unique=True, nullable=False))


class UserRole(SQLModel, table=True):
    __tablename__ = "user_roles"

    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True)
    role_id: uuid.UUID = Field(foreign_key="roles.id", primary_key=True)


class UserGroup(SQLModel, table=True):
    __tablename__ = "user_groups"

    user_id: uuid.UUID = Field(foreign_key="users.id", primary_key=True)
    group_id: uuid.UUID = Field(foreign_key="groups.id", primary_key=True)


class GroupRole(SQLModel, table=True):
    __tablename__ = "group_roles"

    group_id: uuid.UUID = Field(foreign_key="groups.id", primary_key=True)
    role_id: uuid.UUID = Field(foreign_key="roles.id", primary_key=True)


class RolePermission(SQLModel, table=True):
    __tablename__ = "role_permissions"

    role_id: uuid.UUID = Field(foreign_key="roles.id", primary_key=True)
    permission_id: uuid.UUID = Field(foreign_key="permissions.id", primary_key=True)
