"""User Repository implementation using SQLAlchemy.

This module provides the repository for the `User` aggregate and the
read-only queries over the role, group and permission tables that feed
access-token claims.

Uniqueness of usernames and emails is enforced by unique indexes on the
normalized columns. A concurrent registration that loses the race surfaces
here as an `IntegrityError`, which is rolled back and reported as
`DuplicateUserError`.
"""

import uuid
from collections import defaultdict
from typing import Dict, FrozenSet, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from authlink.core.exceptions import DuplicateUserError
from authlink.core.logging import mask_identifier
from authlink.domain.entities.access_control import (
    GroupRole,
    Permission,
    Role,
    RolePermission,
    UserGroup,
    UserRole,
)
from authlink.domain.entities.user import User
from authlink.domain.interfaces.repositories import IUserRepository
from authlink.domain.value_objects.tokens import AccessGrants, RoleGrant

logger = get_logger(__name__)


class UserRepository(IUserRepository):
    """SQLAlchemy implementation of `IUserRepository`.

    Args:
        db_session: The request-scoped async session. The repository commits
            its own writes.
    """

    def __init__(self, db_session: AsyncSession):
        self.db_session = db_session

    async def get_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        result = await self.db_session.execute(select(User).where(User.id == user_id))
        return result.scalars().first()

    async def get_by_normalized_username(self, normalized_username: str) -> Optional[User]:
        result = await self.db_session.execute(
            select(User).where(User.normalized_username == normalized_username)
        )
        return result.scalars().first()

    async def get_by_normalized_email(self, normalized_email: str) -> Optional[User]:
        result = await self.db_session.execute(select(User).where(User.normalized_email == normalized_email))
        return result.scalars().first()

    async def add(self, user: User) -> User:
        """Inserts a new user.

        Raises:
            DuplicateUserError: If the normalized username or email is taken.
        """
        self.db_session.add(user)
        try:
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            logger.warning(
                "user_insert_conflict",
                username=mask_identifier(user.username),
                error_type=type(e).__name__,
            )
            raise DuplicateUserError() from e
        await self.db_session.refresh(user)
        logger.debug("user_inserted", user_id=str(user.id))
        return user

    async def update(self, user: User) -> User:
        self.db_session.add(user)
        try:
            await self.db_session.commit()
        except IntegrityError as e:
            await self.db_session.rollback()
            raise DuplicateUserError() from e
        return user

    async def get_access_grants(self, user_id: uuid.UUID) -> AccessGrants:
        """Loads direct and group-derived roles with their permissions.

        Three queries: direct roles, roles reached through groups, then the
        permissions of every role found.
        """
        direct_rows = await self.db_session.execute(
            select(Role.id, Role.name)
            .join(UserRole, UserRole.role_id == Role.id)
            .where(UserRole.user_id == user_id)
        )
        direct: List[Tuple[uuid.UUID, str]] = list(direct_rows.all())

        group_rows = await self.db_session.execute(
            select(Role.id, Role.name)
            .join(GroupRole, GroupRole.role_id == Role.id)
            .join(UserGroup, UserGroup.group_id == GroupRole.group_id)
            .where(UserGroup.user_id == user_id)
        )
        grouped: List[Tuple[uuid.UUID, str]] = list(group_rows.all())

        role_ids = {role_id for role_id, _ in direct + grouped}
        permissions: Dict[uuid.UUID, set] = defaultdict(set)
        if role_ids:
            permission_rows = await self.db_session.execute(
                select(RolePermission.role_id, Permission.name)
                .join(Permission, Permission.id == RolePermission.permission_id)
                .where(RolePermission.role_id.in_(role_ids))
            )
            for role_id, name in permission_rows.all():
                permissions[role_id].add(name)

        def grant(role_id: uuid.UUID, name: str) -> RoleGrant:
            granted: FrozenSet[str] = frozenset(permissions.get(role_id, ()))
            return RoleGrant(name=name, permissions=granted)

        return AccessGrants(
            direct_roles=tuple(grant(role_id, name) for role_id, name in direct),
            group_roles=tuple(grant(role_id, name) for role_id, name in grouped),
        )
