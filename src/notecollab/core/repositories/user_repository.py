"""User repository for database operations."""

from typing import Dict, Iterable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User


class UserRepository:
    """Repository for user lookups."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_many(self, user_ids: Iterable[UUID]) -> Dict[UUID, User]:
        """Map of id -> user for the given ids; unknown ids are skipped."""
        ids = {uid for uid in user_ids if uid is not None}
        if not ids:
            return {}
        stmt = select(User).where(User.id.in_(ids))
        result = await self.session.execute(stmt)
        return {user.id: user for user in result.scalars().all()}
