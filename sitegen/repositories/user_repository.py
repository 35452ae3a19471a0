# sitegen/repositories/user_repository.py
# Users and their publish pointer

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy import insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sitegen.db.base import get_session
from sitegen.middleware.error_handler import ConflictError, NotFoundOrForbidden
from sitegen.models.generations_table import generations
from sitegen.models.users_table import users


class PublishPointer:
    """The (published_url, published_generation_id) pair of one user, row-locked.

    Only valid inside UserRepository.locked_pointer(); changes commit when
    the block exits cleanly and roll back otherwise.
    """

    def __init__(
        self,
        session: AsyncSession,
        user_id: int,
        published_url: Optional[str],
        published_generation_id: Optional[int],
    ):
        self._session = session
        self.user_id = user_id
        self.published_url = published_url
        self.published_generation_id = published_generation_id

    @property
    def is_published(self) -> bool:
        return self.published_url is not None

    async def generation_html(self, generation_id: int) -> str:
        """Owner-scoped read of a generation on the locked connection."""
        result = await self._session.execute(
            select(generations.c.html_code).where(
                generations.c.id == generation_id,
                generations.c.user_id == self.user_id,
            )
        )
        html = result.scalar_one_or_none()
        if html is None:
            raise NotFoundOrForbidden("Generation not found or access denied")
        return html

    async def set(self, url: str, generation_id: int) -> None:
        # Conditional on the pointer still being empty
        result = await self._session.execute(
            update(users)
            .where(users.c.id == self.user_id, users.c.published_url.is_(None))
            .values(published_url=url, published_generation_id=generation_id)
        )
        if result.rowcount != 1:
            raise ConflictError("A site is already published. Unpublish it first.")
        self.published_url = url
        self.published_generation_id = generation_id

    async def clear(self) -> None:
        await self._session.execute(
            update(users)
            .where(users.c.id == self.user_id)
            .values(published_url=None, published_generation_id=None)
        )
        self.published_url = None
        self.published_generation_id = None


class UserRepository:
    """Data access for users."""

    async def create(self, name: str, email: str, password_hash: str) -> int:
        stmt = (
            insert(users)
            .values(name=name, email=email, password_hash=password_hash)
            .returning(users.c.id)
        )
        async with get_session("users.create") as session:
            try:
                result = await session.execute(stmt)
                new_id = result.scalar_one()
                await session.commit()
            except IntegrityError as e:
                raise ConflictError("Email is already registered") from e
        return int(new_id)

    async def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        stmt = select(users.c.id, users.c.name, users.c.email, users.c.password_hash).where(
            users.c.email == email
        )
        async with get_session("users.get_by_email") as session:
            result = await session.execute(stmt)
            row = result.mappings().first()
        return dict(row) if row else None

    async def get_profile(self, user_id: int) -> Optional[Dict[str, Any]]:
        stmt = select(
            users.c.id,
            users.c.name,
            users.c.email,
            users.c.published_url,
            users.c.published_generation_id,
        ).where(users.c.id == user_id)
        async with get_session("users.get_profile") as session:
            result = await session.execute(stmt)
            row = result.mappings().first()
        return dict(row) if row else None

    @asynccontextmanager
    async def locked_pointer(self, user_id: int) -> AsyncIterator[PublishPointer]:
        """Hold a row lock on the user's publish pointer for one transaction."""
        async with get_session("users.publish_pointer") as session:
            async with session.begin():
                result = await session.execute(
                    select(users.c.published_url, users.c.published_generation_id)
                    .where(users.c.id == user_id)
                    .with_for_update()
                )
                row = result.first()
                if row is None:
                    raise NotFoundOrForbidden("User not found")
                yield PublishPointer(
                    session,
                    user_id,
                    row.published_url,
                    row.published_generation_id,
                )
