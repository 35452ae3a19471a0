from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import delete, func, insert, select

from sitegen.db.base import get_session
from sitegen.middleware.error_handler import ConflictError, NotFoundOrForbidden
from sitegen.models.generations_table import generations
from sitegen.models.users_table import users

PREVIEW_LENGTH = 100


class GenerationRepository:
    """History store: append-only generated pages, always scoped to their owner."""

    async def append(self, user_id: int, html: str) -> int:
        """Insert an immutable generation and return its id."""
        stmt = insert(generations).values(user_id=user_id, html_code=html).returning(generations.c.id)
        async with get_session("history.append") as session:
            result = await session.execute(stmt)
            new_id = result.scalar_one()
            await session.commit()
        return int(new_id)

    async def list_for_user(self, user_id: int) -> List[Dict[str, Any]]:
        """Return {id, preview, created_at} rows oldest-first."""
        stmt = (
            select(
                generations.c.id,
                func.substr(generations.c.html_code, 1, PREVIEW_LENGTH).label("preview"),
                generations.c.created_at,
            )
            .where(generations.c.user_id == user_id)
            .order_by(generations.c.created_at.asc(), generations.c.id.asc())
        )
        async with get_session("history.list") as session:
            result = await session.execute(stmt)
            return [dict(r) for r in result.mappings().all()]

    async def get_html(self, user_id: int, generation_id: int) -> str:
        stmt = select(generations.c.html_code).where(
            generations.c.id == generation_id,
            generations.c.user_id == user_id,
        )
        async with get_session("history.get") as session:
            result = await session.execute(stmt)
            html = result.scalar_one_or_none()
        if html is None:
            raise NotFoundOrForbidden("Generation not found or access denied")
        return html

    async def delete(self, user_id: int, generation_id: int) -> None:
        """Delete one owned generation.

        The owner's row is locked first so a concurrent publish cannot point
        at a generation that is being removed.
        """
        async with get_session("history.delete") as session:
            async with session.begin():
                pointer = await session.execute(
                    select(users.c.published_generation_id)
                    .where(users.c.id == user_id)
                    .with_for_update()
                )
                if pointer.scalar_one_or_none() == generation_id:
                    raise ConflictError("This version is published. Unpublish it before deleting.")

                result = await session.execute(
                    delete(generations).where(
                        generations.c.id == generation_id,
                        generations.c.user_id == user_id,
                    )
                )
                if result.rowcount == 0:
                    raise NotFoundOrForbidden("Generation not found or access denied")
