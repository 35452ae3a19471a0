# sitegen/services/publish_service.py
# Keeps at most one published site per user, mirrored to the hosting bucket

from __future__ import annotations

import logging

from sitegen.clients.s3_storage import HostingTarget
from sitegen.middleware.error_handler import ConflictError, HostingError, PersistenceError
from sitegen.repositories.user_repository import UserRepository
from sitegen.utils.logger import log_exception, log_info

logger = logging.getLogger(__name__)


class PublishCoordinator:
    """
    Per-user state machine: Unpublished <-> Published.

    Every transition runs while holding the row lock on the user's publish
    pointer, so the precondition check and the pointer update see the same
    state and concurrent publishes for one user are serialized. Everything
    the transition reads from the database goes through that one locked
    session, so a publish holds a single pooled connection.
    """

    def __init__(self, users: UserRepository, hosting: HostingTarget):
        self._users = users
        self._hosting = hosting

    async def publish(self, user_id: int, generation_id: int) -> str:
        """Publish one generation and return its public URL."""
        hosted = False
        try:
            async with self._users.locked_pointer(user_id) as pointer:
                if pointer.is_published:
                    raise ConflictError(
                        "You already have a published website. Unpublish it before publishing a new version.",
                        details={"published_generation_id": pointer.published_generation_id},
                    )

                html = await pointer.generation_html(generation_id)

                try:
                    url = await self._hosting.write_site(user_id, html)
                except HostingError:
                    logger.error("publish: hosting write failed for user %s, generation %s", user_id, generation_id)
                    raise
                hosted = True

                await pointer.set(url, generation_id)
        except PersistenceError:
            if hosted:
                await self._take_down(user_id)
            raise

        log_info(f"Website for user {user_id} published at {url} (generation {generation_id})")
        return url

    async def unpublish(self, user_id: int) -> None:
        """Remove the live site and clear the pointer. Safe to repeat."""
        async with self._users.locked_pointer(user_id) as pointer:
            try:
                await self._hosting.remove_site(user_id)
            except HostingError:
                logger.error("unpublish: hosting delete failed for user %s", user_id)
                raise
            await pointer.clear()

        log_info(f"Publication for user {user_id} removed")

    async def _take_down(self, user_id: int) -> None:
        # The pointer was never recorded; do not leave an orphaned live page.
        logger.error("publish: pointer update failed for user %s, removing hosted page", user_id)
        try:
            await self._hosting.remove_site(user_id)
        except HostingError as e:
            log_exception(e, context=f"publish compensation for user {user_id}: page is live without a pointer")
