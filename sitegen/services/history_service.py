from __future__ import annotations

from typing import Any, Dict, List

from sitegen.repositories.generation_repository import GenerationRepository
from sitegen.utils.logger import log_info
from sitegen.utils.versioning import number_versions


class HistoryService:
    """Read and prune a user's generation history."""

    def __init__(self, repository: GenerationRepository):
        self._repo = repository

    async def list(self, user_id: int) -> List[Dict[str, Any]]:
        """Entries newest first, each with its derived version_number."""
        rows = await self._repo.list_for_user(user_id)
        return number_versions(rows)

    async def get(self, user_id: int, generation_id: int) -> str:
        return await self._repo.get_html(user_id, generation_id)

    async def delete(self, user_id: int, generation_id: int) -> None:
        await self._repo.delete(user_id, generation_id)
        log_info(f"Generation {generation_id} for user ID {user_id} deleted")
