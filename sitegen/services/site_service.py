# sitegen/services/site_service.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from sitegen.clients.bedrock_client import BedrockClient
from sitegen.middleware.error_handler import AppError, ValidationError
from sitegen.repositories.generation_repository import GenerationRepository
from sitegen.services.prompt_builder import PromptMode, build_system_prompt, build_user_turn
from sitegen.utils.logger import log_info

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationResult:
    generation_id: int
    html_code: str


class SiteService:
    """Generate and edit pages: prompt -> model -> history."""

    def __init__(self, model: BedrockClient, history: GenerationRepository):
        self._model = model
        self._history = history

    async def generate(
        self,
        user_id: int,
        user_prompt: str,
        image_urls: Optional[Sequence[str]] = None,
    ) -> GenerationResult:
        if not user_prompt or not user_prompt.strip():
            raise ValidationError("Prompt must not be empty")
        return await self._run(PromptMode.GENERATE, user_id, user_prompt, image_urls)

    async def edit(
        self,
        user_id: int,
        user_prompt: str,
        image_urls: Optional[Sequence[str]],
        current_html: str,
    ) -> GenerationResult:
        if not user_prompt or not user_prompt.strip() or not current_html:
            raise ValidationError("Prompt and current HTML are required to edit a site")
        return await self._run(PromptMode.EDIT, user_id, user_prompt, image_urls, current_html)

    async def _run(
        self,
        mode: PromptMode,
        user_id: int,
        user_prompt: str,
        image_urls: Optional[Sequence[str]],
        current_html: Optional[str] = None,
    ) -> GenerationResult:
        log_info(f"Received {mode.value} request from user ID: {user_id}")
        system_prompt = build_system_prompt(mode)
        user_turn = build_user_turn(mode, user_prompt, image_urls, current_html)

        try:
            extracted = await self._model.invoke(system_prompt, user_turn)
        except AppError as e:
            logger.error(
                "%s failed for user %s: %s (%s)", mode.value, user_id, e.error_code, e.__cause__ or e.message
            )
            raise

        generation_id = await self._history.append(user_id, extracted.html)
        log_info(f"{mode.value} saved to history for user ID: {user_id} as generation {generation_id}")
        return GenerationResult(generation_id=generation_id, html_code=extracted.html)
