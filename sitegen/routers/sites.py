from __future__ import annotations

from fastapi import APIRouter, Depends

from sitegen.auth.dependencies import get_current_user_id
from sitegen.dependencies import get_site_service
from sitegen.schemas.sites import EditRequest, GenerateRequest, GenerationResponse
from sitegen.services.site_service import SiteService


router = APIRouter(tags=["Sites"])


@router.post("/generate", response_model=GenerationResponse)
async def generate_site(
    payload: GenerateRequest,
    user_id: int = Depends(get_current_user_id),
    service: SiteService = Depends(get_site_service),
) -> GenerationResponse:
    result = await service.generate(user_id, payload.user_prompt, payload.image_urls)
    return GenerationResponse(generation_id=result.generation_id, html_code=result.html_code)


@router.post("/edit", response_model=GenerationResponse)
async def edit_site(
    payload: EditRequest,
    user_id: int = Depends(get_current_user_id),
    service: SiteService = Depends(get_site_service),
) -> GenerationResponse:
    result = await service.edit(user_id, payload.user_prompt, payload.image_urls, payload.current_html)
    return GenerationResponse(generation_id=result.generation_id, html_code=result.html_code)
