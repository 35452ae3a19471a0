from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends

from sitegen.auth.dependencies import get_current_user_id
from sitegen.dependencies import get_history_service
from sitegen.schemas.common import StatusResponse
from sitegen.schemas.sites import HistoryItem, HtmlResponse
from sitegen.services.history_service import HistoryService


router = APIRouter(prefix="/generations", tags=["History"])


@router.get("", response_model=List[HistoryItem])
async def list_history(
    user_id: int = Depends(get_current_user_id),
    service: HistoryService = Depends(get_history_service),
) -> List[HistoryItem]:
    """Newest first; version_number counts from the oldest generation."""
    return [HistoryItem(**row) for row in await service.list(user_id)]


@router.get("/{generation_id}", response_model=HtmlResponse)
async def get_history_item(
    generation_id: int,
    user_id: int = Depends(get_current_user_id),
    service: HistoryService = Depends(get_history_service),
) -> HtmlResponse:
    return HtmlResponse(html_code=await service.get(user_id, generation_id))


@router.delete("/{generation_id}", response_model=StatusResponse)
async def delete_history_item(
    generation_id: int,
    user_id: int = Depends(get_current_user_id),
    service: HistoryService = Depends(get_history_service),
) -> StatusResponse:
    await service.delete(user_id, generation_id)
    return StatusResponse(success=True, message="deleted")
