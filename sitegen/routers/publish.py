from __future__ import annotations

from fastapi import APIRouter, Depends

from sitegen.auth.dependencies import get_current_user_id
from sitegen.dependencies import get_publisher
from sitegen.schemas.common import StatusResponse
from sitegen.schemas.sites import PublishResponse
from sitegen.services.publish_service import PublishCoordinator


router = APIRouter(prefix="/publish", tags=["Publish"])


@router.post("/{generation_id}", response_model=PublishResponse)
async def publish_site(
    generation_id: int,
    user_id: int = Depends(get_current_user_id),
    publisher: PublishCoordinator = Depends(get_publisher),
) -> PublishResponse:
    url = await publisher.publish(user_id, generation_id)
    return PublishResponse(public_url=url)


@router.delete("", response_model=StatusResponse)
async def unpublish_site(
    user_id: int = Depends(get_current_user_id),
    publisher: PublishCoordinator = Depends(get_publisher),
) -> StatusResponse:
    await publisher.unpublish(user_id)
    return StatusResponse(success=True, message="unpublished")
