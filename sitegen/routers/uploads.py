from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from sitegen.auth.dependencies import get_current_user_id
from sitegen.clients.s3_storage import AssetStore
from sitegen.dependencies import get_asset_store
from sitegen.middleware.error_handler import ValidationError
from sitegen.schemas.sites import UploadResponse


router = APIRouter(tags=["Assets"])


@router.post("/upload", response_model=UploadResponse)
async def upload_image(
    image: Optional[UploadFile] = File(None),
    user_id: int = Depends(get_current_user_id),
    assets: AssetStore = Depends(get_asset_store),
) -> UploadResponse:
    """Store an image in the public asset bucket and return its URL."""
    if image is None:
        raise ValidationError("No file was uploaded")
    # One byte past the limit is enough to detect an oversized file
    data = await image.read(assets.max_bytes + 1)
    url = await assets.store(data, image.content_type, image.filename)
    return UploadResponse(url=url)
