from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    # Accepts the camelCase keys sent by the web client as well as snake_case
    model_config = ConfigDict(populate_by_name=True)

    user_prompt: str = Field(..., alias="userPrompt")
    image_urls: List[str] = Field(default_factory=list, alias="imageUrls")


class EditRequest(GenerateRequest):
    current_html: str = Field(..., alias="currentHtml")


class GenerationResponse(BaseModel):
    generation_id: int
    html_code: str


class HistoryItem(BaseModel):
    id: int
    preview: str
    created_at: datetime
    version_number: int


class HtmlResponse(BaseModel):
    html_code: str


class PublishResponse(BaseModel):
    public_url: str


class UploadResponse(BaseModel):
    url: str
