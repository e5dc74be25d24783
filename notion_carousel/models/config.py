"""Config model."""

from __future__ import annotations

from typing import Optional

from pydantic import Field, constr

from .base import CarouselBaseModel

NonEmptyStr = constr(min_length=1)


class Config(CarouselBaseModel):
    project_root: NonEmptyStr = Field(..., description="Project root directory")
    runs_dir: NonEmptyStr = Field(..., description="Runs output directory")
    notion_token: Optional[NonEmptyStr] = Field(None, description="Integration access token")
    notion_api_base: NonEmptyStr = Field("https://api.notion.com/v1", description="REST API base URL")
    notion_version: NonEmptyStr = Field("2022-06-28", description="Notion-Version header")
    page_size: int = Field(100, ge=1, le=100, description="Items requested per page")
    request_timeout: float = Field(30.0, gt=0, description="HTTP timeout in seconds")
    style_path: Optional[NonEmptyStr] = Field(None, description="JSON style configuration file")
    export_quality: int = Field(92, ge=1, le=100, description="JPEG quality")
    preview_width: int = Field(400, gt=0, description="Preview width in px")
