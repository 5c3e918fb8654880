from __future__ import annotations

import json
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StageResponse(BaseModel):
    name: str
    ok: bool
    detail: Optional[str] = None


class DeployRunResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    mode: str
    status: str
    trigger: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    failed_stage: Optional[str] = None
    files_published: int = 0
    target_commit: Optional[str] = None
    exit_code: Optional[int] = None
    last_error: Optional[str] = None
    stages: List[StageResponse] = Field(
        default_factory=list, validation_alias="stages_json"
    )

    @field_validator("stages", mode="before")
    @classmethod
    def _decode_stages(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return json.loads(value)
        return value


class TriggerResponse(BaseModel):
    accepted: bool
    mode: str
    message: str


class ArticleResponse(BaseModel):
    path: str
    slug: str
    title: Optional[str] = None
    date: Optional[datetime] = None
    subtitle: Optional[str] = None
    author: Optional[str] = None
    author_link: Optional[str] = None
    cover_image: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    issues: List[str] = Field(default_factory=list)
