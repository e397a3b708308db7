from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


class SearchCriteriaModel(BaseModel):
    activity_type: str = ""
    name: str = ""
    department: str = ""
    level: str = ""
    activity_format: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class MetaOptionsResponse(BaseModel):
    activity_types: List[str] = Field(default_factory=list)
    departments: List[str] = Field(default_factory=list)
    levels: List[str] = Field(default_factory=list)
    formats: List[str] = Field(default_factory=list)


class RefreshResponse(BaseModel):
    rows: int
    records: int


class AttachmentModel(BaseModel):
    index: int
    label: str
    url: str
    file_id: Optional[str] = None
    thumbnail_url: Optional[str] = None


class DetailFieldModel(BaseModel):
    label: str
    value: str


class DetailResponse(BaseModel):
    index: int
    fields: List[DetailFieldModel]
    attachments: List[AttachmentModel]


class ErrorResponse(BaseModel):
    error: str
    type: str