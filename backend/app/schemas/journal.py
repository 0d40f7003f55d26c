from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class JournalCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000)


class JournalEntryModel(BaseModel):
    id: int
    date: datetime = Field(validation_alias="entry_date")
    content: str

    model_config = ConfigDict(from_attributes=True)


class JournalListResponse(BaseModel):
    items: list[JournalEntryModel]


class JournalCreateResponse(BaseModel):
    ok: bool = True
    id: int
