from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..db.models import MoodRecord
from ..services.storage import decode_tags

MAX_TAGS = 10
MAX_TAG_LENGTH = 30


class MoodCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    date: datetime
    mood_value: int = Field(..., ge=0, le=4, alias="moodValue")
    note: str | None = Field(default=None, max_length=1000)
    tags: list[str] = Field(default_factory=list, max_length=MAX_TAGS)

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: list[str] | None) -> list[str]:
        if value is None:
            return []
        return value

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, value: list[str]) -> list[str]:
        cleaned: list[str] = []
        for tag in value:
            tag = tag.strip()
            if not tag:
                continue
            if len(tag) > MAX_TAG_LENGTH:
                raise ValueError(f"tag longer than {MAX_TAG_LENGTH} characters")
            if tag not in cleaned:
                cleaned.append(tag)
        return cleaned


class MoodEntryModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    date: datetime
    mood_value: int = Field(alias="moodValue")
    note: str | None = None
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: MoodRecord) -> MoodEntryModel:
        return cls(
            id=record.id,
            date=record.recorded_at,
            mood_value=record.mood_value,
            note=record.note,
            tags=decode_tags(record.tags),
        )


class MoodUpsertResponse(BaseModel):
    ok: bool = True
    id: int
    created: bool


class MoodListResponse(BaseModel):
    items: list[MoodEntryModel]


class MoodCalendarResponse(BaseModel):
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    days: dict[str, int]


__all__ = [
    "MoodCalendarResponse",
    "MoodCreate",
    "MoodEntryModel",
    "MoodListResponse",
    "MoodUpsertResponse",
]
