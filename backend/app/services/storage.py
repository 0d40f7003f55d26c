from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence
from datetime import date, datetime

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import async_sessionmaker

from ..db.models import JournalEntry, MoodRecord, User
from ..insights.entries import DateRange, MoodEntry


def _encode_tags(tags: Sequence[str] | None) -> str:
    return json.dumps(list(tags or []), ensure_ascii=False)


def decode_tags(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except ValueError:
        return []
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


class StorageService:
    """Persist users, mood entries and journal entries."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory

    async def healthcheck(self) -> None:
        async with self._session_factory() as session:
            await session.execute(text("SELECT 1"))

    # -- user management -------------------------------------------------
    async def ensure_user(self, external_id: str) -> User:
        async with self._session_factory() as session:
            user = await session.scalar(select(User).where(User.external_id == external_id))
            if user:
                return user
            user = User(external_id=external_id)
            session.add(user)
            await session.commit()
            await session.refresh(user)
            return user

    async def delete_user(self, user_id: int) -> None:
        async with self._session_factory() as session:
            user = await session.get(User, user_id)
            if user:
                await session.delete(user)
                await session.commit()

    # -- mood entries ----------------------------------------------------
    async def upsert_mood_entry(
        self,
        *,
        user_id: int,
        recorded_at: datetime,
        mood_value: int,
        note: str | None,
        tags: Sequence[str] | None,
    ) -> tuple[MoodRecord, bool]:
        """Create or replace the entry for the calendar day of ``recorded_at``.

        Returns the stored row and whether it was newly created.
        """

        day_value = recorded_at.date()
        timestamp = recorded_at.replace(tzinfo=None)
        async with self._session_factory() as session:
            entry = await session.scalar(
                select(MoodRecord)
                .where(MoodRecord.user_id == user_id)
                .where(MoodRecord.day == day_value)
            )
            created = entry is None
            if entry is None:
                entry = MoodRecord(
                    user_id=user_id,
                    day=day_value,
                    recorded_at=timestamp,
                    mood_value=mood_value,
                    note=note,
                    tags=_encode_tags(tags),
                )
                session.add(entry)
            else:
                entry.mood_value = mood_value
                entry.note = note
                entry.tags = _encode_tags(tags)
            await session.commit()
            await session.refresh(entry)
            return entry, created

    async def get_mood_entry(self, user_id: int, day_value: date) -> MoodRecord | None:
        async with self._session_factory() as session:
            return await session.scalar(
                select(MoodRecord)
                .where(MoodRecord.user_id == user_id)
                .where(MoodRecord.day == day_value)
            )

    async def list_mood_entries(
        self,
        user_id: int,
        date_range: DateRange | None = None,
    ) -> Sequence[MoodRecord]:
        query = select(MoodRecord).where(MoodRecord.user_id == user_id)
        if date_range is not None:
            query = query.where(MoodRecord.day >= date_range.start).where(
                MoodRecord.day <= date_range.end
            )
        async with self._session_factory() as session:
            result = await session.execute(query.order_by(MoodRecord.day.desc()))
            return list(result.scalars().all())

    async def fetch_entries(
        self,
        user_id: int,
        date_range: DateRange | None = None,
    ) -> list[MoodEntry]:
        rows = await self.list_mood_entries(user_id, date_range)
        return [MoodEntry.from_record(row) for row in rows]

    async def mood_calendar(self, user_id: int, month: date) -> dict[date, int]:
        rows = await self.list_mood_entries(user_id, DateRange.month_of(month))
        return {row.day: row.mood_value for row in sorted(rows, key=lambda row: row.day)}

    # -- journal ---------------------------------------------------------
    async def add_journal_entry(
        self,
        *,
        user_id: int,
        content: str,
        entry_date: datetime | None = None,
    ) -> JournalEntry:
        async with self._session_factory() as session:
            entry = JournalEntry(
                user_id=user_id,
                content=content,
                entry_date=(entry_date or datetime.utcnow()).replace(tzinfo=None),
            )
            session.add(entry)
            await session.commit()
            await session.refresh(entry)
            return entry

    async def list_journal_entries(
        self,
        *,
        user_id: int,
        date_range: DateRange | None = None,
        limit: int = 50,
    ) -> Sequence[JournalEntry]:
        query = select(JournalEntry).where(JournalEntry.user_id == user_id)
        if date_range is not None:
            start = datetime.combine(date_range.start, datetime.min.time())
            end = datetime.combine(date_range.end, datetime.max.time())
            query = query.where(JournalEntry.entry_date >= start).where(
                JournalEntry.entry_date <= end
            )
        async with self._session_factory() as session:
            result = await session.execute(
                query.order_by(JournalEntry.entry_date.desc(), JournalEntry.id.desc()).limit(limit)
            )
            return list(result.scalars().all())

    # -- export ----------------------------------------------------------
    async def export_user_data(self, user_id: int) -> bytes:
        moods = await self.list_mood_entries(user_id)
        journals = await self.list_journal_entries(user_id=user_id, limit=10_000)

        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(["type", "date", "mood_value", "note", "tags", "content"])
        for entry in moods:
            writer.writerow(
                [
                    "mood",
                    entry.recorded_at.isoformat(),
                    entry.mood_value,
                    entry.note or "",
                    "|".join(decode_tags(entry.tags)),
                    "",
                ]
            )
        for entry in journals:
            writer.writerow(
                [
                    "journal",
                    entry.entry_date.isoformat(),
                    "",
                    "",
                    "",
                    entry.content,
                ]
            )
        return buffer.getvalue().encode("utf-8")


__all__ = ["StorageService", "decode_tags"]
