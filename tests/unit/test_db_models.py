from __future__ import annotations

from datetime import date, datetime

import pytest
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from backend.app.db import JournalEntry, MoodRecord, SettingEntry, User


@pytest.mark.anyio
async def test_mood_and_journal_crud(temp_session_factory):
    session_factory = temp_session_factory

    async with session_factory() as session:
        user = User(external_id="subject-1")
        session.add(user)
        await session.flush()
        journal = JournalEntry(user_id=user.id, content="note", entry_date=datetime(2025, 3, 1, 20))
        mood = MoodRecord(
            user_id=user.id,
            day=date(2025, 3, 1),
            recorded_at=datetime(2025, 3, 1, 9),
            mood_value=1,
            note="sunny",
            tags='["運動"]',
        )
        session.add_all([journal, mood])
        await session.commit()

        await session.refresh(journal)
        await session.refresh(mood)

        assert journal.id > 0
        assert mood.id > 0

    async with session_factory() as session:
        journals = (await session.execute(select(JournalEntry))).scalars().all()
        moods = (await session.execute(select(MoodRecord))).scalars().all()
        assert any(item.content == "note" for item in journals)
        assert any(item.mood_value == 1 and item.day == date(2025, 3, 1) for item in moods)


@pytest.mark.anyio
async def test_mood_record_unique_per_day(temp_session_factory):
    session_factory = temp_session_factory

    async with session_factory() as session:
        user = User(external_id="subject-2")
        session.add(user)
        await session.flush()
        for hour in (8, 21):
            session.add(
                MoodRecord(
                    user_id=user.id,
                    day=date(2025, 3, 2),
                    recorded_at=datetime(2025, 3, 2, hour),
                    mood_value=2,
                )
            )
        with pytest.raises(IntegrityError):
            await session.commit()


@pytest.mark.anyio
async def test_deleting_user_cascades(temp_session_factory):
    session_factory = temp_session_factory

    async with session_factory() as session:
        user = User(external_id="subject-3")
        session.add(user)
        await session.flush()
        session.add(
            MoodRecord(
                user_id=user.id,
                day=date(2025, 3, 3),
                recorded_at=datetime(2025, 3, 3, 9),
                mood_value=0,
            )
        )
        await session.commit()
        await session.delete(user)
        await session.commit()

    async with session_factory() as session:
        remaining = (await session.execute(select(MoodRecord))).scalars().all()
        assert remaining == []


@pytest.mark.anyio
async def test_setting_entry_unique_key(temp_session_factory):
    session_factory = temp_session_factory

    async with session_factory() as session:
        session.add(SettingEntry(key="theme", value="light"))
        await session.commit()

    async with session_factory() as session:
        query = select(SettingEntry).where(SettingEntry.key == "theme")
        result = await session.execute(query)
        setting = result.scalar_one()
        setting.value = "dark"
        await session.commit()

    async with session_factory() as session:
        query = select(SettingEntry).where(SettingEntry.key == "theme")
        setting = (await session.execute(query)).scalar_one()
        assert setting.value == "dark"
