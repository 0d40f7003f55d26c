from __future__ import annotations

from collections.abc import Callable, Generator, Sequence
from datetime import date, datetime, time
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from backend.app.core import config
from backend.app.insights import MoodEntry
from backend.db import create_engine, create_session_factory, init_db


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture()
def make_entry() -> Callable[..., MoodEntry]:
    counter = {"value": 0}

    def _make(
        day: date | datetime | None,
        mood_value: int | None = 2,
        tags: Sequence[str] = (),
        note: str | None = None,
    ) -> MoodEntry:
        counter["value"] += 1
        if isinstance(day, datetime) or day is None:
            timestamp = day
        else:
            timestamp = datetime.combine(day, time(9, 30))
        return MoodEntry(
            id=str(counter["value"]),
            date=timestamp,
            mood_value=mood_value,
            note=note,
            tags=tuple(tags),
        )

    return _make


@pytest.fixture()
def test_client(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Generator[TestClient, None, None]:
    monkeypatch.setenv("VERSION", "0.1.0-test")
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "kokoro.log"))
    db_path = tmp_path / f"test_{uuid4().hex}.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")
    config.get_settings.cache_clear()

    from backend.app.main import app

    with TestClient(app) as client:
        client.headers.update({"X-Kokoro-User": "user-123"})
        yield client

    config.get_settings.cache_clear()


@pytest.fixture()
async def temp_session_factory(tmp_path: Path):
    db_path = tmp_path / f"unit_{uuid4().hex}.db"
    database_url = f"sqlite+aiosqlite:///{db_path}"
    engine = create_engine(database_url)
    session_factory = create_session_factory(engine)
    await init_db(engine, session_factory, "test", database_url)
    try:
        yield session_factory
    finally:
        await engine.dispose()
