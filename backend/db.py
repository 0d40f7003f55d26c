from __future__ import annotations

import asyncio
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.script import ScriptDirectory
from sqlalchemy import event, select
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from backend.app.db.models import Base, SettingEntry

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./data/kokoro.db"
SCHEMA_VERSION_KEY = "schema_version"
SCHEMA_REVISION_KEY = "schema_revision"

_PACKAGE_DIR = Path(__file__).resolve().parent
_ASYNC_DRIVERS = (
    ("postgres://", "postgresql+asyncpg://"),
    ("postgresql://", "postgresql+asyncpg://"),
    ("sqlite://", "sqlite+aiosqlite://"),
)


def sqlite_file(url: str) -> Path | None:
    """Return the file behind a SQLite URL, ``None`` for memory or other backends."""

    if not url.startswith("sqlite"):
        return None
    _, _, path_part = url.partition("///")
    if path_part in {"", ":memory:"}:
        return None
    return Path(path_part)


def normalize_database_url(raw_url: str | None) -> str:
    """Point sync driver URLs at the async drivers and create SQLite parent dirs."""

    url = str(raw_url or DEFAULT_DATABASE_URL)
    for prefix, replacement in _ASYNC_DRIVERS:
        if url.startswith(prefix):
            url = replacement + url[len(prefix):]
            break

    db_file = sqlite_file(url)
    if db_file is not None:
        db_file.parent.mkdir(parents=True, exist_ok=True)
    return url


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:  # pragma: no cover - event hook
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_engine(database_url: str | None) -> AsyncEngine:
    url = normalize_database_url(database_url)
    engine = create_async_engine(url, echo=False)
    if url.startswith("sqlite"):
        # mood rows rely on ON DELETE CASCADE when a user is removed
        event.listen(engine.sync_engine, "connect", _enable_foreign_keys)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


def alembic_config(database_url: str | None = None) -> Config:
    cfg = Config(str(_PACKAGE_DIR.parent / "alembic.ini"))
    cfg.set_main_option("script_location", str(_PACKAGE_DIR / "alembic"))
    if database_url:
        # configparser interpolation treats % as a marker
        cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return cfg


def migration_head() -> str | None:
    return ScriptDirectory.from_config(alembic_config()).get_current_head()


async def _upgrade_schema(database_url: str) -> None:
    if database_url.startswith("sqlite") and sqlite_file(database_url) is None:
        return
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, command.upgrade, alembic_config(database_url), "head")


async def _store_settings(
    session_factory: async_sessionmaker[AsyncSession],
    values: dict[str, str],
) -> None:
    async with session_factory() as session:
        rows = await session.scalars(select(SettingEntry).where(SettingEntry.key.in_(values)))
        existing = {row.key: row for row in rows}
        for key, value in values.items():
            if key in existing:
                existing[key].value = value
            else:
                session.add(SettingEntry(key=key, value=value))
        await session.commit()


async def init_db(
    engine: AsyncEngine,
    session_factory: async_sessionmaker[AsyncSession],
    version: str,
    database_url: str | None = None,
) -> None:
    """Migrate to the latest revision and record the app and schema versions.

    In-memory SQLite databases skip Alembic and are built from the models.
    """

    if database_url:
        await _upgrade_schema(normalize_database_url(database_url))

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    await _store_settings(
        session_factory,
        {
            SCHEMA_VERSION_KEY: version,
            SCHEMA_REVISION_KEY: migration_head() or "",
        },
    )


__all__ = [
    "DEFAULT_DATABASE_URL",
    "SCHEMA_REVISION_KEY",
    "SCHEMA_VERSION_KEY",
    "create_engine",
    "create_session_factory",
    "init_db",
    "migration_head",
    "normalize_database_url",
]
