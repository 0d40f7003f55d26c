"""Database models for the Kokoro mood diary."""

from .models import (
    Base,
    JournalEntry,
    MoodRecord,
    SettingEntry,
    User,
)

__all__ = [
    "Base",
    "JournalEntry",
    "MoodRecord",
    "SettingEntry",
    "User",
]
