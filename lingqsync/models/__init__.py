"""Data models for LingQ Sync."""

from .anki import AnkiNote, NewNote, NoteField, notes_from_json, notes_to_json
from .lingq import (
    ExtendedLingQStatus,
    Language,
    Lesson,
    LingQ,
    LingQHint,
    LingQStatus,
    languages_from_json,
    languages_to_json,
    lessons_from_json,
    lessons_to_json,
    lingqs_from_json,
    lingqs_to_json,
)

__all__ = [
    'AnkiNote',
    'NewNote',
    'NoteField',
    'notes_from_json',
    'notes_to_json',
    'ExtendedLingQStatus',
    'Language',
    'Lesson',
    'LingQ',
    'LingQHint',
    'LingQStatus',
    'languages_from_json',
    'languages_to_json',
    'lessons_from_json',
    'lessons_to_json',
    'lingqs_from_json',
    'lingqs_to_json',
]
