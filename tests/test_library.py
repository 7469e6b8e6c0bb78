"""Tests for cached access to lessons, LingQs and Anki notes."""

import json

import pytest

from lingqsync.services import LingQLibrary, RowStatus, SyncService, apply_result, row_status

from conftest import make_lingq


@pytest.fixture
async def library(live_config):
    library = LingQLibrary.from_config(live_config)
    yield library
    await library.close()


@pytest.mark.asyncio
async def test_lessons_cached_on_disk(library, lingq_api, live_config):
    lingq_api.total_lessons = 2

    lessons = await library.lessons()
    assert [lesson.id for lesson in lessons] == [1, 2]

    stored = json.loads((live_config.cache_path / "lessons.json").read_text(encoding="utf-8"))
    assert [item["title"] for item in stored] == ["Lesson 1", "Lesson 2"]

    await library.lessons()
    assert len(lingq_api.requests) == 1


@pytest.mark.asyncio
async def test_lessons_survive_restart(live_config, lingq_api):
    lingq_api.total_lessons = 1
    first = LingQLibrary.from_config(live_config)
    try:
        await first.lessons()
    finally:
        await first.close()

    second = LingQLibrary.from_config(live_config)
    try:
        lessons = await second.lessons()
    finally:
        await second.close()

    assert lessons[0].title == "Lesson 1"
    assert len(lingq_api.requests) == 1


@pytest.mark.asyncio
async def test_refresh_fetches_again(library, lingq_api):
    lingq_api.total_lessons = 1
    await library.lessons()
    lingq_api.total_lessons = 3

    lessons = await library.lessons(refresh=True)

    assert len(lessons) == 3
    assert len(lingq_api.requests) == 2


@pytest.mark.asyncio
async def test_lesson_lingqs_one_file_per_lesson(library, lingq_api, live_config):
    lingq_api.total_cards = 3

    lingqs = await library.lesson_lingqs(7)

    assert [lingq.pk for lingq in lingqs] == [1, 2, 3]
    assert (live_config.cache_path / "lesson-7.json").exists()
    assert lingq_api.requests[0]["content_id"] == "7"


@pytest.mark.asyncio
async def test_lesson_lingqs_gate(library, lingq_api, live_config):
    lingq_api.total_cards = 3

    assert await library.lesson_lingqs(7, should_run=False) is None
    assert lingq_api.requests == []
    assert not (live_config.cache_path / "lesson-7.json").exists()


@pytest.mark.asyncio
async def test_lesson_refresh(library, lingq_api):
    lingq_api.total_cards = 1
    await library.lesson_lingqs(7)
    lingq_api.total_cards = 2

    assert len(await library.lesson_lingqs(7)) == 1
    assert len(await library.lesson_lingqs(7, refresh=True)) == 2


@pytest.mark.asyncio
async def test_anki_notes_cached_until_invalidated(library, anki_api, live_config):
    anki_api.add_existing(5)

    notes = await library.anki_notes()
    assert [note.field_value("LingQ") for note in notes] == ["5"]
    assert (live_config.cache_path / "anki-notes.json").exists()

    anki_api.add_existing(6)
    assert len(await library.anki_notes()) == 1

    library.invalidate_anki_notes()
    assert len(await library.anki_notes()) == 2


@pytest.mark.asyncio
async def test_language_lookup(library, live_config):
    language = await library.language()

    assert language.code == "da"
    assert language.title == "Danish"
    assert (live_config.cache_path / "languages.json").exists()


@pytest.mark.asyncio
async def test_restart_with_outdated_note_cache_adds_nothing_twice(live_config, anki_api):
    first = LingQLibrary.from_config(live_config)
    try:
        service = SyncService(first.anki, live_config)
        states = service.note_states(await first.anki_notes())
        result = await service.sync([make_lingq(6)], states)
        assert result.succeeded == {6}
        first.invalidate_anki_notes()
    finally:
        await first.close()

    # anki-notes.json on disk still predates the sync
    second = LingQLibrary.from_config(live_config)
    try:
        service = SyncService(second.anki, live_config)
        states = service.note_states(await second.anki_notes())
        assert states == {}
        result = await service.sync([make_lingq(6)], states)
    finally:
        await second.close()

    assert result.submitted == 0
    assert result.known == {6}
    assert row_status(6, apply_result(states, result)) is RowStatus.KNOWN
    stored = [note["fields"]["LingQ"]["value"] for note in anki_api.notes.values()]
    assert stored == ["6"]
