"""
LingQ Library - cached access to lessons, LingQs and Anki notes.

Every listing is read from the JSON cache when possible and fetched from
the API otherwise. The UI only talks to this service, never to the
clients directly.
"""

from typing import List, Optional

from ..cache import JsonCache
from ..config import Config
from ..fetchers import AnkiConnectClient, LingQClient
from ..models import (
    AnkiNote,
    Language,
    Lesson,
    LingQ,
    languages_from_json,
    languages_to_json,
    lessons_from_json,
    lessons_to_json,
    lingqs_from_json,
    lingqs_to_json,
    notes_from_json,
    notes_to_json,
)

LANGUAGES_KEY = "languages"
LESSONS_KEY = "lessons"
ANKI_NOTES_KEY = "anki-notes"


def lesson_key(lesson_id: int) -> str:
    return f"lesson-{lesson_id}"


class LingQLibrary:
    """
    Cached views over the LingQ and AnkiConnect APIs.

    Usage:
        library = LingQLibrary(config, lingq_client, anki_client)
        lessons = await library.lessons()
        lessons = await library.lessons(refresh=True)
        lingqs = await library.lesson_lingqs(lesson.id, should_run=tile_expanded)
    """

    def __init__(
        self,
        config: Config,
        lingq: LingQClient,
        anki: AnkiConnectClient,
        cache: Optional[JsonCache] = None,
    ):
        self.config = config
        self.lingq = lingq
        self.anki = anki
        self.cache = cache or JsonCache(config.cache_path)

    @classmethod
    def from_config(cls, config: Config) -> "LingQLibrary":
        return cls(config, LingQClient.from_config(config), AnkiConnectClient.from_config(config))

    async def close(self) -> None:
        await self.lingq.close()
        await self.anki.close()

    async def languages(self, refresh: bool = False) -> List[Language]:
        load = self.cache.force_refresh if refresh else self.cache.get_or_fetch
        return await load(
            LANGUAGES_KEY,
            self.lingq.get_languages,
            decode=languages_from_json,
            encode=languages_to_json,
        )

    async def language(self) -> Optional[Language]:
        """The configured language, or None when LingQ does not offer it."""
        for language in await self.languages():
            if language.code == self.config.lingq_lang:
                return language
        return None

    async def lessons(self, refresh: bool = False) -> List[Lesson]:
        load = self.cache.force_refresh if refresh else self.cache.get_or_fetch
        return await load(
            LESSONS_KEY,
            self.lingq.get_lessons,
            decode=lessons_from_json,
            encode=lessons_to_json,
        )

    async def lesson_lingqs(
        self, lesson_id: int, should_run: bool = True, refresh: bool = False
    ) -> Optional[List[LingQ]]:
        """
        LingQs of one lesson, or None while the caller does not want them yet.

        Args:
            lesson_id: Lesson to load
            should_run: Gate; False returns None without touching cache or API
            refresh: Fetch again even if cached
        """
        if not should_run:
            return None

        async def fetch() -> List[LingQ]:
            return await self.lingq.get_lingqs(lesson_id=lesson_id)

        key = lesson_key(lesson_id)
        if refresh:
            return await self.cache.force_refresh(
                key, fetch, decode=lingqs_from_json, encode=lingqs_to_json
            )
        return await self.cache.get_or_fetch_opt(
            key, fetch, should_run, decode=lingqs_from_json, encode=lingqs_to_json
        )

    async def anki_notes(self, refresh: bool = False) -> List[AnkiNote]:
        async def fetch() -> List[AnkiNote]:
            return await self.anki.get_notes(self.config.anki_query)

        load = self.cache.force_refresh if refresh else self.cache.get_or_fetch
        return await load(ANKI_NOTES_KEY, fetch, decode=notes_from_json, encode=notes_to_json)

    def invalidate_anki_notes(self) -> None:
        self.cache.invalidate(ANKI_NOTES_KEY)
