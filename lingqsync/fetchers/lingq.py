"""LingQ API client - lessons and LingQ cards."""

import math
from typing import Any, Callable, Dict, List, Optional, TypeVar

from ..config import Config
from ..models import Language, Lesson, LingQ
from ..utils.logger import get_logger
from .base import BaseClient, DeserializationError

logger = get_logger(__name__)

T = TypeVar("T")


class LingQClient(BaseClient):
    """
    Client for the LingQ v2 REST API.

    Usage:
        async with LingQClient.from_config(config) as client:
            lessons = await client.get_lessons()
            lingqs = await client.get_lingqs(lesson_id=lessons[0].id)
    """

    def __init__(
        self,
        api_key: str,
        language: str,
        page_size: int = 200,
        base_url: str = "https://www.lingq.com/api/v2",
        timeout: int = 60,
    ):
        super().__init__(
            base_url.rstrip("/"),
            timeout=timeout,
            headers={"Authorization": f"Token {api_key}"},
        )
        self.language = language
        self.page_size = page_size

    @classmethod
    def from_config(cls, config: Config) -> "LingQClient":
        return cls(
            api_key=config.lingq_api_key,
            language=config.lingq_lang,
            page_size=config.lingq_page_size,
            base_url=config.lingq_url,
            timeout=config.timeout,
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def _get_page(self, path: str, page: int, params: Dict[str, Any]) -> Dict[str, Any]:
        query = dict(params)
        query.update(page=page, page_size=self.page_size)
        data = await self._request_json("GET", self._url(path), params=query)
        if not isinstance(data, dict) or "count" not in data or not isinstance(data.get("results"), list):
            raise DeserializationError(f"Expected a page with count and results from {path}")
        return data

    async def get_paginated(
        self,
        path: str,
        parse: Callable[[Dict[str, Any]], T],
        params: Optional[Dict[str, Any]] = None,
    ) -> List[T]:
        """
        Fetch every page of a paginated listing, in server order.

        Page 1 reports the total ``count``; the remaining
        ``ceil(count / page_size) - 1`` pages are requested one after
        another. Any failure aborts the whole listing.

        Args:
            path: Resource path relative to the API root
            parse: Converts one raw result into a typed record
            params: Extra query parameters

        Returns:
            Concatenated, parsed results of all pages
        """
        params = params or {}
        page = 1
        first = await self._get_page(path, page, params)
        raw: List[Dict[str, Any]] = list(first["results"])

        count = int(first["count"])
        max_page = math.ceil(count / self.page_size)
        logger.debug("%s: %d items over %d page(s)", path, count, max_page)

        while page < max_page:
            page += 1
            data = await self._get_page(path, page, params)
            raw.extend(data["results"])

        try:
            return [parse(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            raise DeserializationError(f"Unexpected item shape from {path}: {e!r}") from e

    async def get_languages(self) -> List[Language]:
        """List the languages available to the account."""
        data = await self._request_json("GET", self._url("languages/"))
        if isinstance(data, dict):
            data = data.get("results")
        if not isinstance(data, list):
            raise DeserializationError("Expected a list of languages")
        try:
            return [Language.from_dict(item) for item in data]
        except (KeyError, TypeError, ValueError) as e:
            raise DeserializationError(f"Unexpected language shape: {e!r}") from e

    async def get_lessons(self) -> List[Lesson]:
        """All lessons for the configured language."""
        lessons = await self.get_paginated(f"{self.language}/lessons/", Lesson.from_dict)
        logger.info("Fetched %d lessons (%s)", len(lessons), self.language)
        return lessons

    async def get_lingqs(self, lesson_id: Optional[int] = None) -> List[LingQ]:
        """
        All LingQs for the configured language.

        Args:
            lesson_id: Only LingQs created in this lesson
        """
        params = {"content_id": lesson_id} if lesson_id is not None else None
        lingqs = await self.get_paginated(f"{self.language}/cards/", LingQ.from_dict, params)
        logger.info(
            "Fetched %d LingQs%s",
            len(lingqs),
            f" for lesson {lesson_id}" if lesson_id is not None else "",
        )
        return lingqs
