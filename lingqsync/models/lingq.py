"""LingQ data models."""

from dataclasses import asdict, dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple


class LingQStatus(IntEnum):
    """Learning progress of a LingQ, as reported by the API."""
    NEW = 0
    RECOGNIZED = 1
    FAMILIAR = 2
    KNOWN = 3


class ExtendedLingQStatus(IntEnum):
    """Review schedule attached to a known LingQ."""
    NOW = 0
    THIRTY_DAYS = 1
    NINETY_DAYS = 2
    NEVER = 3


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, accepting both snake_case and camelCase payloads."""
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass(frozen=True)
class LingQHint:
    """A translation hint attached to a LingQ."""

    term: str
    text: str
    locale: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LingQHint":
        return cls(
            term=str(data.get("term", "")),
            text=str(data["text"]),
            locale=str(data.get("locale", "")),
        )


@dataclass(frozen=True)
class LingQ:
    """
    A single vocabulary card from LingQ.

    Instances are immutable; a refreshed fetch replaces the whole list.
    """

    pk: int
    term: str
    fragment: str
    status: LingQStatus
    extended_status: Optional[ExtendedLingQStatus] = None
    hints: Tuple[LingQHint, ...] = field(default_factory=tuple)
    tags: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_ignored(self) -> bool:
        """Known and scheduled to never come up for review again."""
        return (
            self.status == LingQStatus.KNOWN
            and self.extended_status == ExtendedLingQStatus.NEVER
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LingQ":
        """
        Build a LingQ from an API (or cache) payload.

        Raises:
            KeyError, TypeError, ValueError: payload does not have the expected shape
        """
        extended = _pick(data, "extended_status", "extendedStatus")
        return cls(
            pk=int(data["pk"]),
            term=str(data["term"]),
            fragment=str(data.get("fragment") or ""),
            status=LingQStatus(int(data["status"])),
            extended_status=ExtendedLingQStatus(int(extended)) if extended is not None else None,
            hints=tuple(LingQHint.from_dict(h) for h in data.get("hints") or []),
            tags=tuple(str(t) for t in data.get("tags") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = int(self.status)
        data["extended_status"] = (
            int(self.extended_status) if self.extended_status is not None else None
        )
        data["hints"] = [asdict(h) for h in self.hints]
        data["tags"] = list(self.tags)
        return data


@dataclass(frozen=True)
class Lesson:
    """A LingQ lesson; only used to scope LingQ queries."""

    id: int
    collection_id: Optional[int]
    collection_title: str
    title: str
    views_count: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Lesson":
        collection_id = _pick(data, "collection_id", "collectionId")
        return cls(
            id=int(data["id"]),
            collection_id=int(collection_id) if collection_id is not None else None,
            collection_title=str(_pick(data, "collection_title", "collectionTitle", default="") or ""),
            title=str(data["title"]),
            views_count=int(_pick(data, "views_count", "viewsCount", default=0) or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Language:
    """A language available on LingQ."""

    code: str
    title: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Language":
        return cls(code=str(data["code"]), title=str(data.get("title", data["code"])))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def lingqs_from_json(data: Any) -> List[LingQ]:
    return [LingQ.from_dict(item) for item in data]


def lingqs_to_json(lingqs: List[LingQ]) -> List[Dict[str, Any]]:
    return [lingq.to_dict() for lingq in lingqs]


def lessons_from_json(data: Any) -> List[Lesson]:
    return [Lesson.from_dict(item) for item in data]


def lessons_to_json(lessons: List[Lesson]) -> List[Dict[str, Any]]:
    return [lesson.to_dict() for lesson in lessons]


def languages_from_json(data: Any) -> List[Language]:
    return [Language.from_dict(item) for item in data]


def languages_to_json(languages: List[Language]) -> List[Dict[str, Any]]:
    return [language.to_dict() for language in languages]
