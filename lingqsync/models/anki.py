"""Anki note models (AnkiConnect payload shapes)."""

import html
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


BOLD_PATTERN = re.compile(r'<b(?:\s[^>]*)?>(.*?)</b>', re.IGNORECASE | re.DOTALL)
HTML_TAG_PATTERN = re.compile(r'<[^>]+>')


@dataclass
class NoteField:
    """One field of an existing note."""
    value: str
    order: int = 0


@dataclass
class AnkiNote:
    """An existing note as returned by ``notesInfo``."""

    note_id: int
    model_name: str
    fields: Dict[str, NoteField] = field(default_factory=dict)
    tags: List[str] = field(default_factory=list)
    cards: List[int] = field(default_factory=list)

    def field_value(self, name: str) -> Optional[str]:
        note_field = self.fields.get(name)
        return note_field.value if note_field is not None else None

    def get_term(self) -> Optional[str]:
        """Return the text of the first <b> element in the Front field."""
        front = self.field_value("Front")
        if not front:
            return None
        match = BOLD_PATTERN.search(front)
        if match is None:
            return None
        return html.unescape(HTML_TAG_PATTERN.sub("", match.group(1)))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnkiNote":
        return cls(
            note_id=int(data["noteId"]),
            model_name=str(data.get("modelName", "")),
            fields={
                name: NoteField(value=str(f["value"]), order=int(f.get("order", 0)))
                for name, f in (data.get("fields") or {}).items()
            },
            tags=[str(t) for t in data.get("tags") or []],
            cards=[int(c) for c in data.get("cards") or []],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "noteId": self.note_id,
            "modelName": self.model_name,
            "fields": {
                name: {"value": f.value, "order": f.order}
                for name, f in self.fields.items()
            },
            "tags": list(self.tags),
            "cards": list(self.cards),
        }


@dataclass
class NewNote:
    """A note draft for ``addNotes``."""

    deck_name: str
    model_name: str
    fields: Dict[str, str]
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deckName": self.deck_name,
            "modelName": self.model_name,
            "fields": dict(self.fields),
            "tags": list(self.tags),
        }


def notes_from_json(data: Any) -> List[AnkiNote]:
    return [AnkiNote.from_dict(item) for item in data]


def notes_to_json(notes: List[AnkiNote]) -> List[Dict[str, Any]]:
    return [note.to_dict() for note in notes]
