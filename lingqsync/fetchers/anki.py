"""AnkiConnect client - one method per AnkiConnect action."""

from typing import Any, Dict, Iterable, List, Optional

from ..config import Config
from ..models import AnkiNote, NewNote
from ..utils.logger import get_logger
from .base import AnkiConnectError, BaseClient, DeserializationError

logger = get_logger(__name__)

API_VERSION = 6


class AnkiConnectClient(BaseClient):
    """
    Client for the AnkiConnect add-on's local JSON-RPC endpoint.

    Every call posts ``{action, version, params}`` and unwraps the
    ``{error, result}`` envelope. A non-null ``error`` raises
    AnkiConnectError even though the HTTP exchange succeeded.
    """

    def __init__(self, url: str = "http://localhost:8765/", timeout: int = 60):
        super().__init__(url, timeout=timeout)

    @classmethod
    def from_config(cls, config: Config) -> "AnkiConnectClient":
        return cls(url=config.anki_url, timeout=config.timeout)

    async def invoke(self, action: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Call an AnkiConnect action and return its result.

        Raises:
            AnkiConnectError: the envelope carries an error
            DeserializationError: the envelope is malformed
        """
        payload: Dict[str, Any] = {"action": action, "version": API_VERSION}
        if params is not None:
            payload["params"] = params
        data = await self._request_json("POST", self.base_url, json=payload)

        if not isinstance(data, dict) or not ("error" in data or "result" in data):
            raise DeserializationError(f"AnkiConnect {action}: malformed response envelope")
        error = data.get("error")
        if error is not None:
            raise AnkiConnectError(action, str(error))
        return data.get("result")

    async def version(self) -> int:
        """AnkiConnect API version; doubles as a connectivity check."""
        return int(await self.invoke("version"))

    async def find_notes(self, query: str) -> List[int]:
        result = await self.invoke("findNotes", {"query": query})
        return [int(note_id) for note_id in result or []]

    async def notes_info(self, note_ids: Iterable[int]) -> List[AnkiNote]:
        result = await self.invoke("notesInfo", {"notes": list(note_ids)})
        try:
            return [AnkiNote.from_dict(item) for item in result or []]
        except (KeyError, TypeError, ValueError) as e:
            raise DeserializationError(f"Unexpected note shape: {e!r}") from e

    async def get_notes(self, query: str) -> List[AnkiNote]:
        """Find notes matching a search query and fetch their contents."""
        note_ids = await self.find_notes(query)
        if not note_ids:
            return []
        notes = await self.notes_info(note_ids)
        logger.info("Loaded %d notes for %r", len(notes), query)
        return notes

    async def add_notes(self, notes: List[NewNote]) -> List[Optional[int]]:
        """
        Add notes in one batch.

        Returns:
            Created note id per submitted note, None where Anki rejected it
        """
        if not notes:
            return []
        result = await self.invoke("addNotes", {"notes": [note.to_dict() for note in notes]})
        if not isinstance(result, list) or len(result) != len(notes):
            raise DeserializationError(
                f"addNotes returned {len(result) if isinstance(result, list) else result!r} "
                f"results for {len(notes)} notes"
            )
        return [int(note_id) if note_id is not None else None for note_id in result]

    async def update_note_fields(self, note_id: int, fields: Dict[str, str]) -> None:
        await self.invoke("updateNoteFields", {"note": {"id": note_id, "fields": fields}})

    async def delete_notes(self, note_ids: Iterable[int]) -> None:
        await self.invoke("deleteNotes", {"notes": list(note_ids)})

    async def remove_tags(self, note_ids: Iterable[int], tags: Iterable[str]) -> None:
        await self.invoke("removeTags", {"notes": list(note_ids), "tags": " ".join(tags)})
