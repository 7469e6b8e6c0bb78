"""
Sync Service - decides which LingQs become Anki notes.

Separates the dedup/sync rules from the UI layer:
- Existing notes are matched to LingQs by the id stored in a dedicated field
- LingQs already in Anki are never added twice
- Per-note failures from AnkiConnect are reported, not raised, and are
  retried on the next sync
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple

from ..config import Config
from ..fetchers import AnkiConnectClient
from ..models import AnkiNote, LingQ, NewNote
from ..utils.logger import get_logger
from ..utils.parsing import TextParser

logger = get_logger(__name__)


class NoteState(Enum):
    """What Anki knows about a LingQ id."""
    KNOWN = "known"
    SYNCED = "synced"
    FAILED = "failed"
    SKIPPED = "skipped"


class RowStatus(Enum):
    """Per-LingQ status shown in the sync table."""
    NEW = "New"
    KNOWN = "Known"
    SYNCED = "Done"
    FAILED = "Failed to sync"
    SKIPPED = "Ignored"


@dataclass
class SyncResult:
    """Outcome of one sync attempt."""
    succeeded: Set[int] = field(default_factory=set)
    failed: Set[int] = field(default_factory=set)
    skipped: Set[int] = field(default_factory=set)
    known: Set[int] = field(default_factory=set)

    @property
    def submitted(self) -> int:
        return len(self.succeeded) + len(self.failed)


def known_ids_from_notes(notes: Iterable[AnkiNote], id_field: str) -> Set[int]:
    """LingQ ids stored in ``id_field``; notes without a parsable id are ignored."""
    known: Set[int] = set()
    for note in notes:
        value = note.field_value(id_field)
        if value is None:
            continue
        try:
            known.add(int(value.strip()))
        except ValueError:
            continue
    return known


def partition_lingqs(lingqs: Sequence[LingQ], known: Set[int]) -> Tuple[List[LingQ], List[LingQ]]:
    """
    Split LingQs into (new, known) by id, keeping input order.

    Every input lands in exactly one of the two lists.
    """
    new: List[LingQ] = []
    existing: List[LingQ] = []
    for lingq in lingqs:
        (existing if lingq.pk in known else new).append(lingq)
    return new, existing


def is_worth_importing(lingq: LingQ) -> bool:
    """Known LingQs marked to never be reviewed are not imported."""
    return not lingq.is_ignored


def build_tags(base_tag: str, tags: Iterable[str]) -> List[str]:
    return TextParser.hierarchical_tags(base_tag, tags)


def build_note(lingq: LingQ, config: Config) -> NewNote:
    """Draft the Anki note for a LingQ."""
    return NewNote(
        deck_name=config.anki_deck,
        model_name=config.anki_model,
        fields={
            "Front": TextParser.highlight_term(lingq.fragment, lingq.term),
            "Back": ", ".join(hint.text for hint in lingq.hints),
            "Term": lingq.term,
            config.anki_id_field: str(lingq.pk),
        },
        tags=build_tags(config.anki_tag, lingq.tags),
    )


def partition_results(
    ids: Sequence[int], created: Sequence[Optional[int]]
) -> Tuple[Set[int], Set[int]]:
    """
    Split submitted LingQ ids into (failed, succeeded).

    ``created`` holds AnkiConnect's note id per submitted note, None where
    the note was rejected.
    """
    if len(ids) != len(created):
        raise ValueError(f"{len(created)} results for {len(ids)} submitted notes")
    failed: Set[int] = set()
    succeeded: Set[int] = set()
    for pk, note_id in zip(ids, created):
        (failed if note_id is None else succeeded).add(pk)
    return failed, succeeded


def effective_known(states: Mapping[int, NoteState]) -> Set[int]:
    """Ids to treat as already in Anki or not to import; failed ones are retried."""
    return {pk for pk, state in states.items() if state != NoteState.FAILED}


def apply_result(states: Dict[int, NoteState], result: SyncResult) -> Dict[int, NoteState]:
    """Fold a sync result into the note state map (in place) and return it."""
    states.update((pk, NoteState.SKIPPED) for pk in result.skipped)
    states.update((pk, NoteState.KNOWN) for pk in result.known)
    states.update((pk, NoteState.FAILED) for pk in result.failed)
    states.update((pk, NoteState.SYNCED) for pk in result.succeeded)
    return states


def row_status(pk: int, states: Mapping[int, NoteState]) -> RowStatus:
    state = states.get(pk)
    if state is None:
        return RowStatus.NEW
    return {
        NoteState.KNOWN: RowStatus.KNOWN,
        NoteState.SYNCED: RowStatus.SYNCED,
        NoteState.FAILED: RowStatus.FAILED,
        NoteState.SKIPPED: RowStatus.SKIPPED,
    }[state]


class SyncService:
    """
    Pushes LingQs into Anki without creating duplicates.

    Usage:
        service = SyncService(anki_client, config)
        states = await service.load_note_states()
        result = await service.sync(lingqs, states)
        apply_result(states, result)
    """

    def __init__(self, anki: AnkiConnectClient, config: Config):
        self.anki = anki
        self.config = config

    async def load_notes(self) -> List[AnkiNote]:
        return await self.anki.get_notes(self.config.anki_query)

    async def load_note_states(self) -> Dict[int, NoteState]:
        """LingQ ids already in Anki, all marked KNOWN."""
        notes = await self.load_notes()
        return self.note_states(notes)

    def note_states(self, notes: Iterable[AnkiNote]) -> Dict[int, NoteState]:
        known = known_ids_from_notes(notes, self.config.anki_id_field)
        return {pk: NoteState.KNOWN for pk in known}

    def plan(
        self, lingqs: Sequence[LingQ], states: Mapping[int, NoteState]
    ) -> Tuple[List[LingQ], Set[int]]:
        """LingQs to import and ids skipped as not worth importing."""
        new, _ = partition_lingqs(lingqs, effective_known(states))
        to_import = [lingq for lingq in new if is_worth_importing(lingq)]
        skipped = {lingq.pk for lingq in new if not is_worth_importing(lingq)}
        return to_import, skipped

    async def sync(self, lingqs: Sequence[LingQ], states: Mapping[int, NoteState]) -> SyncResult:
        """
        Add every new, importable LingQ to Anki in one batch.

        The notes in Anki are listed again right before adding, so ids
        missing from ``states`` but present in Anki are reported in
        ``SyncResult.known`` instead of being added twice.

        Raises:
            FetchError: AnkiConnect could not be reached or rejected the batch
        """
        to_import, skipped = self.plan(lingqs, states)
        result = SyncResult(skipped=skipped)
        if not to_import:
            logger.info("Nothing to sync (%d skipped)", len(skipped))
            return result

        # The caller's states may come from an outdated note listing
        in_anki = known_ids_from_notes(await self.load_notes(), self.config.anki_id_field)
        result.known = {lingq.pk for lingq in to_import if lingq.pk in in_anki}
        if result.known:
            logger.info("%d LingQs are already in Anki", len(result.known))
            to_import = [lingq for lingq in to_import if lingq.pk not in result.known]
            if not to_import:
                return result

        ids = [lingq.pk for lingq in to_import]
        notes = [build_note(lingq, self.config) for lingq in to_import]
        created = await self.anki.add_notes(notes)

        result.failed, result.succeeded = partition_results(ids, created)
        logger.info(
            "Synced %d/%d LingQs (%d failed, %d skipped)",
            len(result.succeeded), len(ids), len(result.failed), len(skipped),
        )
        if result.failed:
            logger.warning("Anki rejected LingQs: %s", sorted(result.failed))
        return result
