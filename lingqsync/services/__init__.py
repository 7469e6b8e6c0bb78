"""Services layer for business logic separation."""

from .library import LingQLibrary
from .sync_service import (
    NoteState,
    RowStatus,
    SyncResult,
    SyncService,
    apply_result,
    build_note,
    build_tags,
    effective_known,
    is_worth_importing,
    known_ids_from_notes,
    partition_lingqs,
    partition_results,
    row_status,
)

__all__ = [
    "LingQLibrary",
    "NoteState",
    "RowStatus",
    "SyncResult",
    "SyncService",
    "apply_result",
    "build_note",
    "build_tags",
    "effective_known",
    "is_worth_importing",
    "known_ids_from_notes",
    "partition_lingqs",
    "partition_results",
    "row_status",
]
