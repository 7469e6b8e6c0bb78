"""
Sync Dialog - review and push one lesson's LingQs to Anki.

Lists the Anki notes afresh on open and on Refresh (writing through the
cache), shows every LingQ with its status and runs the sync on demand.
LingQs marked known and never to review are shown as ignored. Failed
LingQs stay eligible and are retried when Sync is pressed again.
"""

from typing import Dict, List, Optional, Sequence

import flet as ft

from ..fetchers import FetchError
from ..models import LingQ
from ..services import (
    LingQLibrary,
    NoteState,
    RowStatus,
    SyncResult,
    SyncService,
    apply_result,
    row_status,
)
from ..utils.logger import get_logger
from .common import DesignTokens, error_text, fragment_text, show_snackbar

logger = get_logger(__name__)


STATUS_COLORS = {
    RowStatus.NEW: DesignTokens.STATUS_NEW,
    RowStatus.KNOWN: DesignTokens.STATUS_KNOWN,
    RowStatus.SYNCED: DesignTokens.STATUS_SYNCED,
    RowStatus.FAILED: DesignTokens.STATUS_FAILED,
    RowStatus.SKIPPED: DesignTokens.TEXT_MUTED,
}


class SyncDialog:
    """Modal dialog listing LingQs with their Anki status and a Sync button."""

    def __init__(
        self,
        page: ft.Page,
        library: LingQLibrary,
        service: SyncService,
        title: str,
        lingqs: Sequence[LingQ],
    ) -> None:
        self.page = page
        self.library = library
        self.service = service
        self.lingqs = list(lingqs)
        self.is_syncing: bool = False

        self._states: Optional[Dict[int, NoteState]] = None
        self._body = ft.Container(
            content=ft.ProgressRing(),
            alignment=ft.Alignment(0, 0),
            width=760,
            height=480,
        )
        self._status = ft.Text("", size=13, color=DesignTokens.TEXT_TERTIARY)
        self._sync_button = ft.ElevatedButton(
            "Sync",
            icon=ft.Icons.SYNC_ROUNDED,
            disabled=True,
            on_click=self._on_sync_click,
        )
        self._refresh_button = ft.TextButton(
            "Refresh",
            icon=ft.Icons.REFRESH_ROUNDED,
            disabled=True,
            on_click=self._on_refresh_click,
        )
        self._dialog = ft.AlertDialog(
            modal=True,
            title=ft.Text(title, weight=ft.FontWeight.W_600),
            content=ft.Column(
                controls=[self._status, self._body],
                tight=True,
                spacing=DesignTokens.SPACING_SM,
            ),
            actions=[
                ft.TextButton("Close", on_click=lambda _: self.close()),
                self._refresh_button,
                self._sync_button,
            ],
            actions_alignment=ft.MainAxisAlignment.END,
        )

    def open(self) -> None:
        self.page.overlay.append(self._dialog)
        self._dialog.open = True
        self.page.update()
        self.page.run_task(self._load_states, True)

    def close(self) -> None:
        self._dialog.open = False
        self.page.update()
        if self._dialog in self.page.overlay:
            self.page.overlay.remove(self._dialog)

    def _on_refresh_click(self, e: ft.ControlEvent) -> None:
        if self.is_syncing:
            return
        self.page.run_task(self._load_states, True)

    async def _load_states(self, refresh: bool = False) -> None:
        self._sync_button.disabled = True
        self._refresh_button.disabled = True
        self.page.update()
        try:
            notes = await self.library.anki_notes(refresh=refresh)
        except FetchError as e:
            logger.error("Could not load Anki notes: %s", e)
            self._body.content = error_text(f"Could not load Anki notes: {e}")
            self._refresh_button.disabled = False
            self.page.update()
            return

        states = self.service.note_states(notes)
        _, skipped = self.service.plan(self.lingqs, states)
        self._states = apply_result(states, SyncResult(skipped=skipped))
        self._sync_button.disabled = False
        self._refresh_button.disabled = False
        self._render_rows()
        self.page.update()

    def _render_rows(self) -> None:
        states = self._states or {}
        counts: Dict[RowStatus, int] = {}
        rows: List[ft.DataRow] = []
        for lingq in self.lingqs:
            status = row_status(lingq.pk, states)
            counts[status] = counts.get(status, 0) + 1
            rows.append(
                ft.DataRow(
                    cells=[
                        ft.DataCell(fragment_text(lingq.fragment, lingq.term, size=13)),
                        ft.DataCell(
                            ft.Text(
                                ", ".join(hint.text for hint in lingq.hints),
                                size=13,
                                weight=ft.FontWeight.W_600,
                            )
                        ),
                        ft.DataCell(
                            ft.Text(status.value, size=13, color=STATUS_COLORS[status])
                        ),
                    ],
                )
            )

        table = ft.DataTable(
            columns=[
                ft.DataColumn(ft.Text("Term", weight=ft.FontWeight.BOLD)),
                ft.DataColumn(ft.Text("Hint", weight=ft.FontWeight.BOLD)),
                ft.DataColumn(ft.Text("Status", weight=ft.FontWeight.BOLD)),
            ],
            rows=rows,
            border=ft.border.all(1, ft.Colors.WHITE10),
            border_radius=10,
            horizontal_lines=ft.BorderSide(1, ft.Colors.WHITE10),
            heading_row_color=ft.Colors.with_opacity(0.05, ft.Colors.WHITE),
            data_row_max_height=80,
            column_spacing=20,
        )
        self._body.content = ft.Column(controls=[table], scroll=ft.ScrollMode.AUTO, expand=True)
        self._body.alignment = None
        self._status.value = "  ".join(
            f"{status.value}: {counts[status]}" for status in RowStatus if counts.get(status)
        )

    def _on_sync_click(self, e: ft.ControlEvent) -> None:
        if self.is_syncing or self._states is None:
            return
        self.page.run_task(self._run_sync)

    async def _run_sync(self) -> None:
        if self.is_syncing or self._states is None:
            return

        self.is_syncing = True
        self._sync_button.disabled = True
        self._refresh_button.disabled = True
        self._status.value = "Syncing..."
        self.page.update()

        try:
            result = await self.service.sync(self.lingqs, self._states)
        except FetchError as e:
            logger.error("Sync failed: %s", e)
            self._status.value = f"Sync failed: {e}"
            self._status.color = DesignTokens.ACCENT_DANGER
            show_snackbar(self.page, "Sync failed", error=True)
        else:
            apply_result(self._states, result)
            if result.submitted:
                # Anki changed; the next dialog must not reuse the cached note list
                self.library.invalidate_anki_notes()
            self._status.color = DesignTokens.TEXT_TERTIARY
            self._render_rows()
            if result.failed:
                show_snackbar(
                    self.page,
                    f"{len(result.failed)} of {result.submitted} LingQs failed to sync",
                    error=True,
                )
            else:
                show_snackbar(self.page, f"Synced {len(result.succeeded)} LingQs")
        finally:
            self.is_syncing = False
            self._sync_button.disabled = False
            self._refresh_button.disabled = False
            self.page.update()
