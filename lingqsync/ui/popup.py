"""
LingQ detail popup.

The popup state is a plain value owned by the top-level app. Child views
never open the popup themselves: they hand a new PopupState to the
``on_popup`` callback they were given, and the app renders it.
"""

from dataclasses import dataclass
from typing import Callable, Optional

import flet as ft

from ..models import LingQ
from .common import DesignTokens, fragment_text


@dataclass(frozen=True)
class PopupState:
    """Closed when ``lingq`` is None, otherwise showing that LingQ."""
    lingq: Optional[LingQ] = None

    @property
    def is_open(self) -> bool:
        return self.lingq is not None

    @classmethod
    def closed(cls) -> "PopupState":
        return cls()

    @classmethod
    def opened(cls, lingq: LingQ) -> "PopupState":
        return cls(lingq=lingq)


PopupCallback = Callable[[PopupState], None]


class LingQPopup:
    """Renders a PopupState as a dialog on the page overlay."""

    def __init__(self, page: ft.Page, on_popup: PopupCallback) -> None:
        self.page = page
        self._on_popup = on_popup
        self._dialog: Optional[ft.AlertDialog] = None

    def render(self, state: PopupState) -> None:
        self._dismiss()
        if not state.is_open:
            self.page.update()
            return

        lingq = state.lingq
        hints = [
            ft.Text(hint.text, size=16, weight=ft.FontWeight.W_600, text_align=ft.TextAlign.CENTER)
            for hint in lingq.hints
        ] or [ft.Text("No hints", size=13, color=DesignTokens.TEXT_MUTED)]

        dialog = ft.AlertDialog(
            modal=False,
            title=ft.Text(lingq.term, weight=ft.FontWeight.W_700),
            content=ft.Column(
                controls=[
                    fragment_text(lingq.fragment, lingq.term, size=16, center=True),
                    ft.Divider(height=1, color=ft.Colors.WHITE10),
                    *hints,
                ],
                horizontal_alignment=ft.CrossAxisAlignment.CENTER,
                tight=True,
                spacing=DesignTokens.SPACING_SM,
            ),
            actions=[
                ft.TextButton("Close", on_click=lambda _: self._on_popup(PopupState.closed())),
            ],
            actions_alignment=ft.MainAxisAlignment.END,
        )
        dialog.on_dismiss = lambda _: self._on_dismissed(dialog)
        self._dialog = dialog
        self.page.overlay.append(dialog)
        dialog.open = True
        self.page.update()

    def _on_dismissed(self, dialog: ft.AlertDialog) -> None:
        # Ignore late dismiss events from a dialog that was already replaced
        if dialog is self._dialog:
            self._on_popup(PopupState.closed())

    def _dismiss(self) -> None:
        if self._dialog is None:
            return
        self._dialog.open = False
        if self._dialog in self.page.overlay:
            self.page.overlay.remove(self._dialog)
        self._dialog = None
