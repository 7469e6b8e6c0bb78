"""Shared design tokens and small UI helpers."""

from typing import List, Optional

import flet as ft

from ..utils.parsing import TextParser


class DesignTokens:
    """Centralized design tokens for consistent styling."""
    # Colors - Deep dark theme
    BG_PRIMARY = "#121212"
    BG_ELEVATED = "#2D2D30"

    # Text colors
    TEXT_PRIMARY = "#FFFFFF"
    TEXT_SECONDARY = "#B3B3B3"
    TEXT_TERTIARY = "#808080"
    TEXT_MUTED = "#5C5C5C"

    # Accent colors (desaturated)
    ACCENT_PRIMARY = "#7C4DFF"
    ACCENT_DANGER = "#E57373"
    ACCENT_SUCCESS = "#81C784"

    # Row status colors
    STATUS_NEW = "#64B5F6"
    STATUS_KNOWN = "#81C784"
    STATUS_SYNCED = "#C6FF00"
    STATUS_FAILED = "#E57373"

    # Spacing
    SPACING_SM = 8
    SPACING_MD = 16
    SPACING_LG = 24

    # Border radius
    RADIUS_SM = 8


def fragment_text(fragment: str, term: str, size: int = 14, center: bool = False) -> ft.Text:
    """Context phrase with every occurrence of the term in bold."""
    spans: List[ft.TextSpan] = []
    for piece in TextParser.split_fragment(fragment, term):
        style = ft.TextStyle(
            weight=ft.FontWeight.BOLD if piece.is_term else ft.FontWeight.NORMAL,
            color=DesignTokens.TEXT_PRIMARY if piece.is_term else DesignTokens.TEXT_SECONDARY,
        )
        spans.append(ft.TextSpan(piece.text, style=style))
    return ft.Text(
        spans=spans,
        size=size,
        text_align=ft.TextAlign.CENTER if center else ft.TextAlign.START,
    )


def error_text(message: str) -> ft.Text:
    return ft.Text(message, size=13, color=DesignTokens.ACCENT_DANGER, selectable=True)


def show_snackbar(page: ft.Page, message: str, error: bool = False, icon: Optional[str] = None) -> None:
    """Show a snackbar notification."""
    snackbar = ft.SnackBar(
        content=ft.Row(
            controls=[
                ft.Icon(
                    icon or (ft.Icons.ERROR_OUTLINE if error else ft.Icons.CHECK_CIRCLE_OUTLINE),
                    color=DesignTokens.TEXT_PRIMARY,
                    size=20,
                ),
                ft.Text(message, color=DesignTokens.TEXT_PRIMARY, size=14),
            ],
            spacing=12,
        ),
        bgcolor=DesignTokens.ACCENT_DANGER if error else DesignTokens.ACCENT_SUCCESS,
        duration=3500,
    )
    # Clean up old snackbars
    for ctrl in list(page.overlay):
        if isinstance(ctrl, ft.SnackBar):
            page.overlay.remove(ctrl)
    page.overlay.append(snackbar)
    snackbar.open = True
    page.update()
