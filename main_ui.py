"""
LingQ Sync: Desktop GUI
-----------------------

A Flet interface for browsing LingQ lessons and pushing LingQs into Anki.
"""

import sys
from typing import Optional

import flet as ft

from lingqsync.config import Config, ConfigError
from lingqsync.services import LingQLibrary, SyncService
from lingqsync.ui import DesignTokens, LessonsView, LingQPopup, PopupState
from lingqsync.utils.logger import get_logger, setup_logger

logger = get_logger(__name__)


class LingQSyncApp:
    """Main application controller; owns the popup state."""

    def __init__(self, page: ft.Page, config: Config) -> None:
        """
        Initialize the application.

        Args:
            page: Flet page instance
            config: Parsed start-up configuration
        """
        self.page = page
        self.config = config
        self.library = LingQLibrary.from_config(config)
        self.service = SyncService(self.library.anki, config)
        self.popup_state = PopupState.closed()

        self._setup_page()
        self._popup = LingQPopup(page, self.set_popup)
        self.lessons = LessonsView(page, self.library, self.service, self.set_popup)
        self.page.add(self.lessons.container)
        self.page.run_task(self.lessons.load)

    def _setup_page(self) -> None:
        """Configure page settings and theme."""
        self.page.title = "LingQ -> Anki"
        self.page.theme_mode = ft.ThemeMode.DARK
        self.page.bgcolor = DesignTokens.BG_PRIMARY
        self.page.theme = ft.Theme(
            color_scheme_seed=DesignTokens.ACCENT_PRIMARY,
            font_family="Inter, Roboto, Segoe UI, sans-serif",
        )
        self.page.padding = 0
        self.page.window.min_width = 800
        self.page.window.min_height = 600
        self.page.on_close = lambda _: self.page.run_task(self.library.close)

    def set_popup(self, state: PopupState) -> None:
        """Single entry point for popup transitions requested by child views."""
        self.popup_state = state
        self._popup.render(state)


def make_main(config: Config):
    def main(page: ft.Page) -> None:
        try:
            LingQSyncApp(page, config)
        except Exception:
            import traceback
            logger.exception("UI failed to start")
            page.add(
                ft.Container(
                    content=ft.Column(
                        controls=[
                            ft.Text("UI failed to start", size=20, weight=ft.FontWeight.BOLD,
                                    color=ft.Colors.RED_400),
                            ft.Text(traceback.format_exc(), size=11, selectable=True,
                                    color=ft.Colors.WHITE70),
                        ],
                        spacing=10,
                    ),
                    padding=20,
                )
            )
            page.update()
    return main


def run(argv: Optional[list] = None) -> int:
    try:
        config = Config.from_args(argv)
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 2
    setup_logger(config.log_level)
    ft.run(make_main(config))
    return 0


if __name__ == "__main__":
    sys.exit(run())
