"""
Lessons View - browse lessons and their LingQs.

Lessons come from the cache (or LingQ on first run). A lesson's LingQs are
only fetched once its tile is expanded.
"""

from typing import Dict, List, Optional

import flet as ft

from ..fetchers import FetchError
from ..models import Lesson, LingQ
from ..services import LingQLibrary, SyncService
from ..utils.logger import get_logger
from .common import DesignTokens, error_text
from .popup import PopupCallback, PopupState
from .sync_dialog import SyncDialog

logger = get_logger(__name__)


class LessonTile:
    """One lesson: expands to show its LingQs and offers a sync."""

    def __init__(
        self,
        page: ft.Page,
        lesson: Lesson,
        library: LingQLibrary,
        service: SyncService,
        on_popup: PopupCallback,
    ) -> None:
        self.page = page
        self.lesson = lesson
        self.library = library
        self.service = service
        self._on_popup = on_popup

        self.expanded: bool = False
        self.is_loading: bool = False
        self.lingqs: Optional[List[LingQ]] = None

        self._count_text = ft.Text("", size=12, color=DesignTokens.TEXT_TERTIARY)
        self._body = ft.Container(padding=ft.Padding.symmetric(horizontal=16, vertical=8))
        self._refresh_button = ft.IconButton(
            icon=ft.Icons.REFRESH_ROUNDED,
            icon_size=18,
            tooltip="Refresh LingQs",
            on_click=self._on_refresh_click,
        )
        self._tile = self._build_tile()

    @property
    def control(self) -> ft.Control:
        return self._tile

    @property
    def heading(self) -> str:
        if self.lesson.collection_title:
            return f"{self.lesson.collection_title} - {self.lesson.title}"
        return self.lesson.title

    def _build_tile(self) -> ft.ExpansionTile:
        return ft.ExpansionTile(
            title=ft.Row(
                controls=[
                    ft.Text(self.heading, size=14, weight=ft.FontWeight.W_500),
                    self._count_text,
                ],
                spacing=8,
            ),
            trailing=ft.Row(
                controls=[
                    self._refresh_button,
                    ft.IconButton(
                        icon=ft.Icons.SYNC_ROUNDED,
                        icon_size=18,
                        tooltip="Sync to Anki",
                        on_click=self._on_sync_click,
                    ),
                ],
                tight=True,
                spacing=0,
            ),
            controls=[self._body],
            on_change=self._on_toggle,
            bgcolor=ft.Colors.with_opacity(0.05, ft.Colors.WHITE),
            collapsed_bgcolor=ft.Colors.with_opacity(0.02, ft.Colors.WHITE),
        )

    def _on_toggle(self, e: ft.ControlEvent) -> None:
        self.expanded = not self.expanded
        if self.expanded and self.lingqs is None:
            self.page.run_task(self._load)

    def _on_refresh_click(self, e: ft.ControlEvent) -> None:
        self.page.run_task(self._load, True)

    def _on_sync_click(self, e: ft.ControlEvent) -> None:
        self.page.run_task(self._open_sync)

    async def _load(self, refresh: bool = False) -> None:
        if self.is_loading:
            return
        self.is_loading = True
        self._refresh_button.disabled = True
        self._body.content = ft.ProgressRing(width=20, height=20, stroke_width=2)
        self.page.update()
        try:
            lingqs = await self.library.lesson_lingqs(
                self.lesson.id, should_run=self.expanded or refresh, refresh=refresh
            )
        except FetchError as e:
            logger.error("Could not load LingQs for lesson %s: %s", self.lesson.id, e)
            self._body.content = error_text(f"Something went wrong: {e}")
        else:
            if lingqs is not None:
                self.lingqs = lingqs
            self._render_lingqs()
        finally:
            self.is_loading = False
            self._refresh_button.disabled = False
            self.page.update()

    def _render_lingqs(self) -> None:
        if self.lingqs is None:
            self._body.content = None
            return
        self._count_text.value = f"({len(self.lingqs)})"
        if not self.lingqs:
            self._body.content = ft.Text("No LingQs", size=12, color=DesignTokens.TEXT_MUTED)
            return
        self._body.content = ft.Row(
            controls=[self._term_chip(lingq) for lingq in self.lingqs],
            wrap=True,
            spacing=DesignTokens.SPACING_SM,
            run_spacing=DesignTokens.SPACING_SM,
        )

    def _term_chip(self, lingq: LingQ) -> ft.Container:
        return ft.Container(
            content=ft.Text(lingq.term, size=13, color=DesignTokens.TEXT_PRIMARY),
            padding=ft.Padding.symmetric(horizontal=12, vertical=6),
            border_radius=DesignTokens.RADIUS_SM,
            border=ft.border.all(1, ft.Colors.with_opacity(0.2, ft.Colors.WHITE)),
            bgcolor=DesignTokens.BG_ELEVATED,
            on_click=lambda _, l=lingq: self._on_popup(PopupState.opened(l)),
            ink=True,
        )

    async def _open_sync(self) -> None:
        if self.lingqs is None:
            try:
                self.lingqs = await self.library.lesson_lingqs(self.lesson.id)
            except FetchError as e:
                logger.error("Could not load LingQs for lesson %s: %s", self.lesson.id, e)
                self._body.content = error_text(f"Something went wrong: {e}")
                self.page.update()
                return
            self._render_lingqs()
        SyncDialog(self.page, self.library, self.service, self.heading, self.lingqs).open()


class LessonsView:
    """
    Lesson list with a global refresh.

    Provides the lesson tiles and the refresh control; the popup state is
    owned by the caller and reached through ``on_popup``.
    """

    def __init__(
        self,
        page: ft.Page,
        library: LingQLibrary,
        service: SyncService,
        on_popup: PopupCallback,
    ) -> None:
        self.page = page
        self.library = library
        self.service = service
        self._on_popup = on_popup
        self.is_loading: bool = False
        self._tiles: Dict[int, LessonTile] = {}

        self._status_text = ft.Text("Loading...", size=13, color=DesignTokens.TEXT_TERTIARY)
        self._list = ft.ListView(controls=[], spacing=4, expand=True)
        self._refresh_button = ft.ElevatedButton(
            "Refresh",
            icon=ft.Icons.REFRESH_ROUNDED,
            on_click=lambda _: self.page.run_task(self.load, True),
        )
        self._container = self._build_view()

    @property
    def container(self) -> ft.Container:
        return self._container

    def _build_view(self) -> ft.Container:
        header = ft.Row(
            controls=[
                ft.Column(
                    controls=[
                        ft.Text("Lessons", size=32, weight=ft.FontWeight.W_700,
                                color=DesignTokens.TEXT_PRIMARY),
                        self._status_text,
                    ],
                    spacing=6,
                ),
                ft.Container(expand=True),
                self._refresh_button,
            ],
            vertical_alignment=ft.CrossAxisAlignment.START,
        )
        return ft.Container(
            content=ft.Column(
                controls=[
                    header,
                    ft.Container(height=DesignTokens.SPACING_MD),
                    self._list,
                ],
                spacing=0,
                expand=True,
            ),
            expand=True,
            padding=DesignTokens.SPACING_LG,
        )

    async def load(self, refresh: bool = False) -> None:
        """Load lessons (from cache unless ``refresh``) and rebuild the list."""
        if self.is_loading:
            return
        self.is_loading = True
        self._refresh_button.disabled = True
        self._status_text.value = "Loading..."
        self._status_text.color = DesignTokens.TEXT_TERTIARY
        self.page.update()
        try:
            language = await self.library.language()
            lessons = await self.library.lessons(refresh=refresh)
        except FetchError as e:
            logger.error("Could not load lessons: %s", e)
            self._status_text.value = "Something went wrong"
            self._status_text.color = DesignTokens.ACCENT_DANGER
            self._list.controls = [error_text(str(e))]
        else:
            if language is None:
                logger.warning("LingQ does not offer language %r", self.library.config.lingq_lang)
                name = self.library.config.lingq_lang
            else:
                name = language.title
            self._status_text.value = f"{len(lessons)} lessons ({name})"
            self._list.controls = [self._tile_for(lesson).control for lesson in lessons]
        finally:
            self.is_loading = False
            self._refresh_button.disabled = False
            self.page.update()

    def _tile_for(self, lesson: Lesson) -> LessonTile:
        tile = self._tiles.get(lesson.id)
        if tile is None or tile.lesson != lesson:
            tile = LessonTile(self.page, lesson, self.library, self.service, self._on_popup)
            self._tiles[lesson.id] = tile
        return tile
