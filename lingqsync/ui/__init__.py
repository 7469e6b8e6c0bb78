"""UI components for LingQ Sync."""

from .common import DesignTokens, show_snackbar
from .lessons import LessonsView, LessonTile
from .popup import LingQPopup, PopupState
from .sync_dialog import SyncDialog

__all__ = [
    'DesignTokens',
    'LessonsView',
    'LessonTile',
    'LingQPopup',
    'PopupState',
    'SyncDialog',
    'show_snackbar',
]
