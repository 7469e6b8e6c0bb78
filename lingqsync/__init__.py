"""LingQ Sync - import LingQs into Anki through AnkiConnect"""

__version__ = "0.1.0"

from .cache import JsonCache
from .config import Config
from .fetchers import AnkiConnectClient, LingQClient
from .models import AnkiNote, Lesson, LingQ, NewNote
from .services import LingQLibrary, SyncService

__all__ = [
    'AnkiConnectClient',
    'AnkiNote',
    'Config',
    'JsonCache',
    'Lesson',
    'LingQ',
    'LingQClient',
    'LingQLibrary',
    'NewNote',
    'SyncService',
]
