"""Fetchers module - LingQ and AnkiConnect API clients."""

from .anki import AnkiConnectClient
from .base import (
    AnkiConnectError,
    BaseClient,
    DeserializationError,
    FetchError,
    HTTPStatusError,
    TransportError,
)
from .lingq import LingQClient

__all__ = [
    'AnkiConnectClient',
    'AnkiConnectError',
    'BaseClient',
    'DeserializationError',
    'FetchError',
    'HTTPStatusError',
    'LingQClient',
    'TransportError',
]
