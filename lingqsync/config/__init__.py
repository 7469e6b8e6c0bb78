"""Configuration module for LingQ Sync."""

from .settings import ANKI_CONNECT_URL, LINGQ_API_URL, Config, ConfigError, build_parser

__all__ = [
    'Config',
    'ConfigError',
    'build_parser',
    'LINGQ_API_URL',
    'ANKI_CONNECT_URL',
]
