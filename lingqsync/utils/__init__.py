"""Utils module."""

from .logger import get_logger, setup_logger
from .parsing import Fragment, TextParser

__all__ = [
    'Fragment',
    'TextParser',
    'get_logger',
    'setup_logger',
]
