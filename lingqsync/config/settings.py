"""Global settings and configuration."""

import argparse
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

from dotenv import load_dotenv

# Load from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)


LINGQ_API_URL = "https://www.lingq.com/api/v2"
ANKI_CONNECT_URL = "http://localhost:8765/"


class ConfigError(ValueError):
    """Raised when required configuration is missing or malformed."""


@dataclass(frozen=True)
class Config:
    """Process-wide configuration, fixed at start-up."""

    # LingQ
    lingq_api_key: str
    lingq_lang: str = "da"
    lingq_page_size: int = 200
    lingq_url: str = LINGQ_API_URL

    # Anki
    anki_tag: str = "lingq"
    anki_deck: str = "Dansk::ToProcess"
    anki_model: str = "LingQ"
    anki_query: str = "deck:Dansk"
    anki_id_field: str = "LingQ"
    anki_url: str = ANKI_CONNECT_URL

    # Runtime
    cache_dir: str = ".cache"
    timeout: int = 60
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.lingq_api_key:
            raise ConfigError("LingQ API key missing - pass --lingq-api-key or set LINGQ_API_KEY")
        if self.lingq_page_size <= 0:
            raise ConfigError(f"Page size must be positive, got {self.lingq_page_size}")

    @property
    def cache_path(self) -> Path:
        return Path(self.cache_dir)

    @classmethod
    def from_args(
        cls,
        argv: Optional[Sequence[str]] = None,
        env: Optional[Mapping[str, str]] = None,
    ) -> "Config":
        """
        Build configuration from command-line flags.

        Every flag falls back to an environment variable of the same name
        in upper snake case (``--lingq-api-key`` -> ``LINGQ_API_KEY``).

        Args:
            argv: Argument list (defaults to sys.argv[1:])
            env: Environment mapping (defaults to os.environ)

        Returns:
            Parsed Config
        """
        parser = build_parser(os.environ if env is None else env)
        args = parser.parse_args(argv)
        return cls(**vars(args))


def _env_int(env: Mapping[str, str], key: str, default: int) -> int:
    value = env.get(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {value!r}")


def build_parser(env: Mapping[str, str]) -> argparse.ArgumentParser:
    """Create the argument parser with environment-backed defaults."""
    parser = argparse.ArgumentParser(
        prog="lingqsync",
        description="Sync LingQs into Anki through AnkiConnect",
    )
    parser.add_argument("--lingq-api-key", default=env.get("LINGQ_API_KEY", ""))
    parser.add_argument("--lingq-lang", default=env.get("LINGQ_LANG", "da"))
    parser.add_argument(
        "--lingq-page-size", type=int, default=_env_int(env, "LINGQ_PAGE_SIZE", 200)
    )
    parser.add_argument("--lingq-url", default=env.get("LINGQ_URL", LINGQ_API_URL))
    parser.add_argument("--anki-tag", default=env.get("ANKI_TAG", "lingq"))
    parser.add_argument("--anki-deck", default=env.get("ANKI_DECK", "Dansk::ToProcess"))
    parser.add_argument("--anki-model", default=env.get("ANKI_MODEL", "LingQ"))
    parser.add_argument("--anki-query", default=env.get("ANKI_QUERY", "deck:Dansk"))
    parser.add_argument("--anki-id-field", default=env.get("ANKI_ID_FIELD", "LingQ"))
    parser.add_argument("--anki-url", default=env.get("ANKI_URL", ANKI_CONNECT_URL))
    parser.add_argument("--cache-dir", default=env.get("CACHE_DIR", ".cache"))
    parser.add_argument("--timeout", type=int, default=_env_int(env, "TIMEOUT", 60))
    parser.add_argument("--log-level", default=env.get("LOG_LEVEL", "INFO"))
    return parser
