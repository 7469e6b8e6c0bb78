"""
LingQ Sync: headless sync
-------------------------

Pushes new LingQs into Anki without opening the GUI.
"""

import asyncio
import os
import sys
from typing import Optional, Sequence

from lingqsync.config import Config, ConfigError, build_parser
from lingqsync.fetchers import FetchError
from lingqsync.services import LingQLibrary, SyncService
from lingqsync.utils.logger import get_logger, setup_logger

logger = get_logger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None):
    parser = build_parser(os.environ)
    parser.add_argument("--lesson", type=int, default=None,
                        help="Only sync LingQs of this lesson id")
    parser.add_argument("--refresh", action="store_true",
                        help="Ignore cached LingQ responses (needs --lesson)")
    args = vars(parser.parse_args(argv))
    if args["refresh"] and args["lesson"] is None:
        parser.error("--refresh only applies together with --lesson")
    lesson = args.pop("lesson")
    refresh = args.pop("refresh")
    return Config(**args), lesson, refresh


async def main(config: Config, lesson_id: Optional[int], refresh: bool) -> bool:
    """Run one sync pass; True when every submitted note was added."""
    library = LingQLibrary.from_config(config)
    service = SyncService(library.anki, config)
    try:
        if await library.language() is None:
            logger.error("LingQ does not offer language %r", config.lingq_lang)
            return False
        if lesson_id is not None:
            lingqs = await library.lesson_lingqs(lesson_id, refresh=refresh)
        else:
            lingqs = await library.lingq.get_lingqs()
        states = await service.load_note_states()
        result = await service.sync(lingqs, states)
    except FetchError as e:
        logger.error("Sync aborted: %s", e)
        return False
    finally:
        await library.close()

    return not result.failed


if __name__ == "__main__":
    try:
        config, lesson, refresh = parse_args()
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        sys.exit(2)
    setup_logger(config.log_level)
    try:
        success = asyncio.run(main(config, lesson, refresh))
        sys.exit(0 if success else 1)
    except KeyboardInterrupt:
        print("\n[!] Aborted by user.")
        sys.exit(1)
