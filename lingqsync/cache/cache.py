"""Disk-backed JSON cache for API responses."""

import asyncio
import json
import os
import re
import uuid
from pathlib import Path
from typing import Any, Awaitable, Callable, Dict, Optional, Set, TypeVar, Union

import aiofiles

from ..utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
Producer = Callable[[], Awaitable[T]]
Decoder = Callable[[Any], T]
Encoder = Callable[[T], Any]
PathLike = Union[str, Path]

_UNSAFE_KEY_CHARS = re.compile(r'[^A-Za-z0-9._-]+')


def _identity(value: Any) -> Any:
    return value


async def read_cache(path: PathLike, decode: Decoder = _identity) -> Any:
    """
    Read and decode a cache file.

    Raises:
        OSError: file missing or unreadable
        ValueError, KeyError, TypeError: content does not decode
    """
    async with aiofiles.open(path, "r", encoding="utf-8") as f:
        raw = await f.read()
    return decode(json.loads(raw))


async def write_cache(path: PathLike, data: Any) -> bool:
    """
    Persist JSON data atomically (temp file + rename).

    Failures are logged and reported as False; they never raise.
    """
    path = Path(path)
    temp_path = path.with_name(f"{path.name}.{uuid.uuid4().hex[:8]}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(data, ensure_ascii=False, indent=2)
        async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
            await f.write(payload)
        os.replace(temp_path, path)
    except (OSError, TypeError, ValueError) as e:
        logger.error("Could not write cache %s: %s", path, e)
        if temp_path.exists():
            try:
                os.remove(temp_path)
            except OSError:
                pass
        return False
    logger.debug("Wrote cache %s", path)
    return True


async def cached(
    path: PathLike,
    producer: Producer,
    decode: Decoder = _identity,
    encode: Encoder = _identity,
    refresh: bool = False,
) -> Any:
    """
    Return a cached value, running ``producer`` only when needed.

    Without ``refresh`` the cache file is read first; any read or parse
    failure counts as a miss. On a miss, or with ``refresh``, the producer
    runs and its result is written through to the file. A producer failure
    propagates and leaves the existing file untouched.

    Args:
        path: Cache file
        producer: Zero-argument coroutine function computing the value
        decode: Converts loaded JSON into the typed value
        encode: Converts the typed value into JSON-serializable data
        refresh: Skip the cache file and always run the producer

    Returns:
        The cached or freshly produced value
    """
    if not refresh:
        try:
            value = await read_cache(path, decode)
        except FileNotFoundError:
            logger.debug("Cache miss: %s", path)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable cache %s: %s", path, e)
        else:
            logger.debug("Cache hit: %s", path)
            return value

    value = await producer()
    await write_cache(path, encode(value))
    return value


async def cached_opt(
    path: PathLike,
    producer: Producer,
    should_run: bool,
    decode: Decoder = _identity,
    encode: Encoder = _identity,
    refresh: bool = False,
) -> Optional[Any]:
    """Like ``cached`` but returns None, touching nothing, when ``should_run`` is false."""
    if not should_run:
        return None
    return await cached(path, producer, decode, encode, refresh)


class JsonCache:
    """
    Typed key-value cache over a directory of JSON files.

    Each key maps to ``<directory>/<key>.json``. Values are kept in memory
    after the first load. At most one producer runs per key: concurrent
    callers for a key that is loading share the pending result.

    Usage:
        cache = JsonCache(".cache")
        lessons = await cache.get_or_fetch(
            "lessons", client.get_lessons,
            decode=lessons_from_json, encode=lessons_to_json,
        )
        cache.invalidate("lessons")  # next access fetches again
    """

    def __init__(self, directory: PathLike):
        self.directory = Path(directory)
        self._values: Dict[str, Any] = {}
        self._stale: Set[str] = set()
        self._pending: Dict[str, "asyncio.Task[Any]"] = {}

    def path_for(self, key: str) -> Path:
        """Cache file for a key."""
        safe = _UNSAFE_KEY_CHARS.sub("_", key).strip("._") or "_"
        return self.directory / f"{safe}.json"

    def peek(self, key: str) -> Optional[Any]:
        """In-memory value for a key, if loaded and not invalidated."""
        if key in self._stale:
            return None
        return self._values.get(key)

    def is_loading(self, key: str) -> bool:
        return key in self._pending

    def invalidate(self, key: str) -> None:
        """
        Drop the in-memory value; the next access runs the producer.

        The cache file stays on disk until a successful fetch replaces it.
        """
        self._values.pop(key, None)
        self._stale.add(key)

    async def get_or_fetch(
        self,
        key: str,
        producer: Producer,
        decode: Decoder = _identity,
        encode: Encoder = _identity,
    ) -> Any:
        if key in self._values and key not in self._stale:
            return self._values[key]
        return await self._load(key, producer, decode, encode, refresh=False)

    async def get_or_fetch_opt(
        self,
        key: str,
        producer: Producer,
        should_run: bool,
        decode: Decoder = _identity,
        encode: Encoder = _identity,
    ) -> Optional[Any]:
        """Like ``get_or_fetch`` but returns None when ``should_run`` is false."""
        if not should_run:
            return None
        return await self.get_or_fetch(key, producer, decode, encode)

    async def force_refresh(
        self,
        key: str,
        producer: Producer,
        decode: Decoder = _identity,
        encode: Encoder = _identity,
    ) -> Any:
        """Run the producer regardless of memory or disk state."""
        return await self._load(key, producer, decode, encode, refresh=True)

    async def _load(
        self,
        key: str,
        producer: Producer,
        decode: Decoder,
        encode: Encoder,
        refresh: bool,
    ) -> Any:
        task = self._pending.get(key)
        if task is None:
            refresh = refresh or key in self._stale
            self._stale.discard(key)
            task = asyncio.ensure_future(
                self._run(key, producer, decode, encode, refresh)
            )
            self._pending[key] = task
            task.add_done_callback(lambda _t, k=key: self._pending.pop(k, None))
        else:
            logger.debug("Joining pending load for %s", key)
        return await asyncio.shield(task)

    async def _run(
        self,
        key: str,
        producer: Producer,
        decode: Decoder,
        encode: Encoder,
        refresh: bool,
    ) -> Any:
        try:
            value = await cached(self.path_for(key), producer, decode, encode, refresh)
        except Exception:
            # Keep the key eligible for a fresh fetch on the next access
            self._stale.add(key)
            raise
        if key not in self._stale:
            self._values[key] = value
        return value
