"""Advisory bracket memo keyed by ``(process, gas_name)``.

Entries only seed the next search; the solver re-evaluates both ends and falls
back to the default bounds when a cached bracket does not include the target.
Any implementation may drop entries at any time.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Protocol

from .bracket import Bracket
from .constants import CACHE_TTL_S

log = logging.getLogger(__name__)

CacheKey = tuple[str, str]


@dataclass(frozen=True)
class BracketCacheEntry:
    A_lo: float
    A_hi: float
    timestamp: float
    process: str
    gas_name: str

    def to_bracket(self) -> Bracket:
        return Bracket(self.A_lo, self.A_hi)


class BracketCache(Protocol):
    def get(self, key: CacheKey) -> Bracket | None: ...

    def put(self, key: CacheKey, bracket: Bracket) -> None: ...


class NullBracketCache:
    def get(self, key: CacheKey) -> Bracket | None:
        return None

    def put(self, key: CacheKey, bracket: Bracket) -> None:
        return None


def _usable(entry: BracketCacheEntry, now: float, ttl: float) -> bool:
    if now - entry.timestamp > ttl:
        return False
    return 0.0 < entry.A_lo < entry.A_hi


class MemoryBracketCache:
    def __init__(self, ttl: float = CACHE_TTL_S, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self.clock = clock
        self._entries: dict[CacheKey, BracketCacheEntry] = {}

    def get(self, key: CacheKey) -> Bracket | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if not _usable(entry, self.clock(), self.ttl):
            del self._entries[key]
            return None
        return entry.to_bracket()

    def put(self, key: CacheKey, bracket: Bracket) -> None:
        lo, hi = sorted((bracket.A_lo, bracket.A_hi))
        self._entries[key] = BracketCacheEntry(lo, hi, self.clock(), key[0], key[1])

    def clear(self) -> None:
        self._entries.clear()


class JsonBracketCache:
    """File-backed cache. Read and write failures are ignored."""

    def __init__(
        self,
        path: str | Path,
        ttl: float = CACHE_TTL_S,
        clock: Callable[[], float] = time.time,
    ):
        self.path = Path(path)
        self.ttl = ttl
        self.clock = clock

    @staticmethod
    def _slot(key: CacheKey) -> str:
        return f"{key[0]}|{key[1]}"

    def _load(self) -> dict:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.debug("bracket cache unreadable at %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: CacheKey) -> Bracket | None:
        raw = self._load().get(self._slot(key))
        if raw is None:
            return None
        try:
            entry = BracketCacheEntry(**raw)
        except TypeError as exc:
            log.debug("bracket cache entry malformed for %s: %s", key, exc)
            return None
        if not _usable(entry, self.clock(), self.ttl):
            return None
        return entry.to_bracket()

    def put(self, key: CacheKey, bracket: Bracket) -> None:
        lo, hi = sorted((bracket.A_lo, bracket.A_hi))
        data = self._load()
        data[self._slot(key)] = asdict(
            BracketCacheEntry(lo, hi, self.clock(), key[0], key[1])
        )
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as exc:
            log.debug("bracket cache not written to %s: %s", self.path, exc)
