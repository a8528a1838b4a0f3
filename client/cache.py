"""
Keyed query cache shared by every view of one client, backed by a
cachetools TLRU cache so each entry carries its own stale time.

Keys are tuples; invalidating a prefix drops every entry whose key starts
with it.
"""
import math
import time
from typing import Any, Hashable, NamedTuple, Optional, Tuple

from cachetools import TLRUCache

from schemas import ActorRef

Key = Tuple[Hashable, ...]

class query_keys:
    FEED = ("posts", "feed")

    @staticmethod
    def follow_status(target: ActorRef) -> Key:
        return ("follow-status", target.kind.value, target.id)

    @staticmethod
    def counts(actor: ActorRef) -> Key:
        return ("follower-counts", actor.kind.value, actor.id)

    @staticmethod
    def followers(actor: ActorRef) -> Key:
        return ("followers", actor.kind.value, actor.id)

    @staticmethod
    def following(actor: ActorRef) -> Key:
        return ("following", actor.kind.value, actor.id)


class _Entry(NamedTuple):
    value: Any
    stale_time: Optional[float]


def _stale_at(key: Key, entry: _Entry, now: float) -> float:
    if entry.stale_time is None:
        return math.inf
    return now + entry.stale_time


class QueryCache:
    def __init__(self, maxsize: int = 1024, clock=time.monotonic):
        self._entries = TLRUCache(maxsize=maxsize, ttu=_stale_at, timer=clock)

    def get(self, key: Key, default: Any = None) -> Any:
        entry = self._entries.get(key)
        return default if entry is None else entry.value

    def __contains__(self, key: Key) -> bool:
        return key in self._entries

    def set(self, key: Key, value: Any, stale_time: Optional[float] = None):
        """Store `value`; with `stale_time` (seconds) it is dropped once stale."""
        self._entries[key] = _Entry(value, stale_time)

    def invalidate(self, prefix: Key) -> int:
        self._entries.expire()
        stale = [key for key in list(self._entries) if key[:len(prefix)] == prefix]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        self._entries.expire()
        return len(self._entries)
