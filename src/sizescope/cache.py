"""LRU/TTL cache of directory sizes, validated by a shallow directory signature."""

import logging
import os
import threading
import time
from collections import OrderedDict
from pathlib import Path

from sizescope.models import CacheEntry, DirSignature

logger = logging.getLogger(__name__)

DEFAULT_MAX_ENTRIES = 2000
DEFAULT_TTL_MILLIS = 30_000

FNV_OFFSET_BASIS = 0xCBF29CE484222325
FNV_PRIME = 0x100000001B3
_MASK64 = 0xFFFFFFFFFFFFFFFF


def canonical_key(path: Path | str) -> str:
    """Absolute, normalized form of a path (symlinks are not resolved)."""
    return os.path.abspath(os.fspath(path))


def now_millis() -> int:
    return int(time.time() * 1000)


class SignatureCache:
    """
    Bounded map of canonical directory path -> CacheEntry.

    Thread-safe: one lock guards the ordered map. Both get() and put() move
    the key to the most-recently-used end; overflow evicts from the other end.
    Freshness is not checked on get(); callers use is_valid().
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        ttl_millis: int = DEFAULT_TTL_MILLIS,
    ):
        self.max_entries = max_entries
        self.ttl_millis = ttl_millis
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, path: Path | str) -> CacheEntry | None:
        """
        Look up the entry for a directory.

        Args:
            path: Directory path (canonicalized before lookup)

        Returns:
            The stored entry, possibly stale, or None.
        """
        key = canonical_key(path)
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                self._entries.move_to_end(key)
            return entry

    def put(self, path: Path | str, size_bytes: int, signature: DirSignature) -> None:
        """
        Insert or replace the entry for a directory, stamped with the current time.

        Args:
            path: Directory path
            size_bytes: Computed total size
            signature: Signature the size was computed under
        """
        key = canonical_key(path)
        entry = CacheEntry(
            size_bytes=size_bytes,
            cached_at_millis=now_millis(),
            signature=signature,
        )
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            while self._entries and len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted %s from size cache", evicted)

    def invalidate(self, path: Path | str) -> None:
        """Drop the entry for a single path, if any."""
        key = canonical_key(path)
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        """Drop all entries."""
        with self._lock:
            self._entries.clear()

    def is_valid(self, entry: CacheEntry | None, current: DirSignature | None) -> bool:
        """True if the entry matches the current signature and is within TTL."""
        if entry is None or current is None:
            return False
        if entry.signature.hash != current.hash:
            return False
        age = now_millis() - entry.cached_at_millis
        return age <= self.ttl_millis

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, path: object) -> bool:
        if not isinstance(path, (str, Path)):
            return False
        key = canonical_key(path)
        with self._lock:
            return key in self._entries


# =============================================================================
# Shallow signature
# =============================================================================


def _fold(h: int, value: int) -> int:
    value &= _MASK64
    h ^= value ^ (value >> 32)
    return (h * FNV_PRIME) & _MASK64


def _name_hash(name: str) -> int:
    h = FNV_OFFSET_BASIS
    for byte in os.fsencode(name):
        h ^= byte
        h = (h * FNV_PRIME) & _MASK64
    return h


def _mtime_millis(path: str) -> int:
    try:
        return os.lstat(path).st_mtime_ns // 1_000_000
    except OSError:
        return 0


def compute_shallow_signature(directory: Path | str) -> DirSignature:
    """
    Compute a shallow signature for a directory.

    Folds the directory's own mtime, then the name and mtime of each
    immediate child in listing order. Unreadable items contribute 0.

    Args:
        directory: Directory to sign

    Returns:
        DirSignature for the directory's current state
    """
    path = canonical_key(directory)
    h = _fold(FNV_OFFSET_BASIS, _mtime_millis(path))
    try:
        with os.scandir(path) as entries:
            for entry in entries:
                h = _fold(h, _name_hash(entry.name))
                try:
                    mtime = entry.stat(follow_symlinks=False).st_mtime_ns // 1_000_000
                except OSError:
                    mtime = 0
                h = _fold(h, mtime)
    except OSError as e:
        logger.debug("Could not list %s for signature: %s", path, e)
    return DirSignature(hash=h)
