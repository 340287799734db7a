"""Concurrent folder sizing for sizescope."""

import logging
import os
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path

from sizescope.cache import SignatureCache, canonical_key, compute_shallow_signature
from sizescope.cancel import CancelToken, is_cancelled
from sizescope.cleaner import delete_path
from sizescope.config import AppConfig, load_config
from sizescope.models import DeleteResult, Item
from sizescope.topk import find_top_k

logger = logging.getLogger(__name__)


def default_worker_count() -> int:
    return max(2, os.cpu_count() or 1)


def default_permit_count() -> int:
    return max(2, (os.cpu_count() or 1) // 2)


def fast_folder_size(root: Path | str, cancel: CancelToken | None = None) -> int:
    """
    Total size of regular files under a directory.

    Depth-first over os.scandir. Symbolic links are never followed, so a
    symlinked root or subdirectory contributes 0. Unreadable entries are
    skipped. The token is polled before each directory and each file; on
    cancellation the partial total is returned and should be discarded.

    Args:
        root: Directory to size
        cancel: Optional cancellation token

    Returns:
        Total bytes
    """
    root = os.fspath(root)
    if os.path.islink(root):
        return 0

    total = 0
    stack = [root]
    while stack:
        if is_cancelled(cancel):
            return total
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                        elif entry.is_file(follow_symlinks=False):
                            if is_cancelled(cancel):
                                return total
                            total += entry.stat(follow_symlinks=False).st_size
                    except (PermissionError, OSError):
                        continue
        except (PermissionError, OSError) as e:
            logger.debug("Skipping unreadable folder %s: %s", current, e)
            continue

    return total


class FolderScanner:
    """
    Sizes the entries of a folder on a shared worker pool.

    Directory sizes are served from a SignatureCache when the folder's
    shallow signature is unchanged and the entry is within TTL. The pool is
    owned by the scanner: call close() (or use it as a context manager)
    when done.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        max_workers: int | None = None,
        max_dir_permits: int | None = None,
    ):
        if config is None:
            config = load_config()
        self.config = config
        self.cache = SignatureCache(
            max_entries=config.cache_max_entries,
            ttl_millis=config.cache_ttl_millis,
        )
        self.max_dir_permits = max_dir_permits or default_permit_count()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or default_worker_count(),
            thread_name_prefix="sizescope",
        )

    def __enter__(self) -> "FolderScanner":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Shut down the worker pool, dropping queued tasks."""
        self._executor.shutdown(wait=False, cancel_futures=True)

    def clear_cache(self) -> None:
        self.cache.clear()

    def invalidate(self, path: Path | str) -> None:
        self.cache.invalidate(path)

    # =========================================================================
    # Listings
    # =========================================================================

    def list_folder_contents(self, directory: Path | str, cancel: CancelToken | None = None) -> list[Item]:
        """
        List every file and folder inside a directory with its size.

        Files are sized from their own metadata; folders from the cache or a
        full walk.

        Args:
            directory: Folder to list
            cancel: Optional token; if cancelled while collecting, [] is returned

        Returns:
            Items sorted by size, largest first

        Raises:
            OSError: If the folder itself cannot be listed
        """
        permits = threading.BoundedSemaphore(self.max_dir_permits)
        futures: list[Future] = []

        with os.scandir(directory) as entries:
            children = list(entries)

        for entry in children:
            path = Path(entry.path)
            try:
                is_dir = entry.is_dir()
            except OSError:
                is_dir = False
            if is_dir:
                futures.append(self._executor.submit(self._size_directory, entry.name, path, permits, cancel))
            else:
                futures.append(self._executor.submit(self._size_file, entry.name, path))

        return self._collect(futures, cancel)

    def list_folders_and_sizes(self, parent: Path | str, cancel: CancelToken | None = None) -> list[Item]:
        """
        List the immediate subfolders of a directory with their sizes.

        Symbolic links to folders are left out.

        Raises:
            OSError: If the folder itself cannot be listed
        """
        permits = threading.BoundedSemaphore(self.max_dir_permits)
        subdirs: list[tuple[str, Path]] = []

        with os.scandir(parent) as entries:
            for entry in entries:
                try:
                    if entry.is_dir(follow_symlinks=False):
                        subdirs.append((entry.name, Path(entry.path)))
                except OSError:
                    continue

        futures = [
            self._executor.submit(self._size_directory, name, path, permits, cancel)
            for name, path in subdirs
        ]
        return self._collect(futures, cancel)

    def find_top_k(self, root: Path | str, k: int, cancel: CancelToken | None = None) -> list[Item]:
        """Top-K largest non-nested folders under root (does not use the cache)."""
        return find_top_k(root, k, cancel)

    # =========================================================================
    # Delete
    # =========================================================================

    def delete_detailed(self, path: Path | str, allow_permanent: bool = False) -> DeleteResult:
        """Delete a path and drop the cache entries of it and its parent."""
        try:
            return delete_path(path, allow_permanent)
        finally:
            self.invalidate(path)
            parent = Path(canonical_key(path)).parent
            self.invalidate(parent)

    def delete(self, path: Path | str, allow_permanent: bool = False) -> bool:
        """
        Move a path to the trash, or delete it permanently if allowed.

        Returns:
            True if the path was trashed or deleted
        """
        return self.delete_detailed(path, allow_permanent).success

    # =========================================================================
    # Internals
    # =========================================================================

    def _size_file(self, name: str, path: Path) -> Item:
        try:
            size = path.stat().st_size
        except OSError:
            size = 0
        # Files never touch the cache but are reported as cached
        return Item(name=name, path=path, is_directory=False, size_bytes=size, from_cache=True)

    def _size_directory(
        self,
        name: str,
        path: Path,
        permits: threading.BoundedSemaphore,
        cancel: CancelToken | None,
    ) -> Item:
        placeholder = Item(name=name, path=path, is_directory=True, size_bytes=0, from_cache=False)
        if is_cancelled(cancel):
            return placeholder

        with permits:
            if is_cancelled(cancel):
                return placeholder
            size, from_cache = self._dir_size_with_cache(path, cancel)

        if size is None:
            return placeholder
        return Item(name=name, path=path, is_directory=True, size_bytes=size, from_cache=from_cache)

    def _dir_size_with_cache(self, path: Path, cancel: CancelToken | None) -> tuple[int | None, bool]:
        key = canonical_key(path)
        signature = compute_shallow_signature(key)

        entry = self.cache.get(key)
        if self.cache.is_valid(entry, signature):
            return entry.size_bytes, True

        size = fast_folder_size(key, cancel)
        if is_cancelled(cancel):
            return None, False

        self.cache.put(key, size, signature)
        return size, False

    def _collect(self, futures: list[Future], cancel: CancelToken | None) -> list[Item]:
        items: list[Item] = []
        for future in futures:
            if is_cancelled(cancel):
                logger.info("Listing cancelled; discarding %d results", len(items))
                return []
            try:
                items.append(future.result())
            except Exception as e:
                logger.debug("Dropping entry that failed to size: %s", e)

        if is_cancelled(cancel):
            return []

        items.sort(key=lambda i: i.size_bytes, reverse=True)
        return items
