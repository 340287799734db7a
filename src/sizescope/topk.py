"""Find the K largest non-nested folders under a root.

A single post-order walk computes every subtree size, so this module does not
use the signature cache. The walk runs on an explicit stack rather than the
call stack, so deep trees cannot hit the recursion limit.
"""

import logging
import os
from pathlib import Path

from sizescope.cache import canonical_key
from sizescope.cancel import CancelToken, is_cancelled
from sizescope.models import Item

logger = logging.getLogger(__name__)


def is_ancestor(ancestor: Path | str, descendant: Path | str) -> bool:
    """
    Check whether one path is a proper ancestor of another.

    Both paths are canonicalized first. Comparison is per path component,
    so /a/b is not an ancestor of /a/bc.

    Returns:
        True if descendant lies strictly below ancestor
    """
    a = Path(canonical_key(ancestor))
    d = Path(canonical_key(descendant))
    return a != d and d.parts[: len(a.parts)] == a.parts


def _has_ancestor_in(path: Path, top: list[Item]) -> bool:
    return any(is_ancestor(item.path, path) for item in top)


def _admit(candidate: Item, top: list[Item], k: int) -> None:
    # An enclosing member already claims this space
    if _has_ancestor_in(candidate.path, top):
        return
    top[:] = [item for item in top if not is_ancestor(candidate.path, item.path)]
    top.append(candidate)
    top.sort(key=lambda i: i.size_bytes, reverse=True)
    del top[k:]


def find_top_k(root: Path | str, k: int, cancel: CancelToken | None = None) -> list[Item]:
    """
    Find the K largest folders under root, no two of them nested.

    Args:
        root: Directory to search below (never returned itself)
        k: Maximum number of folders to return
        cancel: Optional token; on cancellation the partial top-K is returned

    Returns:
        Up to k Items sorted by size descending

    Raises:
        FileNotFoundError: If root does not exist
        NotADirectoryError: If root is not a directory
        OSError: If root itself cannot be listed
    """
    root_path = Path(canonical_key(root))
    if not root_path.exists():
        raise FileNotFoundError(f"Folder not found: {root_path}")
    if not root_path.is_dir():
        raise NotADirectoryError(f"Not a folder: {root_path}")

    top: list[Item] = []
    if k <= 0:
        return top

    path_stack: list[Path] = []
    size_stack: list[int] = []
    # Each directory is pushed twice: once to enter it, once to leave it after its children
    work: list[tuple[bool, Path]] = [(False, root_path)]

    while work:
        if is_cancelled(cancel):
            logger.info("Top-K search under %s cancelled", root_path)
            break

        leaving, current = work.pop()

        if leaving:
            dir_size = size_stack.pop()
            current = path_stack.pop()
            if size_stack:
                size_stack[-1] += dir_size
            if current == root_path:
                continue
            _admit(
                Item(name=current.name, path=current, is_directory=True, size_bytes=dir_size),
                top,
                k,
            )
            continue

        is_root = current == root_path
        if not is_root:
            if current.is_symlink():
                continue
            if root_path not in current.parents:
                continue

        path_stack.append(current)
        size_stack.append(0)
        work.append((True, current))

        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            work.append((False, Path(entry.path)))
                        elif entry.is_file(follow_symlinks=False):
                            if is_cancelled(cancel):
                                break
                            size_stack[-1] += entry.stat(follow_symlinks=False).st_size
                    except (PermissionError, OSError) as e:
                        logger.debug("Skipping %s: %s", entry.path, e)
                        continue
        except (PermissionError, OSError):
            if is_root:
                raise
            logger.debug("Could not list %s", current)

    return top
