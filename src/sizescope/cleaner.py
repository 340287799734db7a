"""Trash-or-permanent deletion for sizescope."""

import logging
import os
import shutil
import sys
from pathlib import Path

from send2trash import send2trash

from sizescope.models import DeleteOutcome, DeleteResult

logger = logging.getLogger(__name__)


def is_trash_supported() -> bool:
    """
    Check whether the platform offers a trash / recycle bin.

    macOS and Windows always do. Elsewhere the freedesktop trash lives under
    $XDG_DATA_HOME (default ~/.local/share), so the home directory must be
    writable.
    """
    if sys.platform in ("darwin", "win32"):
        return True
    data_home = os.environ.get("XDG_DATA_HOME")
    if data_home:
        return os.access(data_home, os.W_OK)
    home = Path.home()
    return home.is_dir() and os.access(home, os.W_OK)


def move_to_trash(path: Path) -> None:
    """Move a file or folder to the trash. Raises on failure."""
    send2trash(os.fspath(path))


def permanent_delete(path: Path) -> None:
    """
    Permanently delete a file or folder tree.

    Symbolic links (the path itself or any link inside the tree) are removed
    as links and never followed.

    Raises:
        OSError: If any entry cannot be removed
    """
    if not os.path.lexists(path):
        return

    if path.is_symlink() or not path.is_dir():
        path.unlink()
    else:
        shutil.rmtree(path)


def delete_path(path: Path | str, allow_permanent: bool = False) -> DeleteResult:
    """
    Delete a path, preferring the trash.

    Args:
        path: File or folder to delete
        allow_permanent: Fall back to permanent deletion when the trash is
            unavailable or fails

    Returns:
        DeleteResult describing the outcome; never raises
    """
    target = Path(path)
    trash_supported = False
    trash_error: str | None = None

    try:
        trash_supported = is_trash_supported()
        if trash_supported:
            try:
                move_to_trash(target)
                logger.info("Moved %s to trash", target)
                return DeleteResult(
                    path=str(target),
                    outcome=DeleteOutcome.TRASHED,
                    trash_supported=True,
                )
            except Exception as e:
                trash_error = f"Trash failed: {e}"
                logger.info("Could not move %s to trash: %s", target, e)

        if not allow_permanent:
            return DeleteResult(
                path=str(target),
                outcome=DeleteOutcome.REFUSED,
                trash_supported=trash_supported,
                error=trash_error or "Trash not available",
            )

        permanent_delete(target)
        logger.info("Permanently deleted %s", target)
        return DeleteResult(
            path=str(target),
            outcome=DeleteOutcome.DELETED,
            trash_supported=trash_supported,
            error=trash_error,
        )

    except PermissionError as e:
        logger.warning("Permission denied deleting %s: %s", target, e)
        error = f"Permission denied: {e}"
    except Exception as e:
        logger.warning("Failed to delete %s: %s", target, e)
        error = str(e)

    return DeleteResult(
        path=str(target),
        outcome=DeleteOutcome.FAILED,
        trash_supported=trash_supported,
        error=error,
    )
