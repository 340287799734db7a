"""Cooperative cancellation for long-running scans."""

import threading


class CancelToken:
    """
    Write-once flag shared by every task of one user-initiated operation.

    Scans poll it at safe points (before a directory, before a file, before
    acquiring a permit). Blocking system calls are never interrupted.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation. Cannot be undone."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancelToken(cancelled={self.cancelled})"


def is_cancelled(token: CancelToken | None) -> bool:
    """True if a token was given and has been cancelled."""
    return token is not None and token.cancelled
