"""Cancellation tokens for bounding benchmark runs."""

import threading
from typing import Optional


class CancellationToken:
    """Broadcastable cancellation signal backed by a ``threading.Event``.

    A child token is cancelled when its parent is cancelled or when its
    optional timeout expires, whichever happens first. Cancelling a child
    never affects the parent.
    """

    def __init__(self, parent: Optional["CancellationToken"] = None):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._children: list[CancellationToken] = []
        self._parent = parent
        self._timer: Optional[threading.Timer] = None
        if parent is not None:
            parent._attach(self)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Cancel this token and every child derived from it."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            children = list(self._children)
            timer = self._timer

        if timer is not None:
            timer.cancel()
        for child in children:
            child.cancel()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or until ``timeout`` elapses.

        Returns:
            True if the token is cancelled.
        """
        return self._event.wait(timeout)

    def child(self, timeout: Optional[float] = None) -> "CancellationToken":
        """Derive a token that is also cancelled after ``timeout`` seconds."""
        token = CancellationToken(parent=self)
        if timeout is not None:
            timer = threading.Timer(timeout, token.cancel)
            timer.daemon = True
            with token._lock:
                token._timer = timer
            timer.start()
        return token

    def release(self) -> None:
        """Stop the timeout timer and detach from the parent."""
        with self._lock:
            timer = self._timer
            self._timer = None
        if timer is not None:
            timer.cancel()
        if self._parent is not None:
            self._parent._detach(self)
            self._parent = None

    def _attach(self, child: "CancellationToken") -> None:
        with self._lock:
            already_cancelled = self._event.is_set()
            if not already_cancelled:
                self._children.append(child)
        if already_cancelled:
            child.cancel()

    def _detach(self, child: "CancellationToken") -> None:
        with self._lock:
            if child in self._children:
                self._children.remove(child)
