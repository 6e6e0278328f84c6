"""
ItemStore: owner of the shared form item.

The item is one mutable JSON-like tree shared by every field of a form.
Fields never hold their own copy; they read through the store and write
through ItemStore.set(), which bumps the change token and notifies
listeners (normally the owning FormSession, which then re-renders).

Thread safety: Not thread-safe (all operations expected on one thread).
"""
from contextlib import contextmanager
import logging
from typing import Any, Callable, Generator, List, Optional, Union

from formstate.paths import Path, get_path, set_path

logger = logging.getLogger(__name__)


class ItemStore:
    """Mutable root item plus change token and listeners."""

    def __init__(self, item: Optional[Any] = None):
        """
        Args:
            item: Root dict (or list) to bind to. Held by reference, never copied.
                  A new empty dict when omitted.
        """
        self._item: Any = item if item is not None else {}
        self._token: int = 0
        self._change_callbacks: List[Callable[[], None]] = []
        self._critical_callbacks: List[Callable[[], None]] = []

        # Nested atomic() blocks coalesce notifications
        self._atomic_depth: int = 0
        self._pending_notify: bool = False

    @property
    def item(self) -> Any:
        """Live reference to the root item, for read access by predicates."""
        return self._item

    # ========== READ / WRITE ==========

    def get(self, path: Union[Path, str], default: Any = None) -> Any:
        """Read the value at path (default when missing)."""
        return get_path(self._item, path, default)

    def set(self, path: Union[Path, str], value: Any) -> None:
        """Write value at path, then bump the token and notify listeners.

        Raises:
            PathError: Malformed path
        """
        set_path(self._item, path, value)
        logger.debug(f"ItemStore.set {str(path)!r} = {value!r}")
        self.increment_token()

    def replace(self, item: Any) -> None:
        """Swap the root item (e.g. form reset with a freshly loaded record)."""
        self._item = item if item is not None else {}
        logger.debug("ItemStore root replaced")
        self.increment_token()

    # ========== TOKEN MANAGEMENT AND CHANGE NOTIFICATION ==========

    @property
    def token(self) -> int:
        """Change token, incremented on every mutation."""
        return self._token

    def increment_token(self, notify: bool = True) -> None:
        """Increment the change token.

        Args:
            notify: If True (default), notify listeners of the change.
                    Inside atomic() the notification is deferred to the
                    outermost block's exit.
        """
        self._token += 1
        if not notify:
            return
        if self._atomic_depth > 0:
            self._pending_notify = True
            return
        self._notify_change()

    def _notify_change(self) -> None:
        """Notify all listeners that the item changed.

        Failures of ordinary listeners are logged and skipped. The first
        failure of a critical listener is re-raised once every listener
        has run.
        """
        logger.debug(f"ItemStore notifying {len(self._change_callbacks)} listeners (token={self._token})")
        critical_error: Optional[Exception] = None
        for callback in list(self._change_callbacks):
            try:
                callback()
            except Exception as e:
                if callback in self._critical_callbacks:
                    if critical_error is None:
                        critical_error = e
                else:
                    logger.warning(f"Change callback failed: {e}")
        if critical_error is not None:
            raise critical_error

    def connect_listener(self, callback: Callable[[], None], critical: bool = False) -> None:
        """Connect a listener called after every (coalesced) change.

        Args:
            callback: Zero-argument listener
            critical: Propagate the listener's exceptions to the writer
                      instead of logging them (used by the owning session,
                      whose render errors must reach the caller of set_value)
        """
        if callback not in self._change_callbacks:
            self._change_callbacks.append(callback)
            logger.debug(f"Connected change listener: {callback}")
        if critical and callback not in self._critical_callbacks:
            self._critical_callbacks.append(callback)

    def disconnect_listener(self, callback: Callable[[], None]) -> None:
        """Disconnect a change listener."""
        if callback in self._change_callbacks:
            self._change_callbacks.remove(callback)
            logger.debug(f"Disconnected change listener: {callback}")
        if callback in self._critical_callbacks:
            self._critical_callbacks.remove(callback)

    @contextmanager
    def atomic(self) -> Generator[None, None, None]:
        """Coalesce every change inside the block into one notification.

        Nested blocks are supported; only the outermost block notifies, and
        only if something changed.

        Example:
            with store.atomic():
                store.set("user.first", "Ada")
                store.set("user.last", "Lovelace")
            # listeners notified once here
        """
        self._atomic_depth += 1
        try:
            yield
        finally:
            self._atomic_depth -= 1
            if self._atomic_depth == 0 and self._pending_notify:
                self._pending_notify = False
                self._notify_change()

    @property
    def in_atomic(self) -> bool:
        return self._atomic_depth > 0
