"""Observable authentication state.

The controller is the only writer. The presentation layer reads the current
values or subscribes to snapshots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass(frozen=True)
class AuthSnapshot:
    """Immutable view of the authentication state at one moment."""

    access_token: str | None = None
    last_error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None


class AuthState:
    """Published login state with change notifications."""

    def __init__(self):
        self._snapshot = AuthSnapshot()
        self._observers: list[Callable[[AuthSnapshot], None]] = []

    @property
    def is_authenticated(self) -> bool:
        return self._snapshot.is_authenticated

    @property
    def access_token(self) -> str | None:
        return self._snapshot.access_token

    @property
    def last_error(self) -> str | None:
        return self._snapshot.last_error

    def snapshot(self) -> AuthSnapshot:
        return self._snapshot

    def subscribe(self, observer: Callable[[AuthSnapshot], None]) -> Callable[[], None]:
        """Register an observer called with every new snapshot.

        Observers run synchronously on the event loop that performs the
        login, in registration order.

        Returns:
            A function that removes the observer again
        """
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def update(self, access_token=_UNSET, last_error=_UNSET) -> None:
        """Replace fields of the snapshot and notify observers on change.

        Only the owning AuthController calls this; fields left out keep
        their current value.
        """
        new = AuthSnapshot(
            access_token=(
                self._snapshot.access_token if access_token is _UNSET else access_token
            ),
            last_error=(
                self._snapshot.last_error if last_error is _UNSET else last_error
            ),
        )
        if new == self._snapshot:
            return
        self._snapshot = new

        for observer in list(self._observers):
            try:
                observer(new)
            except Exception:
                logger.exception("Auth state observer failed")
