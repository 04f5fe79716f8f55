"""Interactive authorization handlers.

A handler presents the authorization URL to the user and reports exactly
one outcome: the intercepted redirect, a cancellation, or a failure.
"""

from __future__ import annotations

import asyncio
import logging
import webbrowser
from typing import Awaitable, Callable, Protocol
from urllib.parse import urlsplit

from pkceflow.models.errors import PresentationContextError
from pkceflow.models.flow import AuthorizationOutcome

logger = logging.getLogger(__name__)


class AuthorizationHandler(Protocol):
    """Protocol for the interactive user authorization step.

    Allows different strategies for browser interaction:
    - System browser with a custom-scheme redirect forwarded by the host app
    - Manual (user pastes the callback URL)
    - Custom UI integration
    """

    async def authorize(
        self, auth_url: str, callback_scheme: str
    ) -> AuthorizationOutcome:
        """Present auth_url and wait for the redirect to callback_scheme.

        Returns:
            The single terminal outcome of this browser session
        """
        ...

    def cancel(self, message: str = "The user canceled login") -> None:
        """End a pending authorize() call with a cancelled outcome.

        Does nothing when no session is pending.
        """
        ...


class BrowserAuthorizationHandler:
    """Opens the system browser and waits for the redirect to be forwarded.

    The operating system routes the custom-scheme redirect to the host
    application, which hands it over with :meth:`deliver_callback`. A UI that
    lets the user dismiss the login calls :meth:`cancel`.
    """

    def __init__(self, open_url: Callable[[str], bool] | None = None):
        """Initialize the browser handler.

        Args:
            open_url: Function that shows a URL to the user and returns
                whether it could. Defaults to :func:`webbrowser.open`.
        """
        self._open_url = open_url or webbrowser.open
        self._pending: asyncio.Future[AuthorizationOutcome] | None = None
        self._callback_scheme: str | None = None

    @property
    def is_waiting(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def authorize(
        self, auth_url: str, callback_scheme: str
    ) -> AuthorizationOutcome:
        if self.is_waiting:
            # A newer session replaces the one still on screen
            self._pending.set_result(
                AuthorizationOutcome.cancelled("Superseded by a new login")
            )

        loop = asyncio.get_running_loop()
        pending: asyncio.Future[AuthorizationOutcome] = loop.create_future()
        self._pending = pending
        self._callback_scheme = callback_scheme

        try:
            try:
                # webbrowser may wait on a launcher subprocess
                opened = await asyncio.to_thread(self._open_url, auth_url)
            except webbrowser.Error as e:
                raise PresentationContextError(f"Unable to open a browser: {e}") from e
            if not opened:
                raise PresentationContextError("Unable to open a browser")

            logger.info("Opened authorization URL in browser; waiting for redirect")
            return await pending
        finally:
            if self._pending is pending:
                self._pending = None

    def deliver_callback(self, callback_url: str) -> bool:
        """Hand an intercepted redirect URL to the waiting session.

        Returns:
            True if the URL was accepted, False if nothing is waiting or the
            scheme does not match the registered redirect
        """
        if not self.is_waiting:
            logger.debug("Ignoring callback with no login in progress")
            return False
        scheme = urlsplit(callback_url).scheme
        if scheme.lower() != (self._callback_scheme or "").lower():
            logger.debug(f"Ignoring callback for foreign scheme {scheme!r}")
            return False
        self._pending.set_result(AuthorizationOutcome.callback(callback_url))
        return True

    def cancel(self, message: str = "The user canceled login") -> None:
        """Report that the user dismissed the browser."""
        if self.is_waiting:
            self._pending.set_result(AuthorizationOutcome.cancelled(message))

    def fail(self, message: str) -> None:
        """Report a presentation or transport failure of the browser session."""
        if self.is_waiting:
            self._pending.set_result(AuthorizationOutcome.failed(message))


class ManualAuthorizationHandler:
    """Authorization handler that delegates to a callable.

    The callable receives the authorization URL and returns the callback URL,
    or None if the user gave up. Suitable for CLI tools and tests.
    """

    def __init__(
        self, callback_handler: Callable[[str], Awaitable[str | None]] | None = None
    ):
        self.callback_handler = callback_handler
        self._task: asyncio.Future[str | None] | None = None
        self._cancel_message = "The user canceled login"

    async def authorize(
        self, auth_url: str, callback_scheme: str
    ) -> AuthorizationOutcome:
        if self.callback_handler is None:
            raise PresentationContextError(
                f"Please visit {auth_url} and provide the callback URL"
            )
        task = asyncio.ensure_future(self.callback_handler(auth_url))
        self._task = task
        try:
            await asyncio.wait({task})
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            if self._task is task:
                self._task = None

        if task.cancelled():
            return AuthorizationOutcome.cancelled(self._cancel_message)
        try:
            callback_url = task.result()
        except (OSError, EOFError) as e:
            return AuthorizationOutcome.failed(str(e) or type(e).__name__)
        if callback_url is None:
            return AuthorizationOutcome.cancelled()
        return AuthorizationOutcome.callback(callback_url.strip())

    def cancel(self, message: str = "The user canceled login") -> None:
        """Abandon the pending callback_handler call."""
        if self._task is not None and not self._task.done():
            self._cancel_message = message
            self._task.cancel()
