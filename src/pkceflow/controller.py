"""PKCE login controller for native OAuth clients.

Coordinates session generation, the interactive browser step, and token
exchange, and publishes the outcome through an observable AuthState.
"""

from __future__ import annotations

import logging

from pkceflow.config import AuthConfig
from pkceflow.handlers import AuthorizationHandler
from pkceflow.models.errors import (
    OAuth2Error,
    PresentationContextError,
    UnknownAuthError,
)
from pkceflow.models.security import AuthSession
from pkceflow.models.tokens import TokenRequest
from pkceflow.services.flow import OAuth2FlowManager
from pkceflow.services.tokens import OAuth2TokenManager
from pkceflow.state import AuthState

logger = logging.getLogger(__name__)


class AuthController:
    """Runs the OAuth 2.0 authorization code flow with PKCE.

    One controller holds at most one live AuthSession. Calling login() while
    another attempt is in flight starts a new session; the older attempt
    finishes quietly without touching the state.

    Errors never escape login(), except PresentationContextError which
    signals a misconfigured host application. Every other failure is
    published as ``last_error``.
    """

    def __init__(
        self,
        config: AuthConfig,
        authorization_handler: AuthorizationHandler,
        token_manager: OAuth2TokenManager | None = None,
        flow_manager: OAuth2FlowManager | None = None,
    ):
        """Initialize the controller.

        Args:
            config: Provider configuration
            authorization_handler: Presents the authorization URL to the user
            token_manager: Token endpoint client, created from config if omitted.
                An injected manager stays owned by the caller and is not
                closed by close().
            flow_manager: Authorization flow helper, created if omitted
        """
        self.config = config
        self.authorization_handler = authorization_handler
        self._owns_token_manager = token_manager is None
        self.token_manager = token_manager or OAuth2TokenManager(
            timeout=config.timeout
        )
        self.flow_manager = flow_manager or OAuth2FlowManager()
        self.state = AuthState()
        self._session: AuthSession | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.state.is_authenticated

    @property
    def access_token(self) -> str | None:
        return self.state.access_token

    @property
    def last_error(self) -> str | None:
        return self.state.last_error

    @property
    def session(self) -> AuthSession | None:
        """PKCE session of the latest login attempt, None after logout."""
        return self._session

    async def login(self) -> bool:
        """Run one complete login attempt.

        Returns:
            True if the attempt ended authenticated, False otherwise

        Raises:
            PresentationContextError: If no browser can be presented
        """
        try:
            session = self.flow_manager.new_session()
        except OAuth2Error as e:
            self._session = None
            self._record_failure(e)
            return False

        # Last call wins: any attempt still in flight is superseded
        self._session = session
        self.state.update(access_token=None)
        logger.info("Starting login")

        try:
            access_token = await self._authenticate(session)
        except PresentationContextError as e:
            if self._is_current(session):
                self._record_failure(e)
            raise
        except OAuth2Error as e:
            if self._is_current(session):
                self._record_failure(e)
            return False
        except Exception:
            logger.exception("Unexpected error during login")
            if self._is_current(session):
                self._record_failure(UnknownAuthError())
            return False

        if access_token is None:
            return False

        self.state.update(access_token=access_token, last_error=None)
        logger.info("Login successful")
        return True

    def logout(self) -> None:
        """Forget the access token and the PKCE session.

        Idempotent. A login still waiting in the browser is cancelled and
        returns False; a login past the browser can no longer authenticate.
        """
        self._session = None
        self.authorization_handler.cancel()
        self.state.update(access_token=None)
        logger.info("Logged out")

    async def close(self) -> None:
        """Close the token manager if this controller created it."""
        if self._owns_token_manager:
            await self.token_manager.close()

    async def __aenter__(self) -> AuthController:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _authenticate(self, session: AuthSession) -> str | None:
        """Drive one session from URL to token; None if it was superseded."""
        redirect_scheme = self.config.redirect_scheme
        auth_url = self.flow_manager.build_authorization_url(self.config, session)

        outcome = await self.authorization_handler.authorize(auth_url, redirect_scheme)
        if not self._is_current(session):
            logger.info("Discarding browser result of a superseded login")
            return None

        code = self.flow_manager.handle_authorization_outcome(outcome, redirect_scheme)

        token_request = TokenRequest(
            token_endpoint=self.config.token_endpoint,
            code=code,
            redirect_uri=self.config.redirect_uri,
            client_id=self.config.client_id,
            code_verifier=session.code_verifier,
        )
        access_token = await self.token_manager.exchange_code_for_token(token_request)
        if not self._is_current(session):
            logger.info("Discarding token of a superseded login")
            return None
        return access_token

    def _is_current(self, session: AuthSession) -> bool:
        return self._session is session

    def _record_failure(self, error: OAuth2Error) -> None:
        logger.warning(f"Login failed: {error.message}")
        self.state.update(access_token=None, last_error=error.message)
