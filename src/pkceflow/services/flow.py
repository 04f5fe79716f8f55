"""Authorization flow orchestration service.

Builds the PKCE authorization URL and turns the browser outcome into an
authorization code.
"""

from __future__ import annotations

import logging
from urllib.parse import parse_qs, urlsplit

from pkceflow.config import AuthConfig
from pkceflow.models.errors import (
    AuthenticationFailedError,
    AuthorizationCodeParsingError,
    AuthorizationDeniedError,
    InvalidURLComponentsError,
)
from pkceflow.models.flow import (
    AuthorizationOutcome,
    AuthorizationRequest,
    AuthorizationResponse,
    OutcomeKind,
)
from pkceflow.models.security import AuthSession
from pkceflow.primitives.pkce import PKCEManager

logger = logging.getLogger(__name__)


class OAuth2FlowManager:
    """Orchestrates the front-channel half of the authorization code flow.

    Handles:
    - PKCE session generation
    - Authorization URL construction
    - Browser outcome interpretation
    - Callback URL parsing
    """

    def __init__(self, pkce_manager: PKCEManager | None = None):
        self._pkce_manager = pkce_manager or PKCEManager()

    def new_session(self) -> AuthSession:
        """Generate a fresh PKCE session for one login attempt."""
        return self._pkce_manager.generate_session()

    def build_authorization_url(self, config: AuthConfig, session: AuthSession) -> str:
        """Build the URL the user visits to grant access.

        Args:
            config: Provider configuration
            session: PKCE session for this attempt

        Returns:
            Authorization URL carrying the session's code challenge

        Raises:
            InvalidURLComponentsError: If the endpoint cannot form a valid URL
                or the redirect URI has no scheme
        """
        if not config.redirect_scheme:
            raise InvalidURLComponentsError()

        auth_request = AuthorizationRequest(
            authorization_endpoint=config.authorization_endpoint,
            client_id=config.client_id,
            redirect_uri=config.redirect_uri,
            scope=config.scope,
            code_challenge=session.code_challenge,
            code_challenge_method=session.code_challenge_method,
            response_type=config.response_type,
        )
        authorization_url = auth_request.build_authorization_url()

        logger.debug(f"Generated authorization URL for client {config.client_id!r}")
        return authorization_url

    def handle_authorization_outcome(
        self, outcome: AuthorizationOutcome, expected_scheme: str
    ) -> str:
        """Extract the authorization code from a browser outcome.

        Args:
            outcome: Terminal result of the browser session
            expected_scheme: Scheme of the registered redirect URI

        Returns:
            The authorization code

        Raises:
            AuthenticationFailedError: If the browser session was cancelled or failed
            AuthorizationCodeParsingError: If the callback carries no code
        """
        if outcome.kind is OutcomeKind.CANCELLED:
            logger.info("Authorization cancelled by user")
            raise AuthenticationFailedError(outcome.message or "cancelled")
        if outcome.kind is OutcomeKind.FAILED:
            raise AuthenticationFailedError(outcome.message or "unknown failure")
        if outcome.callback_url is None:
            raise AuthorizationCodeParsingError()

        return self.handle_authorization_callback(outcome.callback_url, expected_scheme)

    def handle_authorization_callback(
        self, callback_url: str, expected_scheme: str
    ) -> str:
        """Parse the redirect callback and return its authorization code.

        Args:
            callback_url: Full callback URL intercepted by the browser session
            expected_scheme: Scheme of the registered redirect URI

        Returns:
            The authorization code

        Raises:
            AuthorizationDeniedError: If the provider returned an OAuth error
            AuthorizationCodeParsingError: If the URL is malformed or has no code
        """
        scheme, auth_response = self._parse_callback_url(callback_url)

        if scheme.lower() != expected_scheme.lower():
            logger.warning(f"Callback scheme {scheme!r} does not match redirect URI")
            raise AuthorizationCodeParsingError()

        if auth_response.is_error():
            logger.warning(
                f"Authorization callback contained error: {auth_response.error} - "
                f"{auth_response.error_description}"
            )
            raise AuthorizationDeniedError(
                auth_response.error, auth_response.error_description
            )

        if not auth_response.code:
            logger.warning("Authorization callback missing both code and error")
            raise AuthorizationCodeParsingError()

        logger.info("Authorization callback successful - received authorization code")
        return auth_response.code

    def _parse_callback_url(
        self, callback_url: str
    ) -> tuple[str, AuthorizationResponse]:
        try:
            parsed = urlsplit(callback_url)
            query_params = parse_qs(parsed.query)
        except ValueError as e:
            raise AuthorizationCodeParsingError() from e

        # Extract single values from query parameter lists
        def get_single_param(key: str) -> str | None:
            values = query_params.get(key, [])
            return values[0] if values else None

        return parsed.scheme, AuthorizationResponse(
            code=get_single_param("code"),
            state=get_single_param("state"),
            error=get_single_param("error"),
            error_description=get_single_param("error_description"),
            error_uri=get_single_param("error_uri"),
        )
