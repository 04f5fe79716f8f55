"""Exception hierarchy for PKCE login failures.

Every failure of a login attempt maps to one exception type. Each carries a
human-readable ``message`` that the controller publishes as ``last_error``.
"""

from __future__ import annotations


class OAuth2Error(Exception):
    """Base exception for all OAuth 2.0 login errors."""

    default_message = "OAuth error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidURLComponentsError(OAuth2Error):
    """Raised when the endpoint URL cannot be assembled from the config."""

    default_message = "Invalid URL components"


class AuthenticationFailedError(OAuth2Error):
    """Raised when the interactive browser step fails or is cancelled."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Authentication failed: {reason}")


class AuthorizationCodeParsingError(OAuth2Error):
    """Raised when the redirect callback does not carry an authorization code."""

    default_message = "Failed to parse authorization code from callback URL"


class AuthorizationDeniedError(AuthorizationCodeParsingError):
    """Raised when the provider redirected back with an OAuth error instead of a code.

    Kept a subclass of AuthorizationCodeParsingError so callers that only
    care about "no code" keep working.
    """

    def __init__(self, error: str, error_description: str | None = None):
        self.error = error
        self.error_description = error_description
        detail = f"{error} ({error_description})" if error_description else error
        super().__init__(f"{self.default_message}: {detail}")


class NetworkError(OAuth2Error):
    """Raised when the token request fails at the transport level."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Network error: {reason}")


class TokenExchangeError(OAuth2Error):
    """Raised when the token endpoint rejects the authorization code."""

    def __init__(self, description: str):
        self.description = description
        super().__init__(f"Token exchange failed: {description}")


class UnknownAuthError(OAuth2Error):
    """Raised for failures that fit no other category.

    Covers unparseable token responses and a broken random source.
    """

    default_message = "An unknown error occurred"


class PresentationContextError(OAuth2Error):
    """Raised when no browser or presentation surface is available.

    This is a configuration problem of the host application, not a runtime
    condition of a single login attempt.
    """

    default_message = "No presentation context available for the browser session"
