"""Authorization flow models.

Contains models for the authorization request, the browser outcome, and the
parsed redirect callback.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote, urlencode, urlsplit

from pkceflow.models.errors import InvalidURLComponentsError


@dataclass(frozen=True)
class AuthorizationRequest:
    """Authorization request parameters for the PKCE flow."""

    authorization_endpoint: str
    client_id: str
    redirect_uri: str
    scope: str
    code_challenge: str
    code_challenge_method: str = "S256"
    response_type: str = "code"

    def build_authorization_url(self) -> str:
        """Build the complete authorization URL.

        Raises:
            InvalidURLComponentsError: If the endpoint is not an absolute URL
        """
        try:
            endpoint = urlsplit(self.authorization_endpoint)
        except ValueError as e:
            raise InvalidURLComponentsError() from e

        if not endpoint.scheme or not endpoint.netloc or endpoint.fragment:
            raise InvalidURLComponentsError()
        if any(c.isspace() for c in self.authorization_endpoint):
            raise InvalidURLComponentsError()

        params = {
            "client_id": self.client_id,
            "response_type": self.response_type,
            "redirect_uri": self.redirect_uri,
            "scope": self.scope,
            "code_challenge": self.code_challenge,
            "code_challenge_method": self.code_challenge_method,
        }

        try:
            query = urlencode(params, quote_via=quote, safe="")
        except (TypeError, ValueError) as e:
            raise InvalidURLComponentsError() from e

        separator = "&" if endpoint.query else "?"
        return f"{self.authorization_endpoint}{separator}{query}"


class OutcomeKind(Enum):
    CALLBACK = "callback"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(frozen=True)
class AuthorizationOutcome:
    """The single terminal result of one interactive browser session."""

    kind: OutcomeKind
    callback_url: str | None = None
    message: str | None = None

    @classmethod
    def callback(cls, callback_url: str) -> AuthorizationOutcome:
        return cls(OutcomeKind.CALLBACK, callback_url=callback_url)

    @classmethod
    def cancelled(cls, message: str = "The user canceled login") -> AuthorizationOutcome:
        return cls(OutcomeKind.CANCELLED, message=message)

    @classmethod
    def failed(cls, message: str) -> AuthorizationOutcome:
        return cls(OutcomeKind.FAILED, message=message)


@dataclass(frozen=True)
class AuthorizationResponse:
    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None
    error_uri: str | None = None

    def is_error(self) -> bool:
        return self.error is not None
