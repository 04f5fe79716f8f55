"""Token exchange request and response models.

Contains the form-encoded token request and the JSON token response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict


@dataclass(frozen=True)
class TokenRequest:
    """Authorization code token request (RFC 6749 Section 4.1.3).

    Includes the PKCE code_verifier (RFC 7636) of the session that produced
    the code.
    """

    token_endpoint: str
    code: str = field(repr=False)
    redirect_uri: str
    client_id: str
    code_verifier: str = field(repr=False)
    grant_type: str = "authorization_code"

    def to_form_data(self) -> dict[str, str]:
        """Convert to form data for application/x-www-form-urlencoded request.

        Returns:
            Dictionary suitable for httpx data parameter
        """
        return {
            "grant_type": self.grant_type,
            "client_id": self.client_id,
            "code": self.code,
            "redirect_uri": self.redirect_uri,
            "code_verifier": self.code_verifier,
        }


class TokenResponse(BaseModel):
    """Token endpoint response (RFC 6749 Section 5).

    Success and error responses share this model; unknown provider fields
    are kept. Fields are untyped so an odd value in one field never
    invalidates the rest; only access_token and error_description decide
    the outcome, and only when they are strings.
    """

    model_config = ConfigDict(extra="allow")

    # Success response fields (RFC 6749 Section 5.1)
    access_token: Any = None
    token_type: Any = None
    expires_in: Any = None
    refresh_token: Any = None
    scope: Any = None

    # Error response fields (RFC 6749 Section 5.2)
    error: Any = None
    error_description: Any = None
    error_uri: Any = None

    def is_success(self) -> bool:
        return isinstance(self.access_token, str)

    def is_error(self) -> bool:
        return not self.is_success() and isinstance(self.error_description, str)
