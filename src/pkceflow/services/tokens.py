"""Token exchange service.

Implements the RFC 6749 token endpoint call for the authorization code grant
with the PKCE code_verifier (RFC 7636).
"""

from __future__ import annotations

import logging

import httpx

from pkceflow.models.errors import (
    InvalidURLComponentsError,
    NetworkError,
    TokenExchangeError,
    UnknownAuthError,
)
from pkceflow.models.tokens import TokenRequest, TokenResponse

logger = logging.getLogger(__name__)


class OAuth2TokenManager:
    """Redeems authorization codes at the token endpoint.

    Uses application/x-www-form-urlencoded encoding as required by RFC 6749.
    Each code is sent exactly once; nothing is retried.
    """

    def __init__(self, timeout: float = 30.0):
        """Initialize the token manager.

        Args:
            timeout: HTTP request timeout in seconds
        """
        self.timeout = timeout
        self._http_client = httpx.AsyncClient(timeout=timeout)

    async def exchange_code_for_token(self, token_request: TokenRequest) -> str:
        """Exchange an authorization code for an access token.

        Args:
            token_request: Token exchange request parameters

        Returns:
            The access token

        Raises:
            NetworkError: If the request fails at the transport level
            TokenExchangeError: If the provider rejects the code
            UnknownAuthError: If the response cannot be interpreted
        """
        logger.debug(f"Exchanging authorization code at {token_request.token_endpoint}")

        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }
        form_data = token_request.to_form_data()

        # Log request details (without sensitive data)
        logger.debug(
            f"Token request: grant_type={form_data['grant_type']}, "
            f"client_id={form_data['client_id']}"
        )

        try:
            response = await self._http_client.post(
                token_request.token_endpoint,
                data=form_data,
                headers=headers,
            )
        except httpx.InvalidURL as e:
            raise InvalidURLComponentsError() from e
        except httpx.TimeoutException as e:
            raise NetworkError(f"The request timed out ({e})") from e
        except httpx.HTTPError as e:
            raise NetworkError(str(e) or type(e).__name__) from e

        token_response = self._parse_token_response(response)

        if token_response.is_success():
            logger.info("Token exchange successful")
            return token_response.access_token

        if token_response.is_error():
            logger.warning(
                f"Token exchange failed with {response.status_code}: "
                f"{token_response.error} - {token_response.error_description}"
            )
            raise TokenExchangeError(token_response.error_description)

        logger.warning(
            f"Token response with status {response.status_code} carried "
            "neither access_token nor error_description"
        )
        raise UnknownAuthError()

    def _parse_token_response(self, response: httpx.Response) -> TokenResponse:
        """Parse the token endpoint body into a TokenResponse.

        Raises:
            NetworkError: If a non-2xx response has no JSON body
            UnknownAuthError: If a 2xx body is not a JSON object
        """
        try:
            response_data = response.json()
        except ValueError as e:
            if not response.is_success:
                raise NetworkError(f"HTTP {response.status_code}") from e
            raise UnknownAuthError() from e

        if not isinstance(response_data, dict):
            if not response.is_success:
                raise NetworkError(f"HTTP {response.status_code}")
            raise UnknownAuthError()

        return TokenResponse.model_validate(response_data)

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self._http_client.aclose()
