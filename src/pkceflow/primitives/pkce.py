"""PKCE (Proof Key for Code Exchange) primitives.

Implements RFC 7636 verifier generation and S256 challenge derivation to
bind an authorization code to the client that requested it.
"""

from __future__ import annotations

import base64
import hashlib
import secrets

from pkceflow.models.errors import UnknownAuthError
from pkceflow.models.security import AuthSession

VERIFIER_BYTES = 32


def _base64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def generate_verifier() -> str:
    """Generate a cryptographically secure code verifier.

    Draws 32 bytes from the OS CSPRNG and encodes them as base64url without
    padding, giving a 43-character string of unreserved characters.
    """
    return _base64url(secrets.token_bytes(VERIFIER_BYTES))


def derive_challenge(verifier: str) -> str:
    """Derive the S256 code challenge for a verifier.

    RFC 7636 Section 4.2: BASE64URL-ENCODE(SHA256(code_verifier))

    Args:
        verifier: The code verifier to hash

    Returns:
        Base64url-encoded SHA256 hash of the verifier, without padding
    """
    return _base64url(hashlib.sha256(verifier.encode("utf-8")).digest())


class PKCEManager:
    """Creates fresh PKCE sessions for login attempts."""

    def generate_session(self) -> AuthSession:
        """Generate a new verifier/challenge pair.

        Returns:
            AuthSession: Immutable parameters for one authorization attempt

        Raises:
            UnknownAuthError: If the random source or hashing fails
        """
        try:
            code_verifier = generate_verifier()
            return AuthSession(
                code_verifier=code_verifier,
                code_challenge=derive_challenge(code_verifier),
                code_challenge_method="S256",
            )
        except Exception as e:
            raise UnknownAuthError() from e
