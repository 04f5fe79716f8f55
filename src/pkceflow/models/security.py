"""Security-related models for the PKCE login flow.

Contains the per-attempt PKCE session: the secret code verifier and the
challenge derived from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AuthSession:
    """PKCE parameters for exactly one login attempt (RFC 7636).

    A new instance is created at the start of every login and is never
    reused. The challenge always matches the verifier.
    """

    code_verifier: str = field(repr=False)
    code_challenge: str = field()
    code_challenge_method: str = field(default="S256")

    def __post_init__(self) -> None:
        """Validate PKCE parameters meet RFC 7636 requirements."""
        from pkceflow.primitives.pkce import derive_challenge

        if not (43 <= len(self.code_verifier) <= 128):
            raise ValueError("code_verifier must be 43-128 characters")
        if self.code_challenge_method != "S256":
            raise ValueError("Only S256 code challenge method is supported")
        if self.code_challenge != derive_challenge(self.code_verifier):
            raise ValueError("code_challenge does not match code_verifier")
