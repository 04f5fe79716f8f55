import base64
import hashlib
from unittest.mock import patch

import pytest

from pkceflow.models.errors import UnknownAuthError
from pkceflow.models.security import AuthSession
from pkceflow.primitives.pkce import PKCEManager, derive_challenge, generate_verifier


class TestGenerateVerifier:
    def test_verifier_decodes_to_32_bytes(self) -> None:
        # Act
        verifier = generate_verifier()

        # Assert
        padded = verifier + "=" * (-len(verifier) % 4)
        assert len(base64.urlsafe_b64decode(padded)) == 32
        assert len(verifier) == 43

    def test_verifier_uses_base64url_alphabet_without_padding(self) -> None:
        for _ in range(50):
            verifier = generate_verifier()
            assert "+" not in verifier
            assert "/" not in verifier
            assert "=" not in verifier

    def test_verifier_uses_the_os_csprng(self) -> None:
        # Arrange
        with patch(
            "pkceflow.primitives.pkce.secrets.token_bytes", return_value=b"\xff" * 32
        ) as token_bytes:
            # Act
            verifier = generate_verifier()

        # Assert
        token_bytes.assert_called_once_with(32)
        assert verifier == "_" * 42 + "8"


class TestDeriveChallenge:
    def test_golden_value(self) -> None:
        assert derive_challenge("abc123") == "bKE9UspwyIPg8LsQHkJaiehiTeUdstI5JZOvaoQRgJA"

    def test_rfc7636_appendix_b_example(self) -> None:
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert derive_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_deterministic(self) -> None:
        verifier = generate_verifier()
        assert derive_challenge(verifier) == derive_challenge(verifier)

    def test_distinct_verifiers_give_distinct_challenges(self) -> None:
        assert derive_challenge(generate_verifier()) != derive_challenge(
            generate_verifier()
        )

    def test_matches_sha256_base64url(self) -> None:
        verifier = generate_verifier()
        expected = (
            base64.urlsafe_b64encode(hashlib.sha256(verifier.encode("utf-8")).digest())
            .decode("ascii")
            .rstrip("=")
        )
        assert derive_challenge(verifier) == expected


class TestPKCEManager:
    def test_generate_session_crypto_requirements(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act
        session = pkce_manager.generate_session()

        # Assert
        assert session.code_challenge_method == "S256"
        assert session.code_challenge == derive_challenge(session.code_verifier)

    def test_generate_session_uniqueness(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act
        session1 = pkce_manager.generate_session()
        session2 = pkce_manager.generate_session()

        # Assert
        assert session1.code_verifier != session2.code_verifier
        assert session1.code_challenge != session2.code_challenge

    def test_random_source_failure_is_unknown_error(self) -> None:
        # Arrange
        pkce_manager = PKCEManager()

        # Act & Assert
        with patch(
            "pkceflow.primitives.pkce.secrets.token_bytes",
            side_effect=OSError("entropy unavailable"),
        ):
            with pytest.raises(UnknownAuthError) as exc_info:
                pkce_manager.generate_session()

        assert exc_info.value.message == "An unknown error occurred"


class TestAuthSession:
    def test_rejects_mismatched_challenge(self) -> None:
        with pytest.raises(ValueError, match="does not match"):
            AuthSession(
                code_verifier="dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk",
                code_challenge="not-the-right-challenge-value-at-all-000000",
            )

    def test_rejects_short_verifier(self) -> None:
        with pytest.raises(ValueError, match="43-128"):
            AuthSession(code_verifier="abc123", code_challenge=derive_challenge("abc123"))

    def test_verifier_hidden_from_repr(self) -> None:
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        session = AuthSession(
            code_verifier=verifier, code_challenge=derive_challenge(verifier)
        )
        assert verifier not in repr(session)
