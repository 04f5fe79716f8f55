"""Provider configuration for the PKCE login flow.

AuthConfig is immutable once built. Defaults point at the Medplum identity
provider with a custom-scheme redirect for a native app.
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from pkceflow.secret_store import SecretStore

ENV_PREFIX = "PKCEFLOW_"


class AuthConfig(BaseModel):
    """Identity provider endpoints and client registration details."""

    model_config = ConfigDict(frozen=True)

    base_url: str = "https://api.medplum.com"
    authorize_path: str = "/oauth2/authorize"
    token_path: str = "/oauth2/token"
    response_type: str = "code"
    redirect_uri: str = "medplum-oauth://redirect"
    scope: str = "openid"
    code_challenge_method: str = "S256"

    # Empty when the secret store could not supply one
    client_id: str = ""

    # Seconds allowed for the token request
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("response_type")
    @classmethod
    def validate_response_type(cls, v: str) -> str:
        if v != "code":
            raise ValueError("Only the authorization code response type is supported")
        return v

    @field_validator("code_challenge_method")
    @classmethod
    def validate_challenge_method(cls, v: str) -> str:
        if v != "S256":
            raise ValueError("Only S256 code challenge method is supported")
        return v

    @property
    def authorization_endpoint(self) -> str:
        return f"{self.base_url}{self.authorize_path}"

    @property
    def token_endpoint(self) -> str:
        return f"{self.base_url}{self.token_path}"

    @property
    def redirect_scheme(self) -> str:
        """Scheme the browser session listens for, e.g. ``medplum-oauth``."""
        return urlparse(self.redirect_uri).scheme

    @classmethod
    def from_env(
        cls,
        secrets_path: str | Path | None = None,
        env_file: str | Path | None = None,
    ) -> AuthConfig:
        """Build a config from environment variables and the secret store.

        Reads ``PKCEFLOW_BASE_URL``, ``PKCEFLOW_REDIRECT_URI``, ``PKCEFLOW_SCOPE``
        and ``PKCEFLOW_TIMEOUT``. The client id comes from the secrets file,
        falling back to ``PKCEFLOW_CLIENT_ID``.

        Args:
            secrets_path: Settings file holding ``ClientID``
            env_file: Optional dotenv file loaded into the environment first
        """
        if env_file is not None:
            load_dotenv(env_file)

        overrides: dict[str, str] = {}
        for name in ("base_url", "redirect_uri", "scope", "timeout"):
            value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if value:
                overrides[name] = value

        client_id = ""
        if secrets_path is not None:
            client_id = SecretStore(secrets_path).load_client_id()
        if not client_id:
            client_id = os.getenv(f"{ENV_PREFIX}CLIENT_ID", "")

        return cls(client_id=client_id, **overrides)
