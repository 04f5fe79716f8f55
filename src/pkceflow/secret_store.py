"""Local secret store supplying the OAuth client identifier.

Secrets live in a small key-value settings file next to the application.
Property-list files (``.plist``) are read with :mod:`plistlib`; anything
else is treated as a dotenv file and read with ``python-dotenv``.

A missing or malformed file is not fatal: lookups return an empty value and
the provider rejects the login later.
"""

from __future__ import annotations

import logging
import plistlib
from pathlib import Path
from typing import Any

from dotenv import dotenv_values

logger = logging.getLogger(__name__)

CLIENT_ID_KEY = "ClientID"


class SecretStore:
    """Read-only view over a secrets settings file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._values: dict[str, Any] | None = None

    def get(self, key: str) -> str | None:
        """Return the string stored under key, or None if absent or not a string."""
        value = self._load().get(key)
        if not isinstance(value, str):
            return None
        return value

    def load_client_id(self) -> str:
        """Load the OAuth client identifier.

        Returns:
            The configured client id, or an empty string if it cannot be read
        """
        client_id = self.get(CLIENT_ID_KEY)
        if client_id is None:
            logger.warning(f"Failed to load {CLIENT_ID_KEY} from {self.path}")
            return ""
        return client_id

    def _load(self) -> dict[str, Any]:
        if self._values is None:
            self._values = self._read_file()
        return self._values

    def _read_file(self) -> dict[str, Any]:
        if not self.path.is_file():
            logger.warning(f"Secrets file not found: {self.path}")
            return {}

        try:
            if self.path.suffix == ".plist":
                with self.path.open("rb") as f:
                    data = plistlib.load(f)
                if not isinstance(data, dict):
                    logger.warning(f"Secrets file is not a dictionary: {self.path}")
                    return {}
                return data
            return dict(dotenv_values(self.path))
        except (OSError, ValueError, plistlib.InvalidFileException) as e:
            logger.warning(f"Could not read secrets file {self.path}: {e}")
            return {}
