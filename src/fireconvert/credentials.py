"""Local storage for the scraping API key."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from .exceptions import CredentialError

logger = logging.getLogger(__name__)

API_KEY_NAME = "firecrawl_api_key"
API_KEY_ENV_VAR = "FIRECRAWL_API_KEY"


def default_credentials_path() -> Path:
    """``$XDG_CONFIG_HOME/fireconvert/credentials.json`` (``~/.config`` if unset)."""
    config_home = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(config_home) / "fireconvert" / "credentials.json"


class CredentialStore:
    """Persist the API key as an opaque string under a fixed name.

    The file is a JSON object; entries other than ``key_name`` are kept on save.

    Example:
        store = CredentialStore()
        store.save("fc-123")
        api_key = store.load()
    """

    def __init__(self, path: Optional[Path] = None, key_name: str = API_KEY_NAME):
        """Initialize the store.

        Args:
            path: Credentials file (defaults to the user config directory)
            key_name: Name the key is stored under
        """
        self.path = Path(path) if path else default_credentials_path()
        self.key_name = key_name

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CredentialError(f"Could not read credentials from {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise CredentialError(f"Credentials file {self.path} is not a JSON object")
        return data

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            self.path.chmod(0o600)
        except OSError as e:
            raise CredentialError(f"Could not write credentials to {self.path}: {e}") from e

    def load(self) -> Optional[str]:
        """Return the stored key, or None if nothing is stored."""
        value = self._read().get(self.key_name)
        return value or None

    def save(self, value: str) -> None:
        """Store ``value``, replacing any previous key."""
        data = self._read()
        data[self.key_name] = value
        self._write(data)
        logger.debug(f"Saved {self.key_name} to {self.path}")

    def clear(self) -> bool:
        """Forget the stored key. Returns True if one was stored."""
        data = self._read()
        if self.key_name not in data:
            return False
        del data[self.key_name]
        self._write(data)
        logger.debug(f"Removed {self.key_name} from {self.path}")
        return True

    def resolve(self, explicit: Optional[str] = None) -> Optional[str]:
        """Pick the key to use: explicit value, then environment, then the store."""
        return explicit or os.environ.get(API_KEY_ENV_VAR) or self.load()


def mask_key(value: str) -> str:
    """Show only the last four characters of a key."""
    if len(value) <= 4:
        return "*" * len(value)
    return "*" * (len(value) - 4) + value[-4:]
