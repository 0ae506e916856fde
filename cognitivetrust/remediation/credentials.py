"""
Credential providers for the generation API key.

The AI handler only asks a provider to get, store or delete the key;
how the key is persisted is up to the provider. Keys are never logged.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

SECRET_STORAGE_KEY = "geminiApiKey"
SECRETS_FILE_NAME = "secrets.json"


class CredentialProvider(ABC):
    """Access to a single named secret."""

    def __init__(self, key: str = SECRET_STORAGE_KEY):
        self.key = key

    @abstractmethod
    async def get(self) -> Optional[str]:
        """Return the stored secret, or None if there is none."""
        pass

    @abstractmethod
    async def store(self, value: str) -> None:
        pass

    @abstractmethod
    async def delete(self) -> None:
        pass


class MemoryCredentialStore(CredentialProvider):
    """Keeps the secret for the lifetime of the process."""

    def __init__(self, value: Optional[str] = None, key: str = SECRET_STORAGE_KEY):
        super().__init__(key)
        self._value = value

    async def get(self) -> Optional[str]:
        return self._value

    async def store(self, value: str) -> None:
        self._value = value

    async def delete(self) -> None:
        self._value = None


class FileCredentialStore(CredentialProvider):
    """
    Stores secrets in a JSON file readable only by the owner.

    The file lives in the workspace state directory next to the
    history and metrics.
    """

    def __init__(self, path: str, key: str = SECRET_STORAGE_KEY):
        super().__init__(key)
        self.path = path

    @classmethod
    def for_directory(cls, state_dir: str, key: str = SECRET_STORAGE_KEY) -> "FileCredentialStore":
        return cls(os.path.join(state_dir, SECRETS_FILE_NAME), key)

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning("Secret store %s is unreadable: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        Path(self.path).parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f)

    async def get(self) -> Optional[str]:
        return self._read().get(self.key) or None

    async def store(self, value: str) -> None:
        data = self._read()
        data[self.key] = value
        self._write(data)

    async def delete(self) -> None:
        data = self._read()
        if data.pop(self.key, None) is not None:
            self._write(data)
