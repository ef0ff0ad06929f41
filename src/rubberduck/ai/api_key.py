"""OpenAI API key storage.

The key is looked up in the OPENAI_API_KEY environment variable first, then in
a key file in the user config directory. The file is written with owner-only
permissions.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional

from platformdirs import user_config_dir

APP_NAME = "rubberduck"
API_KEY_ENV_VAR = "OPENAI_API_KEY"
API_KEY_FILENAME = "api_key"


def default_key_path() -> Path:
    return Path(user_config_dir(APP_NAME)) / API_KEY_FILENAME


class ApiKeyManager:
    """Reads, stores and clears the OpenAI API key.

    Args:
        key_path: Key file location (default: user config dir)
        env_var: Environment variable checked before the file; None disables it
    """

    def __init__(self, key_path: Optional[Path] = None, env_var: Optional[str] = API_KEY_ENV_VAR):
        self.key_path = key_path or default_key_path()
        self.env_var = env_var

    async def get_openai_api_key(self) -> Optional[str]:
        """Return the API key, or None when none is configured."""
        if self.env_var:
            key = os.environ.get(self.env_var, "").strip()
            if key:
                return key
        return await asyncio.to_thread(self._read_key_file)

    async def has_openai_api_key(self) -> bool:
        return await self.get_openai_api_key() is not None

    async def store_openai_api_key(self, api_key: str) -> None:
        api_key = api_key.strip()
        if not api_key:
            raise ValueError("API key must not be empty")
        await asyncio.to_thread(self._write_key_file, api_key)
        logging.info("[rubberduck] Stored OpenAI API key in %s", self.key_path)

    async def clear_openai_api_key(self) -> None:
        await asyncio.to_thread(self.key_path.unlink, missing_ok=True)
        logging.info("[rubberduck] Cleared OpenAI API key")

    def _read_key_file(self) -> Optional[str]:
        if not self.key_path.exists():
            return None
        key = self.key_path.read_text(encoding="utf-8").strip()
        return key or None

    def _write_key_file(self, api_key: str) -> None:
        self.key_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.key_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(api_key)
        os.chmod(self.key_path, 0o600)


__all__ = ["ApiKeyManager", "default_key_path", "API_KEY_ENV_VAR"]
