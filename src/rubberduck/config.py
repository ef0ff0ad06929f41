"""Settings for the rubberduck client.

Reads rubberduck.toml with support for:
- OpenAI connection settings
- Chat model selection
- Log level
- OpenTelemetry export

Example rubberduck.toml:

    model = "gpt-4"

    [openai]
    base_url = "${OPENAI_BASE_URL}"

    [logging]
    level = "debug"

    [tracing]
    enabled = true
    otlp_endpoint = "http://collector:4317"

The file is re-read on every access, so edits take effect on the next request.
"""

from __future__ import annotations

import os
import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Protocol

from .errors import ConfigurationError

if sys.version_info >= (3, 11):
    import tomllib as toml
else:
    import tomli as toml

SETTINGS_FILENAME = "rubberduck.toml"
DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1/"
DEFAULT_CHAT_MODEL = "gpt-3.5-turbo"
DEFAULT_OTLP_ENDPOINT = "http://localhost:4317"


class OpenAIChatModelName(str, Enum):
    """Chat models the client may be configured with."""

    GPT_4 = "gpt-4"
    GPT_4_32K = "gpt-4-32k"
    GPT_3_5_TURBO = "gpt-3.5-turbo"
    GPT_3_5_TURBO_16K = "gpt-3.5-turbo-16k"


def parse_chat_model(value: Any) -> OpenAIChatModelName:
    """Validate a configured model name against the supported set."""
    try:
        return OpenAIChatModelName(value)
    except ValueError as e:
        choices = [m.value for m in OpenAIChatModelName]
        raise ConfigurationError(
            f"Unsupported model: {value!r}. Choose from: {choices}"
        ) from e


def _load_env_file(env_path: Path) -> None:
    """Load environment variables from .env file."""
    if not env_path.exists():
        return

    with open(env_path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" in line:
                key, _, value = line.partition("=")
                key = key.strip()
                value = value.strip()

                if value and value[0] in ('"', "'") and value[-1] == value[0]:
                    value = value[1:-1]

                # Real environment wins over .env
                if key and key not in os.environ:
                    os.environ[key] = value


def _expand_env_vars(value: Any) -> Any:
    """Recursively expand ${VAR} and $VAR environment variable references."""
    if isinstance(value, str):

        def replace_var(match):
            var_name = match.group(1) or match.group(2)
            return os.environ.get(var_name, match.group(0))

        pattern = r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}|\$([A-Za-z_][A-Za-z0-9_]*)"
        return re.sub(pattern, replace_var, value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    else:
        return value


@dataclass
class TracingSettings:
    """OpenTelemetry export settings ([tracing] table)."""

    enabled: bool = False
    service_name: str = "rubberduck"
    otlp_endpoint: str = DEFAULT_OTLP_ENDPOINT


@dataclass
class RubberduckSettings:
    """Raw settings as read from rubberduck.toml.

    ``model`` stays a plain string here; it is validated when read through a
    settings source.
    """

    openai_base_url: str = DEFAULT_OPENAI_BASE_URL
    model: str = DEFAULT_CHAT_MODEL
    log_level: str = "info"
    tracing: TracingSettings = field(default_factory=TracingSettings)

    @classmethod
    def load(cls, path: Path) -> RubberduckSettings:
        """Load settings from a rubberduck.toml file.

        Loads the first .env found next to the file or in the working
        directory, then expands ${VAR} references in the parsed values.
        """
        if not path.exists():
            return cls()

        for env_path in (path.parent / ".env", Path.cwd() / ".env"):
            if env_path.exists():
                _load_env_file(env_path)
                break

        try:
            data = _expand_env_vars(toml.loads(path.read_text(encoding="utf-8")))
        except (OSError, toml.TOMLDecodeError) as e:
            raise ConfigurationError(f"Failed to parse {path}: {e}") from e

        openai_data = data.get("openai", {})
        logging_data = data.get("logging", {})
        tracing_data = data.get("tracing", {})
        if not all(isinstance(t, dict) for t in (openai_data, logging_data, tracing_data)):
            raise ConfigurationError(
                f"Failed to parse {path}: [openai], [logging] and [tracing] must be tables"
            )

        return cls(
            openai_base_url=openai_data.get("base_url", DEFAULT_OPENAI_BASE_URL),
            model=data.get("model", DEFAULT_CHAT_MODEL),
            log_level=logging_data.get("level", "info"),
            tracing=TracingSettings(
                enabled=bool(tracing_data.get("enabled", False)),
                service_name=tracing_data.get("service_name", "rubberduck"),
                otlp_endpoint=tracing_data.get("otlp_endpoint", DEFAULT_OTLP_ENDPOINT),
            ),
        )


def find_settings_file(start_dir: Path = Path(".")) -> Optional[Path]:
    """Search up from start_dir for rubberduck.toml."""
    current = start_dir.resolve()
    while True:
        candidate = current / SETTINGS_FILENAME
        if candidate.exists():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


class SettingsSource(Protocol):
    """Read-only access to the settings the client depends on."""

    def get_openai_base_url(self) -> str: ...

    def get_openai_chat_model(self) -> OpenAIChatModelName: ...


class FileSettingsSource:
    """SettingsSource backed by rubberduck.toml.

    Args:
        path: Explicit settings file. When omitted, the file is searched for
            upward from the working directory on every read.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path

    def read(self) -> RubberduckSettings:
        path = self.path or find_settings_file()
        if path is None:
            return RubberduckSettings()
        return RubberduckSettings.load(path)

    def get_openai_base_url(self) -> str:
        return self.read().openai_base_url

    def get_openai_chat_model(self) -> OpenAIChatModelName:
        return parse_chat_model(self.read().model)

    def get_log_level(self) -> str:
        return self.read().log_level

    def get_tracing_settings(self) -> TracingSettings:
        return self.read().tracing


class StaticSettingsSource:
    """SettingsSource holding fixed values, for embedding and tests."""

    def __init__(self, model: Any = DEFAULT_CHAT_MODEL, openai_base_url: str = DEFAULT_OPENAI_BASE_URL):
        self.model = model
        self.openai_base_url = openai_base_url

    def get_openai_base_url(self) -> str:
        return self.openai_base_url

    def get_openai_chat_model(self) -> OpenAIChatModelName:
        return parse_chat_model(self.model)


__all__ = [
    "DEFAULT_OPENAI_BASE_URL",
    "DEFAULT_CHAT_MODEL",
    "OpenAIChatModelName",
    "parse_chat_model",
    "TracingSettings",
    "RubberduckSettings",
    "find_settings_file",
    "SettingsSource",
    "FileSettingsSource",
    "StaticSettingsSource",
]
