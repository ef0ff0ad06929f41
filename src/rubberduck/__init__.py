"""rubberduck - OpenAI client for an editor coding assistant.

Quick start:

    from rubberduck import AIClient, ApiKeyManager, Logger

    client = AIClient(
        api_key_manager=ApiKeyManager(),
        logger=Logger(),
        openai_base_url="https://api.openai.com/v1/",
    )

    async with await client.stream_text("Explain this code", max_tokens=512) as stream:
        async for chunk in stream:
            print(chunk, end="")
"""

__version__ = "0.1.0"

from .ai import (  # noqa: E402
    AIClient,
    ApiKeyManager,
    CompletionRequest,
    EmbeddingError,
    EmbeddingResult,
    EmbeddingSuccess,
)
from .config import (  # noqa: E402
    FileSettingsSource,
    OpenAIChatModelName,
    SettingsSource,
    StaticSettingsSource,
)
from .errors import ConfigurationError, MissingCredentialError, RubberduckError  # noqa: E402
from .logger import Logger  # noqa: E402
from .openai import ApiCallError, TextStream  # noqa: E402

__all__ = [
    "__version__",
    "AIClient",
    "ApiKeyManager",
    "CompletionRequest",
    "EmbeddingError",
    "EmbeddingResult",
    "EmbeddingSuccess",
    "FileSettingsSource",
    "OpenAIChatModelName",
    "SettingsSource",
    "StaticSettingsSource",
    "ConfigurationError",
    "MissingCredentialError",
    "RubberduckError",
    "Logger",
    "ApiCallError",
    "TextStream",
]
