"""AI module - model client for editor commands.

- AIClient: Streamed completions and embeddings against OpenAI
- ApiKeyManager: Storage for the OpenAI API key
- EmbeddingSuccess/EmbeddingError: Outcome of an embedding call
"""

from .api_key import ApiKeyManager
from .client import AIClient
from .types import CompletionRequest, EmbeddingError, EmbeddingResult, EmbeddingSuccess

__all__ = [
    "AIClient",
    "ApiKeyManager",
    "CompletionRequest",
    "EmbeddingError",
    "EmbeddingResult",
    "EmbeddingSuccess",
]
