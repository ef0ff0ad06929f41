"""AI types - Data structures for model client calls.

- CompletionRequest: Parameters of a streamed completion
- EmbeddingSuccess/EmbeddingError: Tagged outcome of an embedding call
- ApiKeyProvider: What the client needs from a credential store
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Protocol, Union


@dataclass
class CompletionRequest:
    """A streamed completion request.

    Attributes:
        prompt: Instruction text sent as-is
        max_tokens: Maximum tokens to generate (must be positive)
        stop: Sequences that end generation early
        temperature: Sampling temperature
    """

    prompt: str
    max_tokens: int
    stop: Optional[list[str]] = None
    temperature: float = 0

    def __post_init__(self) -> None:
        if self.max_tokens <= 0:
            raise ValueError(f"max_tokens must be positive, got {self.max_tokens}")


@dataclass
class EmbeddingSuccess:
    embedding: list[float]
    total_token_count: int
    type: Literal["success"] = "success"


@dataclass
class EmbeddingError:
    error_message: Optional[str] = None
    type: Literal["error"] = "error"


EmbeddingResult = Union[EmbeddingSuccess, EmbeddingError]


class ApiKeyProvider(Protocol):
    async def get_openai_api_key(self) -> Optional[str]: ...


__all__ = [
    "CompletionRequest",
    "EmbeddingSuccess",
    "EmbeddingError",
    "EmbeddingResult",
    "ApiKeyProvider",
]
