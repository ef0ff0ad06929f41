"""OpenAI text embedding model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

import httpx
from pydantic import BaseModel

from .api import OpenAIApiConfiguration, post_json


class OpenAIEmbeddingData(BaseModel):
    object: str = "embedding"
    embedding: list[float]
    index: int = 0


class OpenAIEmbeddingUsage(BaseModel):
    prompt_tokens: int = 0
    total_tokens: int


class OpenAITextEmbeddingResponse(BaseModel):
    """Schema of a /embeddings response body."""

    object: str = "list"
    data: list[OpenAIEmbeddingData]
    model: str
    usage: OpenAIEmbeddingUsage


@dataclass
class EmbeddingResponse:
    """Embedding vector plus the raw API responses it was built from."""

    output: list[float]
    responses: list[OpenAITextEmbeddingResponse] = field(default_factory=list)


@dataclass
class OpenAITextEmbeddingSettings:
    api: OpenAIApiConfiguration
    model: str = "text-embedding-ada-002"


class OpenAITextEmbeddingModel:
    """Client for the /embeddings endpoint."""

    def __init__(
        self,
        settings: OpenAITextEmbeddingSettings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.transport = transport

    async def embed(self, text: str) -> EmbeddingResponse:
        """Embed a single text.

        Raises:
            ApiCallError: If the API answers with a non-2xx status
            httpx.HTTPError: If the request cannot be sent
            pydantic.ValidationError: If the response body is malformed
        """
        raw = await post_json(
            self.settings.api,
            "/embeddings",
            {"model": self.settings.model, "input": text},
            transport=self.transport,
        )
        response = OpenAITextEmbeddingResponse.model_validate(raw)
        if not response.data:
            raise ValueError("Embedding response contains no data")

        return EmbeddingResponse(output=response.data[0].embedding, responses=[response])


__all__ = [
    "OpenAITextEmbeddingResponse",
    "EmbeddingResponse",
    "OpenAITextEmbeddingSettings",
    "OpenAITextEmbeddingModel",
]
