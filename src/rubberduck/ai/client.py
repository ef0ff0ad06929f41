"""AI client for the rubberduck editor assistant.

Mediates between editor commands and the OpenAI API: fetches the API key on
every call, builds a fresh API configuration, and exposes streamed text
completion and single-text embedding.

Error behaviour differs between the two operations. ``stream_text`` lets
provider errors propagate to the caller; ``generate_embedding`` never raises
and reports failures as an ``EmbeddingError`` value.
"""

from __future__ import annotations

from typing import Optional

import httpx
from opentelemetry import trace

from ..config import FileSettingsSource, SettingsSource
from ..errors import MissingCredentialError
from ..logger import Logger
from ..openai import (
    InstructionPrompt,
    OpenAIApiConfiguration,
    OpenAIChatModel,
    OpenAIChatSettings,
    OpenAITextEmbeddingModel,
    OpenAITextEmbeddingSettings,
    TextStream,
    map_instruction_prompt_to_chat_format,
)
from .types import (
    ApiKeyProvider,
    CompletionRequest,
    EmbeddingError,
    EmbeddingResult,
    EmbeddingSuccess,
)

tracer = trace.get_tracer(__name__)

EMBEDDING_MODEL = "text-embedding-ada-002"
PROMPT_START_MARKER = "--- Start OpenAI prompt ---"
PROMPT_END_MARKER = "--- End OpenAI prompt ---"
MISSING_API_KEY_MESSAGE = (
    "No OpenAI API key found. "
    "Please enter your OpenAI API key with the 'rubberduck set-key' command."
)


def _strip_trailing_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


class AIClient:
    """OpenAI client used by editor commands.

    Args:
        api_key_manager: Supplies the API key on each call
        logger: Receives prompt traces
        openai_base_url: Initial API base URL
        settings: Source of the chat model name (defaults to rubberduck.toml)
        transport: Optional httpx transport for all requests
    """

    def __init__(
        self,
        api_key_manager: ApiKeyProvider,
        logger: Logger,
        openai_base_url: str,
        settings: Optional[SettingsSource] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key_manager = api_key_manager
        self.logger = logger
        self.settings = settings or FileSettingsSource()
        self.transport = transport
        self._openai_base_url = _strip_trailing_slash(openai_base_url)

    @property
    def openai_base_url(self) -> str:
        return self._openai_base_url

    def set_openai_base_url(self, openai_base_url: str) -> None:
        self._openai_base_url = _strip_trailing_slash(openai_base_url)

    async def _get_openai_api_configuration(self) -> OpenAIApiConfiguration:
        # Captured before awaiting so a concurrent base URL change only
        # affects later calls.
        base_url = self._openai_base_url
        api_key = await self.api_key_manager.get_openai_api_key()

        if api_key is None:
            raise MissingCredentialError(MISSING_API_KEY_MESSAGE)

        return OpenAIApiConfiguration(base_url=base_url, api_key=api_key)

    async def stream_text(
        self,
        prompt: str,
        *,
        max_tokens: int,
        stop: Optional[list[str]] = None,
        temperature: float = 0,
    ) -> TextStream:
        """Open a streamed completion for an instruction prompt.

        Args:
            prompt: Instruction text
            max_tokens: Maximum tokens to generate
            stop: Optional stop sequences
            temperature: Sampling temperature

        Returns:
            Stream of text chunks; the caller consumes and closes it

        Raises:
            ValueError: If max_tokens is not positive
            MissingCredentialError: If no API key is configured
            ConfigurationError: If the configured model is not supported
            ApiCallError: If the API rejects the request
            httpx.HTTPError: If the request cannot be sent
        """
        request = CompletionRequest(
            prompt=prompt, max_tokens=max_tokens, stop=stop, temperature=temperature
        )

        self.logger.log([PROMPT_START_MARKER, request.prompt, PROMPT_END_MARKER])

        with tracer.start_as_current_span(
            "ai.stream_text",
            attributes={
                "llm.max_tokens": request.max_tokens,
                "llm.temperature": request.temperature,
                "llm.prompt.length": len(request.prompt),
            },
        ) as span:
            api = await self._get_openai_api_configuration()
            model_name = self.settings.get_openai_chat_model()
            span.set_attribute("llm.provider", api.base_url)
            span.set_attribute("llm.model", model_name.value)

            model = OpenAIChatModel(
                OpenAIChatSettings(
                    api=api,
                    model=model_name.value,
                    max_completion_tokens=request.max_tokens,
                    temperature=request.temperature,
                    frequency_penalty=0,
                    presence_penalty=0,
                    stop_sequences=request.stop,
                ),
                prompt_format=map_instruction_prompt_to_chat_format(),
                transport=self.transport,
            )
            stream = await model.stream_text(InstructionPrompt(instruction=request.prompt))

            span.set_status(trace.Status(trace.StatusCode.OK))
            return stream

    async def generate_embedding(self, input: str) -> EmbeddingResult:
        """Embed a single text.

        Never raises for failures; they are returned as EmbeddingError.
        """
        with tracer.start_as_current_span(
            "ai.generate_embedding",
            attributes={"llm.model": EMBEDDING_MODEL, "llm.input.length": len(input)},
        ) as span:
            try:
                model = OpenAITextEmbeddingModel(
                    OpenAITextEmbeddingSettings(
                        api=await self._get_openai_api_configuration(),
                        model=EMBEDDING_MODEL,
                    ),
                    transport=self.transport,
                )
                response = await model.embed(input)

                total_tokens = response.responses[0].usage.total_tokens
                span.set_attribute("llm.usage.total_tokens", total_tokens)
                span.set_status(trace.Status(trace.StatusCode.OK))

                return EmbeddingSuccess(
                    embedding=response.output,
                    total_token_count=total_tokens,
                )
            except Exception as e:
                self.logger.warning(f"Embedding failed: {e!r}")
                span.set_status(trace.Status(trace.StatusCode.ERROR, str(e)))
                span.record_exception(e)

                return EmbeddingError(error_message=str(e) or None)


__all__ = ["AIClient", "EMBEDDING_MODEL", "PROMPT_START_MARKER", "PROMPT_END_MARKER"]
