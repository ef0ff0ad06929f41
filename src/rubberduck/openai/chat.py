"""OpenAI chat model with streamed text output.

Prompts are given in instruction form and mapped to chat messages by a prompt
format before they are sent to /chat/completions.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Optional

import httpx

from .api import ApiCallError, OpenAIApiConfiguration, new_http_client


@dataclass
class InstructionPrompt:
    """A flat instruction with an optional system text."""

    instruction: str
    system: Optional[str] = None


ChatMessages = list[dict[str, str]]
PromptFormat = Callable[[InstructionPrompt], ChatMessages]


def map_instruction_prompt_to_chat_format() -> PromptFormat:
    """Prompt format turning an instruction into OpenAI chat messages."""

    def format_prompt(prompt: InstructionPrompt) -> ChatMessages:
        messages = []
        if prompt.system is not None:
            messages.append({"role": "system", "content": prompt.system})
        messages.append({"role": "user", "content": prompt.instruction})
        return messages

    return format_prompt


@dataclass
class OpenAIChatSettings:
    """Request settings for one chat completion call."""

    api: OpenAIApiConfiguration
    model: str
    max_completion_tokens: Optional[int] = None
    temperature: Optional[float] = None
    frequency_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    stop_sequences: Optional[list[str]] = None


class TextStream:
    """Incremental text deltas of one streamed chat completion.

    Owns the HTTP response and client; both are released when the stream is
    exhausted or closed. Usable with ``async for`` and ``async with``.
    Iteration raises ApiCallError when the API sends an error event mid-stream.
    """

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response):
        self._client = client
        self._response = response
        self._released = False
        self._chunks = self._iter_deltas()

    def __aiter__(self) -> TextStream:
        return self

    async def __anext__(self) -> str:
        return await self._chunks.__anext__()

    async def __aenter__(self) -> TextStream:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def read_text(self) -> str:
        """Consume the remaining stream and return the joined text."""
        return "".join([chunk async for chunk in self])

    async def aclose(self) -> None:
        await self._chunks.aclose()
        await self._release()

    async def _release(self) -> None:
        if self._released:
            return
        self._released = True
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()

    async def _iter_deltas(self) -> AsyncIterator[str]:
        try:
            async for line in self._response.aiter_lines():
                if not line.startswith("data:"):
                    continue

                data = line[len("data:") :].strip()
                if data == "[DONE]":
                    break

                try:
                    event = json.loads(data)
                except json.JSONDecodeError:
                    continue

                if not isinstance(event, dict):
                    continue

                error = event.get("error")
                if isinstance(error, dict):
                    raise ApiCallError(
                        error.get("message") or "Stream failed",
                        url=str(self._response.request.url),
                        status_code=self._response.status_code,
                        response_body=data,
                    )

                choices = event.get("choices")
                if not choices or not isinstance(choices[0], dict):
                    continue

                delta = choices[0].get("delta")
                content = delta.get("content") if isinstance(delta, dict) else None
                if content:
                    yield content
        finally:
            await self._release()


class OpenAIChatModel:
    """Streaming client for the /chat/completions endpoint.

    Args:
        settings: Connection and sampling settings
        prompt_format: Maps instruction prompts to chat messages
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        settings: OpenAIChatSettings,
        prompt_format: Optional[PromptFormat] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings
        self.prompt_format = prompt_format or map_instruction_prompt_to_chat_format()
        self.transport = transport

    def request_body(self, messages: ChatMessages) -> dict[str, Any]:
        s = self.settings
        body: dict[str, Any] = {
            "model": s.model,
            "messages": messages,
            "stream": True,
        }
        optional = {
            "max_tokens": s.max_completion_tokens,
            "temperature": s.temperature,
            "frequency_penalty": s.frequency_penalty,
            "presence_penalty": s.presence_penalty,
            "stop": s.stop_sequences,
        }
        body.update({k: v for k, v in optional.items() if v is not None})
        return body

    async def stream_text(self, prompt: InstructionPrompt) -> TextStream:
        """Open a streamed completion.

        Returns once the response head has arrived.

        Raises:
            ApiCallError: If the API answers with a non-2xx status
            httpx.HTTPError: If the request cannot be sent
        """
        api = self.settings.api
        body = self.request_body(self.prompt_format(prompt))

        client = new_http_client(self.transport)
        try:
            request = client.build_request(
                "POST", api.assemble_url("/chat/completions"), json=body, headers=api.headers
            )
            response = await client.send(request, stream=True)
        except BaseException:
            await client.aclose()
            raise

        if response.is_error:
            try:
                error_body = (await response.aread()).decode("utf-8", errors="replace")
            finally:
                await response.aclose()
                await client.aclose()
            raise ApiCallError.from_response(response, error_body)

        return TextStream(client, response)


__all__ = [
    "InstructionPrompt",
    "map_instruction_prompt_to_chat_format",
    "OpenAIChatSettings",
    "OpenAIChatModel",
    "TextStream",
]
