"""Fakes shared by the test suite: credentials, logger, network transport."""

from __future__ import annotations

import json
from typing import Any, Callable, Optional

import httpx

from rubberduck.logger import Logger


class FakeApiKeyManager:
    """Credential provider returning a fixed (or rotating) key."""

    def __init__(self, *keys: Optional[str]):
        self.keys = list(keys) or ["sk-test"]
        self.calls = 0

    async def get_openai_api_key(self) -> Optional[str]:
        key = self.keys[min(self.calls, len(self.keys) - 1)]
        self.calls += 1
        return key


class RecordingLogger(Logger):
    """Logger that keeps every entry and appends it to a shared event list."""

    def __init__(self, events: list):
        super().__init__(level="debug")
        self.events = events
        self.entries: list[list[str]] = []

    def log(self, lines, level: str = "info") -> None:
        lines = [lines] if isinstance(lines, str) else list(lines)
        self.entries.append(lines)
        self.events.append(("log", lines))


class RecordingTransport(httpx.MockTransport):
    """MockTransport that records each request before answering it."""

    def __init__(self, handler: Callable[[httpx.Request], Any], events: list):
        self.requests: list[httpx.Request] = []
        self.events = events

        def record(request: httpx.Request):
            self.requests.append(request)
            self.events.append(("request", str(request.url)))
            return handler(request)

        super().__init__(record)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def json_body(self, index: int = 0) -> dict:
        return json.loads(self.requests[index].content)


def sse_body(*chunks: str, done: bool = True) -> bytes:
    lines = [
        "data: " + json.dumps({"choices": [{"delta": {"content": chunk}}]}) + "\n\n"
        for chunk in chunks
    ]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


def openai_router(
    chat_chunks: tuple[str, ...] = ("Hello", " ", "World"),
    embedding: Optional[list[float]] = None,
    total_tokens: int = 7,
) -> Callable[[httpx.Request], httpx.Response]:
    """Handler answering /chat/completions with SSE and /embeddings with JSON."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/chat/completions"):
            return httpx.Response(
                200,
                content=sse_body(*chat_chunks),
                headers={"content-type": "text/event-stream"},
            )
        if request.url.path.endswith("/embeddings"):
            return httpx.Response(
                200,
                json={
                    "object": "list",
                    "data": [
                        {
                            "object": "embedding",
                            "embedding": embedding if embedding is not None else [0.1, 0.2, 0.3],
                            "index": 0,
                        }
                    ],
                    "model": "text-embedding-ada-002",
                    "usage": {"prompt_tokens": total_tokens, "total_tokens": total_tokens},
                },
            )
        return httpx.Response(404, json={"error": {"message": "Not found"}})

    return handler
