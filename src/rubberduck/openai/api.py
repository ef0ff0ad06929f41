"""OpenAI API configuration and HTTP error handling."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx


@dataclass(frozen=True)
class OpenAIApiConfiguration:
    """Connection settings for one OpenAI API call.

    Attributes:
        base_url: API base URL without trailing slash (e.g., "https://api.openai.com/v1")
        api_key: API key sent as a bearer token
    """

    base_url: str
    api_key: str = field(repr=False)

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def assemble_url(self, path: str) -> str:
        return f"{self.base_url}{path}"


class ApiCallError(Exception):
    """The OpenAI API answered with a non-success status."""

    def __init__(
        self,
        message: str,
        *,
        url: str,
        status_code: int,
        response_body: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.url = url
        self.status_code = status_code
        self.response_body = response_body

    @classmethod
    def from_response(cls, response: httpx.Response, body: str) -> ApiCallError:
        """Build the error from a failed response and its already-read body.

        OpenAI error documents look like {"error": {"message": "..."}}; other
        bodies fall back to the HTTP reason phrase.
        """
        message = f"HTTP {response.status_code} {response.reason_phrase}".strip()
        try:
            document: Any = json.loads(body)
        except json.JSONDecodeError:
            document = None
        if isinstance(document, dict) and isinstance(document.get("error"), dict):
            message = document["error"].get("message") or message

        return cls(
            message,
            url=str(response.request.url),
            status_code=response.status_code,
            response_body=body,
        )


def new_http_client(transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
    """Create a client for a single API call; no timeout is applied."""
    return httpx.AsyncClient(timeout=None, transport=transport)


async def post_json(
    api: OpenAIApiConfiguration,
    path: str,
    body: dict[str, Any],
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Any:
    """POST a JSON body and return the decoded JSON response.

    Raises:
        ApiCallError: If the API answers with a non-2xx status
        httpx.HTTPError: If the request cannot be sent
    """
    async with new_http_client(transport) as client:
        response = await client.post(api.assemble_url(path), json=body, headers=api.headers)
        if response.is_error:
            raise ApiCallError.from_response(response, response.text)
        return response.json()


__all__ = ["OpenAIApiConfiguration", "ApiCallError", "new_http_client", "post_json"]
