"""OpenAI adapter - direct HTTP calls to the OpenAI API.

- OpenAIApiConfiguration: base URL and key for one call
- OpenAIChatModel: streamed chat completions from instruction prompts
- OpenAITextEmbeddingModel: single-text embeddings
- ApiCallError: non-success answers from the API
"""

from .api import ApiCallError, OpenAIApiConfiguration
from .chat import (
    InstructionPrompt,
    OpenAIChatModel,
    OpenAIChatSettings,
    TextStream,
    map_instruction_prompt_to_chat_format,
)
from .embedding import (
    EmbeddingResponse,
    OpenAITextEmbeddingModel,
    OpenAITextEmbeddingSettings,
)

__all__ = [
    "ApiCallError",
    "OpenAIApiConfiguration",
    "InstructionPrompt",
    "OpenAIChatModel",
    "OpenAIChatSettings",
    "TextStream",
    "map_instruction_prompt_to_chat_format",
    "EmbeddingResponse",
    "OpenAITextEmbeddingModel",
    "OpenAITextEmbeddingSettings",
]
