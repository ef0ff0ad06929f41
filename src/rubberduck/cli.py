from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import logging
import sys
from pathlib import Path

import httpx

from .ai import AIClient, ApiKeyManager, EmbeddingSuccess
from .config import FileSettingsSource
from .errors import RubberduckError
from .logger import Logger
from .openai import ApiCallError
from .tracing import init_telemetry, shutdown_telemetry


def _settings(args) -> FileSettingsSource:
    return FileSettingsSource(Path(args.config) if args.config else None)


def _build_client(args) -> AIClient:
    settings = _settings(args)
    return AIClient(
        api_key_manager=ApiKeyManager(),
        logger=Logger(level=settings.get_log_level()),
        openai_base_url=settings.get_openai_base_url(),
        settings=settings,
    )


def cmd_set_key(args):
    """Store the OpenAI API key (prompted when not given)."""
    key = args.key or getpass.getpass("OpenAI API key: ")
    asyncio.run(ApiKeyManager().store_openai_api_key(key))
    print("[rubberduck] OpenAI API key stored.")


def cmd_clear_key(args):
    """Remove the stored OpenAI API key."""
    asyncio.run(ApiKeyManager().clear_openai_api_key())
    print("[rubberduck] OpenAI API key cleared.")


async def _complete(client: AIClient, args) -> None:
    stream = await client.stream_text(
        args.prompt,
        max_tokens=args.max_tokens,
        stop=args.stop or None,
        temperature=args.temperature,
    )
    async with stream:
        async for chunk in stream:
            print(chunk, end="", flush=True)
    print()


def cmd_complete(args):
    """Stream a completion for PROMPT to stdout."""
    asyncio.run(_complete(_build_client(args), args))


def cmd_embed(args):
    """Print the embedding of TEXT as JSON."""
    result = asyncio.run(_build_client(args).generate_embedding(args.text))
    if not isinstance(result, EmbeddingSuccess):
        print(f"[rubberduck] Embedding failed: {result.error_message}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps({"embedding": result.embedding, "total_tokens": result.total_token_count}))


def main(argv=None):
    p = argparse.ArgumentParser(prog="rubberduck", description="rubberduck OpenAI client")
    p.add_argument("--config", help="Path to rubberduck.toml (default: search upward from cwd)")
    p.add_argument("-v", "--verbose", action="store_true", help="Show log output on stderr")
    p.add_argument(
        "--trace", action="store_true", help="Export OpenTelemetry spans even if [tracing] is disabled"
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    sk = sub.add_parser("set-key", help="Enter OpenAI API key")
    sk.add_argument("--key", help="API key (default: prompt)")
    sk.set_defaults(func=cmd_set_key)

    ck = sub.add_parser("clear-key", help="Clear OpenAI API key")
    ck.set_defaults(func=cmd_clear_key)

    sc = sub.add_parser("complete", help="Stream a completion for PROMPT")
    sc.add_argument("prompt")
    sc.add_argument("--max-tokens", type=int, default=1024, help="Maximum tokens (default: 1024)")
    sc.add_argument("--temperature", type=float, default=0.0, help="Sampling temperature")
    sc.add_argument("--stop", action="append", help="Stop sequence (repeatable)")
    sc.set_defaults(func=cmd_complete)

    se = sub.add_parser("embed", help="Embed TEXT and print the vector as JSON")
    se.add_argument("text")
    se.set_defaults(func=cmd_embed)

    args = p.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(message)s",
    )

    try:
        tracing_settings = _settings(args).get_tracing_settings()
        if args.trace:
            tracing_settings.enabled = True
        init_telemetry(tracing_settings)

        args.func(args)
    except (RubberduckError, ApiCallError, httpx.HTTPError, ValueError) as e:
        print(f"[rubberduck] {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        shutdown_telemetry()


if __name__ == "__main__":
    main()
