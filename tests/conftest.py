"""Test fixtures and configuration for rubberduck tests.

Test Structure:
    tests/
    ├── conftest.py          # Shared fixtures
    ├── fakes.py             # Credential, logger and transport fakes
    ├── test_config.py       # Settings file parsing
    ├── test_logger.py
    ├── test_cli.py
    └── unit/                # Client and adapter tests (network mocked with httpx.MockTransport)
        ├── test_ai_client.py
        ├── test_api_key.py
        └── test_openai_chat.py

Running tests:
    pytest -v
"""

import sys
from pathlib import Path

import pytest

# Add tests directory to path for imports
tests_dir = Path(__file__).parent
if str(tests_dir) not in sys.path:
    sys.path.insert(0, str(tests_dir))

from fakes import RecordingLogger, RecordingTransport, openai_router  # noqa: E402


@pytest.fixture
def events() -> list:
    """Ordered log of logger and network events."""
    return []


@pytest.fixture
def logger(events) -> RecordingLogger:
    return RecordingLogger(events)


@pytest.fixture
def transport(events) -> RecordingTransport:
    return RecordingTransport(openai_router(), events)
