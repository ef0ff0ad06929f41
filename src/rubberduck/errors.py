"""Exception types raised by the rubberduck client."""

from __future__ import annotations


class RubberduckError(Exception):
    """Base class for all rubberduck errors."""


class MissingCredentialError(RubberduckError):
    """No OpenAI API key is available."""


class ConfigurationError(RubberduckError):
    """Settings are unreadable or hold an unsupported value."""


__all__ = ["RubberduckError", "MissingCredentialError", "ConfigurationError"]
