"""Exceptions for model provider calls."""


class LLMError(Exception):
    """Base exception for model provider operations."""


class MissingCredentialError(LLMError):
    """Raised when a client is built for a provider without an API key."""


class TransportError(LLMError):
    """Raised when a request to a model provider fails."""


class ModelTimeoutError(TransportError):
    """Raised when a model call does not finish within the configured timeout."""

    def __init__(self, provider: str, timeout: float) -> None:
        self.provider = provider
        self.timeout = timeout
        super().__init__(f"{provider} request timed out after {timeout:g} seconds")
