"""Model provider profiles and the chat completion client."""

from fixloop.llm.client import ModelClient
from fixloop.llm.exceptions import (
    LLMError,
    MissingCredentialError,
    ModelTimeoutError,
    TransportError,
)
from fixloop.llm.providers import (
    ANALYSIS_PROVIDER,
    APPLY_PROVIDER,
    PROVIDER_PROFILES,
    Provider,
    ProviderProfile,
    get_profile,
)

__all__ = [
    "ANALYSIS_PROVIDER",
    "APPLY_PROVIDER",
    "LLMError",
    "MissingCredentialError",
    "ModelClient",
    "ModelTimeoutError",
    "PROVIDER_PROFILES",
    "Provider",
    "ProviderProfile",
    "TransportError",
    "get_profile",
]
