"""Closed set of model provider profiles."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Provider(str, Enum):
    """Known model providers."""

    DEEPSEEK = "deepseek"
    FIREWORKS = "fireworks"


class ProviderProfile(BaseModel):
    """Endpoint, model and sampling settings for one provider."""

    model_config = ConfigDict(frozen=True)

    name: str
    endpoint: str
    model: str
    api_key_env: str
    max_tokens: int
    temperature: float


PROVIDER_PROFILES: dict[Provider, ProviderProfile] = {
    Provider.DEEPSEEK: ProviderProfile(
        name="DeepSeek",
        endpoint="https://api.deepseek.com",
        model="deepseek-reasoner",
        api_key_env="DEEPSEEK_API_KEY",
        max_tokens=4096,
        temperature=0.01,
    ),
    Provider.FIREWORKS: ProviderProfile(
        name="Fireworks",
        endpoint="https://api.fireworks.ai/inference/v1",
        model="fast-apply-7b-v1.0",
        api_key_env="FIREWORKS_AI_API_KEY",
        max_tokens=4096,
        temperature=0.01,
    ),
}

# Diagnoses test failures
ANALYSIS_PROVIDER = Provider.DEEPSEEK
# Merges a described patch into the real file
APPLY_PROVIDER = Provider.FIREWORKS


def get_profile(provider: Provider) -> ProviderProfile:
    return PROVIDER_PROFILES[provider]
