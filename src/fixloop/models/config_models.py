"""Runtime configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from fixloop.constants import (
    DEFAULT_SERIALIZE_COMMAND,
    DEFAULT_SOURCE_FILE_PATTERN,
    DEFAULT_TEST_FILE_PATTERN,
    DEFAULT_TIMEOUT_SECONDS,
)
from fixloop.llm.providers import Provider


class Config(BaseModel):
    """Settings for one run, built once from CLI flags and the environment."""

    model_config = ConfigDict(frozen=True)

    test_command: str
    cwd: str  # Absolute path of the working tree root
    debug: bool = False
    serialize: str = DEFAULT_SERIALIZE_COMMAND
    system_prompt: str | None = None  # Path to a system prompt file
    fix_prompt: str | None = None
    hide_ui: bool = False
    test_file_pattern: list[str] = Field(default_factory=lambda: list(DEFAULT_TEST_FILE_PATTERN))
    source_file_pattern: list[str] = Field(default_factory=lambda: list(DEFAULT_SOURCE_FILE_PATTERN))
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)  # Seconds per model call
    fix: bool = False
    auto_apply: bool = False
    cache: bool = False
    api_keys: dict[Provider, str] = Field(default_factory=dict, repr=False)

    def api_key_for(self, provider: Provider) -> str | None:
        return self.api_keys.get(provider)
