from unittest.mock import AsyncMock, MagicMock

import pytest

from fixloop.llm import Provider
from fixloop.models import Config


class RecordingDisplay:
    """Display stand-in that keeps everything appended to it."""

    def __init__(self):
        self.output: list[str] = []
        self.reasoning: list[str] = []
        self.destroyed = 0

    def append_output(self, text: str) -> None:
        self.output.append(text)

    def append_reasoning(self, text: str) -> None:
        self.reasoning.append(text)

    def destroy(self) -> None:
        self.destroyed += 1

    @property
    def output_text(self) -> str:
        return "".join(self.output)

    @property
    def reasoning_text(self) -> str:
        return "".join(self.reasoning)


def make_model_client(response: str = "", label: str = "Fake(model-1)") -> MagicMock:
    """Return a ModelClient stand-in whose complete() resolves to response."""
    client = MagicMock()
    client.label = label
    client.complete = AsyncMock(return_value=response)
    return client


@pytest.fixture
def display():
    return RecordingDisplay()


@pytest.fixture
def make_config(tmp_path):
    def _make(**overrides) -> Config:
        values = {
            "test_command": "pytest",
            "cwd": str(tmp_path),
            "api_keys": {Provider.DEEPSEEK: "ds-key", Provider.FIREWORKS: "fw-key"},
        }
        values.update(overrides)
        return Config(**values)

    return _make
