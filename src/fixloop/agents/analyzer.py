"""Analysis stage: build the prompt from repository context and stream the diagnosis."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fixloop.agents.exceptions import AnalysisError
from fixloop.constants import DEFAULT_FIX_PROMPT, DEFAULT_PROMPT, FIX_FILE_FORMAT_INSTRUCTION
from fixloop.llm import LLMError, ModelClient
from fixloop.models import ChatMessage, Config, RepoContext
from fixloop.runner.test_files import find_test_files
from fixloop.ui.display import DisplaySink

logger = logging.getLogger(__name__)


class Analyzer:
    """Asks the analysis model to explain (and in fix mode, fix) failing tests."""

    def __init__(self, config: Config, client: ModelClient, display: DisplaySink) -> None:
        self.config = config
        self.client = client
        self.display = display

    def build_system_prompt(self) -> str:
        """Return the system prompt, extended with the fix format in fix mode."""
        prompt = DEFAULT_PROMPT
        if self.config.system_prompt:
            prompt_path = Path(self.config.cwd) / self.config.system_prompt
            if prompt_path.is_file():
                prompt = prompt_path.read_text(encoding="utf-8")
            else:
                logger.warning("System prompt file %s not found, using the default prompt", prompt_path)

        if not self.config.fix:
            return prompt
        return "\n".join([prompt, self.config.fix_prompt or DEFAULT_FIX_PROMPT, FIX_FILE_FORMAT_INSTRUCTION])

    def build_messages(self, context: RepoContext, test_files: dict[str, str]) -> list[ChatMessage]:
        """Build the system and user messages for one analysis call.

        Args:
            context: Output of the gathered commands.
            test_files: Mapping of relative path to file content.
        """
        sections = [
            f"## Repository Structure\n{context.repo_structure}",
            f"## Output of running {self.config.test_command}\n{context.test_output}",
        ]
        if context.git_diff:
            sections.append(f"## Git Diff\n{context.git_diff}")
        if test_files:
            files = "\n\n".join(f"// {path}\n{content}" for path, content in test_files.items())
            sections.append(f"## Test Files\n{files}")

        return [
            ChatMessage(role="system", content=self.build_system_prompt()),
            ChatMessage(role="user", content="\n\n".join(sections)),
        ]

    async def read_test_files(self, context: RepoContext) -> dict[str, str]:
        """Find the test files named in the test output and read them."""
        paths = find_test_files(context.test_output, self.config.test_file_pattern, self.config.cwd)
        root = Path(self.config.cwd)
        contents: dict[str, str] = {}
        for path in paths:
            try:
                contents[path] = await asyncio.to_thread(
                    (root / path).read_text, encoding="utf-8", errors="replace"
                )
            except OSError as exc:
                logger.debug("Could not read test file %s: %s", path, exc)
        return contents

    async def analyze(self, context: RepoContext) -> str:
        """Stream an analysis of the gathered context and return the response.

        Raises:
            AnalysisError: If the model call fails or times out.
        """
        test_files = await self.read_test_files(context)
        if not test_files:
            self.display.append_output(
                "\nWarning: No test files found in the test output. "
                "Analysis may be less accurate.\n"
                "Use --test-file-pattern to adjust which files are detected.\n"
            )

        messages = self.build_messages(context, test_files)
        self.display.append_reasoning(f"Analyzing test failures using {self.client.label}...\n\n")

        try:
            analysis = await self.client.complete(messages, stream=True, show_reasoning=True)
        except LLMError as exc:
            raise AnalysisError(f"Analysis failed: {exc}") from exc

        logger.debug("Analysis response length: %d", len(analysis))
        return analysis
