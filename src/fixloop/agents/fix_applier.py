"""Applies one fix record to disk through a model merge round-trip."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from fixloop.agents.exceptions import FixApplicationError, PathTraversalError
from fixloop.agents.fix_parser import extract_fixed_code
from fixloop.constants import (
    APPLY_CHANGES_INSTRUCTION,
    APPLY_SYSTEM_PROMPT,
    FILE_PATH_TAG,
    ORIGINAL_FILE_END_TAG,
    ORIGINAL_FILE_START_TAG,
)
from fixloop.llm import LLMError, ModelClient
from fixloop.models import ChatMessage, FixOutcome, FixRecord, FixResult
from fixloop.ui.confirm import ConfirmationGate
from fixloop.ui.display import DisplaySink

logger = logging.getLogger(__name__)


def ensure_trailing_newline(content: str) -> str:
    return content if content.endswith("\n") else content + "\n"


def build_fix_messages(record: FixRecord, original_content: str) -> list[ChatMessage]:
    """Build the merge request for the apply model.

    The current file is embedded verbatim between the original-file tags,
    followed by the patch description taken from the analysis.
    """
    user_content = "\n\n".join([
        f"{FILE_PATH_TAG}{record.file_path}",
        ORIGINAL_FILE_START_TAG,
        original_content,
        ORIGINAL_FILE_END_TAG,
        record.patch_body,
        APPLY_CHANGES_INSTRUCTION,
    ])
    return [
        ChatMessage(role="system", content=APPLY_SYSTEM_PROMPT),
        ChatMessage(role="user", content=user_content),
    ]


def _create_empty_file(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch()


class FixApplier:
    """Turns a complete FixRecord into at most one whole-file write."""

    def __init__(
        self,
        client: ModelClient,
        display: DisplaySink,
        root: str | Path,
        auto_apply: bool = False,
        gate: ConfirmationGate | None = None,
    ) -> None:
        """Initialize the applier.

        Args:
            client: Model client for the apply profile.
            display: Sink for the running log of per-file actions.
            root: Working tree root; fixes may only touch files below it.
            auto_apply: Write without asking for confirmation.
            gate: Confirmation gate shared by all appliers of a run.
        """
        self.client = client
        self.display = display
        self.root = Path(root).resolve()
        self.auto_apply = auto_apply
        self.gate = gate if gate is not None else ConfirmationGate()

    def resolve_path(self, file_path: str) -> Path:
        """Resolve a record path against the root, refusing anything outside it.

        Raises:
            PathTraversalError: If the path escapes the working tree.
        """
        target = (self.root / file_path).resolve()
        if target == self.root or not target.is_relative_to(self.root):
            raise PathTraversalError(
                f"Path traversal attempt detected: '{file_path}' "
                f"resolves outside of the working tree."
            )
        return target

    async def apply(self, record: FixRecord) -> FixResult:
        """Apply one record; failures are reported in the result, never raised."""
        try:
            return await self._apply(record)
        except (OSError, LLMError, FixApplicationError) as exc:
            logger.debug("Fix for %s failed", record.file_path, exc_info=True)
            self.display.append_output(f"Failed to fix {record.file_path}: {exc}\n")
            return FixResult(
                file_path=record.file_path,
                outcome=FixOutcome.FAILED,
                error=str(exc) or type(exc).__name__,
            )

    async def _apply(self, record: FixRecord) -> FixResult:
        target = self.resolve_path(record.file_path)

        if not target.exists():
            self.display.append_output(f"{record.file_path} does not exist. Creating it...\n")
            await asyncio.to_thread(_create_empty_file, target)

        original = await asyncio.to_thread(target.read_text, encoding="utf-8")

        self.display.append_output(f"Asking {self.client.label} to fix {record.file_path}...\n")
        response = await self.client.complete(build_fix_messages(record, original))
        proposed = extract_fixed_code(response)

        # The extracted code is trimmed, so compare the content as it would be written too
        if not proposed or proposed == original or ensure_trailing_newline(proposed) == original:
            self.display.append_output(f"No changes proposed for {record.file_path}.\n")
            return FixResult(file_path=record.file_path, outcome=FixOutcome.UNCHANGED)

        if not self.auto_apply:
            confirmed = await self.gate.confirm(record.file_path, original, proposed)
            if not confirmed:
                self.display.append_output(f"Skipped {record.file_path}.\n")
                return FixResult(file_path=record.file_path, outcome=FixOutcome.DECLINED)

        self.display.append_output(f"Writing fixed content to {record.file_path}...\n")
        await asyncio.to_thread(
            target.write_text, ensure_trailing_newline(proposed), encoding="utf-8"
        )
        return FixResult(file_path=record.file_path, outcome=FixOutcome.APPLIED)
