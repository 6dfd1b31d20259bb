"""Runs every fix record of an analysis response and summarizes the outcome."""

import asyncio
import logging

from fixloop.agents.exceptions import FixApplicationError
from fixloop.agents.fix_applier import FixApplier
from fixloop.agents.fix_parser import parse_fix_records
from fixloop.constants import MAX_FILES_TO_FIX
from fixloop.models import FixOutcome, FixRecord, FixResult, FixRunSummary
from fixloop.ui.display import DisplaySink

logger = logging.getLogger(__name__)


def describe_summary(summary: FixRunSummary) -> str:
    """Explain a run's outcome, keeping "nothing to do", "all declined" and
    "errors" apart even though each can leave zero files modified."""
    if summary.total_files == 0:
        return "No applicable fixes were found in the analysis."

    lines: list[str] = []
    if summary.errors:
        failed = ", ".join(
            result.file_path for result in summary.results if result.outcome == FixOutcome.FAILED
        )
        lines.append(f"Errors occurred while fixing {summary.errors} file(s): {failed}")
    elif summary.files_modified == 0:
        if summary.declined == summary.total_files:
            lines.append("Fixes were available but all of them were declined.")
        elif summary.unchanged == summary.total_files:
            lines.append("The apply model proposed no changes.")
        else:
            lines.append(
                f"No files modified: {summary.declined} declined, "
                f"{summary.unchanged} without changes."
            )

    lines.append(f"{summary.files_modified} of {summary.total_files} files modified.")
    return "\n".join(lines)


class FixRunner:
    """Parses an analysis response and applies its fixes concurrently."""

    def __init__(
        self,
        applier: FixApplier,
        display: DisplaySink,
        auto_apply: bool = False,
        max_files: int = MAX_FILES_TO_FIX,
    ) -> None:
        self.applier = applier
        self.display = display
        self.auto_apply = auto_apply
        self.max_files = max_files

    async def run(self, analysis: str) -> FixRunSummary:
        """Apply every complete fix record in the analysis.

        Records for different files run together, records for the same file
        run one after another in source order; one record failing never
        stops the others.
        """
        records = parse_fix_records(analysis)

        if len(records) > self.max_files:
            logger.warning("Analysis proposed %d files; only the first %d are fixed", len(records), self.max_files)
            self.display.append_output(
                f"Analysis proposed {len(records)} files, fixing the first {self.max_files}.\n"
            )
            records = records[: self.max_files]

        self.display.append_output(f"Fixing {len(records)} files...\n")

        # Records naming the same file run in order so neither write is lost
        groups: dict[str, list[int]] = {}
        for index, record in enumerate(records):
            groups.setdefault(self._group_key(record), []).append(index)

        results: list[FixResult | None] = [None] * len(records)

        async def run_group(indices: list[int]) -> None:
            for index in indices:
                results[index] = await self._apply_one(records[index])

        await asyncio.gather(*(run_group(indices) for indices in groups.values()))

        summary = FixRunSummary.from_results(results, auto_apply=self.auto_apply)
        self.display.append_output(describe_summary(summary) + "\n")
        return summary

    def _group_key(self, record: FixRecord) -> str:
        try:
            return str(self.applier.resolve_path(record.file_path))
        except FixApplicationError:
            return record.file_path

    async def _apply_one(self, record: FixRecord) -> FixResult:
        try:
            return await self.applier.apply(record)
        except Exception as exc:
            logger.debug("Unexpected error fixing %s", record.file_path, exc_info=exc)
            return FixResult(
                file_path=record.file_path,
                outcome=FixOutcome.FAILED,
                error=str(exc) or type(exc).__name__,
            )
