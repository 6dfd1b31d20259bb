"""Models for parsed fixes and their outcomes."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class FixRecord(BaseModel):
    """One proposed change to one file, parsed from an analysis response."""

    model_config = ConfigDict(frozen=False)

    file_path: str  # Relative path from repo root, leading separators stripped
    patch_body: str = ""  # Text between the fix start and end tags
    is_complete: bool = False  # True once the end tag was seen


class FixOutcome(str, Enum):
    """How a single fix record ended up."""

    APPLIED = "applied"
    UNCHANGED = "unchanged"
    DECLINED = "declined"
    FAILED = "failed"


class FixResult(BaseModel):
    """Per-file result of applying a fix record."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    outcome: FixOutcome
    error: str | None = None

    @property
    def applied(self) -> bool:
        return self.outcome == FixOutcome.APPLIED


class FixRunSummary(BaseModel):
    """Aggregate of all fix results for one analysis response."""

    total_files: int = 0
    files_modified: int = 0
    errors: int = 0
    declined: int = 0
    unchanged: int = 0
    success: bool = False
    results: list[FixResult] = Field(default_factory=list)

    @classmethod
    def from_results(cls, results: list[FixResult], auto_apply: bool) -> "FixRunSummary":
        """Count outcomes and decide whether the run succeeded.

        Any failed file makes the run unsuccessful. Otherwise an auto-apply
        run succeeds only if it modified something, while an interactive run
        where the user declined everything still counts as completed.
        """
        files_modified = sum(1 for r in results if r.outcome == FixOutcome.APPLIED)
        errors = sum(1 for r in results if r.outcome == FixOutcome.FAILED)
        declined = sum(1 for r in results if r.outcome == FixOutcome.DECLINED)
        unchanged = sum(1 for r in results if r.outcome == FixOutcome.UNCHANGED)

        if errors:
            success = False
        elif auto_apply:
            success = files_modified > 0
        else:
            success = True

        return cls(
            total_files=len(results),
            files_modified=files_modified,
            errors=errors,
            declined=declined,
            unchanged=unchanged,
            success=success,
            results=list(results),
        )
