"""On-disk cache of the last repository context and analysis."""

import logging
from pathlib import Path

from pydantic import ValidationError

from fixloop.constants import CACHE_RELATIVE_PATH
from fixloop.models import CachedAnalysis, RepoContext

logger = logging.getLogger(__name__)


class AnalysisCache:
    """Reads and writes a single CachedAnalysis JSON file under the working tree."""

    def __init__(self, cwd: str | Path, relative_path: str = CACHE_RELATIVE_PATH) -> None:
        self.path = Path(cwd) / relative_path

    def load(self, test_command: str) -> CachedAnalysis | None:
        """Return the cached analysis for test_command, or None if unusable.

        A missing file, unreadable JSON, a schema mismatch or an entry for a
        different test command all count as a cache miss.
        """
        if not self.path.is_file():
            return None
        try:
            entry = CachedAnalysis.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            logger.warning("Cache invalid, regenerating... (%s)", exc)
            return None
        if entry.test_command != test_command:
            logger.info("Cached analysis is for '%s', regenerating", entry.test_command)
            return None
        return entry

    def save(self, test_command: str, context: RepoContext, analysis: str) -> CachedAnalysis:
        """Persist the context and analysis, replacing any previous entry."""
        entry = CachedAnalysis(test_command=test_command, analysis=analysis, context=context)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(entry.model_dump_json(indent=2), encoding="utf-8")
        logger.debug("Saved analysis cache to %s", self.path)
        return entry
