"""Data models for fixloop."""

from fixloop.models.config_models import Config
from fixloop.models.context_models import CachedAnalysis, RepoContext
from fixloop.models.fix_models import FixOutcome, FixRecord, FixResult, FixRunSummary
from fixloop.models.message_models import ChatMessage

__all__ = [
    "CachedAnalysis",
    "ChatMessage",
    "Config",
    "FixOutcome",
    "FixRecord",
    "FixResult",
    "FixRunSummary",
    "RepoContext",
]
