"""Analysis and fix-application agents."""

from fixloop.agents.analyzer import Analyzer
from fixloop.agents.exceptions import (
    AgentError,
    AnalysisError,
    FixApplicationError,
    PathTraversalError,
)
from fixloop.agents.fix_applier import FixApplier, build_fix_messages, ensure_trailing_newline
from fixloop.agents.fix_parser import extract_fixed_code, normalize_fix_path, parse_fix_records
from fixloop.agents.fix_runner import FixRunner, describe_summary

__all__ = [
    "AgentError",
    "AnalysisError",
    "Analyzer",
    "FixApplicationError",
    "FixApplier",
    "FixRunner",
    "PathTraversalError",
    "build_fix_messages",
    "describe_summary",
    "ensure_trailing_newline",
    "extract_fixed_code",
    "normalize_fix_path",
    "parse_fix_records",
]
