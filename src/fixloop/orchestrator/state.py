"""State definition for the LangGraph fixloop pipeline."""

import operator
from typing import Annotated, TypedDict

from fixloop.models import Config, FixRunSummary


class FixloopState(TypedDict):
    """State for the fixloop pipeline.

    errors accumulates across nodes; every other field is overwritten.
    """

    settings: Config

    # Gathered context
    test_output: str
    repo_structure: str
    git_diff: str

    # Analysis
    analysis: str | None
    from_cache: bool

    # Fix mode
    fix_summary: FixRunSummary | None

    errors: Annotated[list[str], operator.add]


def make_initial_state(config: Config) -> FixloopState:
    """Create the initial pipeline state for one run."""
    return {
        "settings": config,
        "test_output": "",
        "repo_structure": "",
        "git_diff": "",
        "analysis": None,
        "from_cache": False,
        "fix_summary": None,
        "errors": [],
    }
