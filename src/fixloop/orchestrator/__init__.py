"""LangGraph orchestrator package for the fixloop pipeline."""

from fixloop.orchestrator.cache import AnalysisCache
from fixloop.orchestrator.exceptions import GraphBuildError, OrchestratorError
from fixloop.orchestrator.graph import build_graph, route_fix
from fixloop.orchestrator.state import FixloopState, make_initial_state

__all__ = [
    "AnalysisCache",
    "FixloopState",
    "GraphBuildError",
    "OrchestratorError",
    "build_graph",
    "make_initial_state",
    "route_fix",
]
