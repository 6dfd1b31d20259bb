"""LangGraph orchestrator graph for the fixloop pipeline.

Wires context gathering, the analysis stage, the analysis cache and the fix
runner into a StateGraph.
"""

import logging
from typing import Awaitable, Callable

from langgraph.graph import END, START, StateGraph

from fixloop.agents.analyzer import Analyzer
from fixloop.agents.exceptions import AgentError
from fixloop.agents.fix_runner import FixRunner
from fixloop.models import RepoContext
from fixloop.orchestrator.cache import AnalysisCache
from fixloop.orchestrator.exceptions import GraphBuildError
from fixloop.orchestrator.state import FixloopState
from fixloop.runner.commands import load_repo_context
from fixloop.runner.exceptions import RunnerError
from fixloop.ui.display import DisplaySink


logger = logging.getLogger(__name__)

NodeFn = Callable[[FixloopState], Awaitable[dict]]


def make_route_cache(cache: AnalysisCache) -> Callable[[FixloopState], str]:
    """Factory: returns the router choosing between the cache and a fresh run.

    Returns "cached" only when --cache is set and a usable entry exists.
    """

    def route_cache(state: FixloopState) -> str:
        config = state["settings"]
        if config.cache and cache.load(config.test_command) is not None:
            return "cached"
        return "fresh"

    return route_cache


def make_restore_cache_node(cache: AnalysisCache, display: DisplaySink) -> NodeFn:
    """Factory: returns a node closure that restores context and analysis from the cache."""

    async def restore_cache_node(state: FixloopState) -> dict:
        config = state["settings"]
        entry = cache.load(config.test_command)
        if entry is None:
            return {"errors": ["restore_cache_node error: cache entry disappeared"]}

        display.append_output(f"Using cached analysis from {entry.created_at:%Y-%m-%d %H:%M:%S}\n")
        display.append_output(entry.context.test_output)
        return {
            "test_output": entry.context.test_output,
            "repo_structure": entry.context.repo_structure,
            "git_diff": entry.context.git_diff,
            "analysis": entry.analysis,
            "from_cache": True,
        }

    return restore_cache_node


def make_gather_context_node(display: DisplaySink) -> NodeFn:
    """Factory: returns a node closure that runs the tests, serializer and git diff.

    On error: returns {"errors": [str]}
    """

    async def gather_context_node(state: FixloopState) -> dict:
        try:
            context = await load_repo_context(state["settings"], display)
        except (RunnerError, OSError) as exc:
            return {"errors": [f"gather_context_node error: {exc}"]}
        return {
            "test_output": context.test_output,
            "repo_structure": context.repo_structure,
            "git_diff": context.git_diff,
        }

    return gather_context_node


def make_analyze_node(analyzer: Analyzer, cache: AnalysisCache) -> NodeFn:
    """Factory: returns a node closure that runs the analysis stage.

    The closure:
    1. Skips the call if gathering already failed
    2. Streams the analysis from the analysis model
    3. Saves context and analysis to the cache (a failed save is only logged)

    On error: returns {"errors": [str], "analysis": None}
    """

    async def analyze_node(state: FixloopState) -> dict:
        if state["errors"]:
            return {"errors": []}

        context = RepoContext(
            test_output=state["test_output"],
            repo_structure=state["repo_structure"],
            git_diff=state["git_diff"],
        )
        try:
            analysis = await analyzer.analyze(context)
        except (AgentError, OSError) as exc:
            return {"errors": [f"analyze_node error: {exc}"], "analysis": None}

        try:
            cache.save(state["settings"].test_command, context, analysis)
        except OSError as exc:
            logger.warning("Could not write analysis cache: %s", exc)

        return {"analysis": analysis, "from_cache": False}

    return analyze_node


def route_fix(state: FixloopState) -> str:
    """Route after the analysis: "abort" on errors, "fix" in fix mode, else "report"."""
    if state["errors"]:
        return "abort"
    if state["settings"].fix:
        return "fix"
    return "report"


def make_fix_node(fix_runner: FixRunner | None, display: DisplaySink) -> NodeFn:
    """Factory: returns a node closure that applies the fixes in the analysis.

    The live display is torn down first so diffs and prompts are readable.
    """

    async def fix_node(state: FixloopState) -> dict:
        display.destroy()
        if fix_runner is None:
            return {"errors": ["fix_node error: no fix runner configured"]}
        try:
            summary = await fix_runner.run(state["analysis"] or "")
        except AgentError as exc:
            return {"errors": [f"fix_node error: {exc}"]}
        return {"fix_summary": summary}

    return fix_node


def build_graph(
    analyzer: Analyzer,
    cache: AnalysisCache,
    display: DisplaySink,
    fix_runner: FixRunner | None = None,
):
    """Build and compile the fixloop StateGraph.

    Edge topology:
      START -> conditional(route_cache) -> {restore_cache_node, gather_context_node}
      gather_context_node -> analyze_node
      restore_cache_node, analyze_node -> conditional(route_fix) -> {fix_node, END}
      fix_node -> END

    Args:
        analyzer: Analysis stage bound to the analysis model.
        cache: Analysis cache for the working tree.
        display: Display sink shared by every stage.
        fix_runner: Fix runner bound to the apply model; required in fix mode.

    Returns:
        CompiledStateGraph ready to invoke with ainvoke().

    Raises:
        GraphBuildError: If graph construction fails.
    """
    try:
        graph = StateGraph(FixloopState)

        graph.add_node("restore_cache_node", make_restore_cache_node(cache, display))
        graph.add_node("gather_context_node", make_gather_context_node(display))
        graph.add_node("analyze_node", make_analyze_node(analyzer, cache))
        graph.add_node("fix_node", make_fix_node(fix_runner, display))

        graph.add_conditional_edges(
            START,
            make_route_cache(cache),
            {
                "cached": "restore_cache_node",
                "fresh": "gather_context_node",
            },
        )
        graph.add_edge("gather_context_node", "analyze_node")

        fix_routes = {
            "fix": "fix_node",
            "report": END,
            "abort": END,
        }
        graph.add_conditional_edges("restore_cache_node", route_fix, fix_routes)
        graph.add_conditional_edges("analyze_node", route_fix, fix_routes)

        graph.add_edge("fix_node", END)

        return graph.compile()

    except Exception as exc:
        raise GraphBuildError(f"Failed to build fixloop graph: {exc}") from exc
