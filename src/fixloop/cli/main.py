"""CLI entry point for fixloop."""
import argparse
import asyncio
import logging
import os
import sys
import traceback

from dotenv import load_dotenv

from fixloop.cli.config import ConfigurationError, load_config
from fixloop.constants import (
    DEFAULT_SERIALIZE_COMMAND,
    DEFAULT_SOURCE_FILE_PATTERN,
    DEFAULT_TEST_FILE_PATTERN,
    DEFAULT_TIMEOUT_SECONDS,
)
from fixloop.models import Config
from fixloop.orchestrator.exceptions import OrchestratorError
from fixloop.orchestrator.state import FixloopState
from fixloop.ui.display import DisplaySink

load_dotenv()

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_NO_CHANGES = 2
EXIT_PIPELINE_ERROR = 3
EXIT_UNEXPECTED = 5
EXIT_KEYBOARD_INTERRUPT = 130

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    parser = argparse.ArgumentParser(
        prog="fixloop",
        description="Run a test command and let an LLM diagnose (and optionally fix) the failures",
    )
    parser.add_argument(
        "test_command",
        nargs=argparse.REMAINDER,
        help="Test command and its arguments, after all options (for example: pytest tests/)",
    )
    parser.add_argument("--run", type=str, default=None, help="Run this command instead of the positional one")
    parser.add_argument("--fix", action="store_true", help="Ask for fixes and apply them")
    parser.add_argument(
        "--auto-apply",
        action="store_true",
        help="Apply fixes without asking for confirmation (with --fix)",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--serialize",
        type=str,
        default=DEFAULT_SERIALIZE_COMMAND,
        help=f"Repository serialization command (default: {DEFAULT_SERIALIZE_COMMAND})",
    )
    parser.add_argument("--system-prompt", type=str, default=None, help="Path to a system prompt file")
    parser.add_argument("--fix-prompt", type=str, default=None, help="Replacement fix-mode instructions")
    parser.add_argument("--hide-ui", action="store_true", help="Do not start the live two-pane display")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT_SECONDS,
        help=f"Model response timeout in seconds (default: {DEFAULT_TIMEOUT_SECONDS})",
    )
    parser.add_argument(
        "--test-file-pattern",
        nargs="+",
        default=list(DEFAULT_TEST_FILE_PATTERN),
        metavar="GLOB",
        help="Globs identifying test files named in the test output",
    )
    parser.add_argument(
        "--source-file-pattern",
        nargs="+",
        default=list(DEFAULT_SOURCE_FILE_PATTERN),
        metavar="GLOB",
        help="Globs identifying source files",
    )
    parser.add_argument("--cache", action="store_true", help="Reuse the cached analysis when present")
    return parser


def configure_logging(debug: bool) -> None:
    """Send log records to stderr, at DEBUG when --debug is set."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


async def run_pipeline(config: Config, display: DisplaySink) -> FixloopState:
    """Build every component for this run and invoke the graph.

    Imports are deferred so --help does not load openai or langgraph.
    """
    from fixloop.agents.analyzer import Analyzer
    from fixloop.agents.fix_applier import FixApplier
    from fixloop.agents.fix_runner import FixRunner
    from fixloop.llm import ANALYSIS_PROVIDER, APPLY_PROVIDER, ModelClient
    from fixloop.orchestrator.cache import AnalysisCache
    from fixloop.orchestrator.graph import build_graph
    from fixloop.orchestrator.state import make_initial_state
    from fixloop.ui.confirm import ConfirmationGate

    analysis_client = ModelClient(
        ANALYSIS_PROVIDER,
        config.api_key_for(ANALYSIS_PROVIDER),
        timeout=config.timeout,
        display=display,
    )
    analyzer = Analyzer(config, analysis_client, display)

    fix_runner = None
    if config.fix:
        apply_client = ModelClient(
            APPLY_PROVIDER,
            config.api_key_for(APPLY_PROVIDER),
            timeout=config.timeout,
        )
        applier = FixApplier(
            apply_client,
            display,
            root=config.cwd,
            auto_apply=config.auto_apply,
            gate=ConfirmationGate(console=display.console, display=display),
        )
        fix_runner = FixRunner(applier, display, auto_apply=config.auto_apply)

    graph = build_graph(
        analyzer=analyzer,
        cache=AnalysisCache(config.cwd),
        display=display,
        fix_runner=fix_runner,
    )
    return await graph.ainvoke(make_initial_state(config))


def determine_exit_code(result: dict) -> int:
    """Determine the exit code from the final pipeline state."""
    if result.get("errors"):
        return EXIT_PIPELINE_ERROR
    config = result.get("settings")
    if config is not None and config.fix:
        summary = result.get("fix_summary")
        if summary is None or summary.files_modified == 0:
            return EXIT_NO_CHANGES
    return EXIT_SUCCESS


def print_result(result: dict) -> None:
    """Print pipeline errors to stderr and, in analysis-only mode, the analysis to stdout."""
    errors = result.get("errors", [])
    if errors:
        print(f"\nErrors ({len(errors)}):", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        return

    config = result.get("settings")
    if config is not None and not config.fix and result.get("analysis"):
        print(result["analysis"])


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    try:
        config = load_config(args, os.environ)
    except ConfigurationError as exc:
        return _handle_error("Error", exc, args.debug, EXIT_INVALID_INPUT)

    display = DisplaySink(enabled=not config.hide_ui)
    try:
        try:
            display.initialize()
            result = asyncio.run(run_pipeline(config, display))
        finally:
            display.destroy()

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except OrchestratorError as exc:
        return _handle_error("Orchestrator error", exc, config.debug, EXIT_PIPELINE_ERROR)

    except Exception as exc:
        return _handle_error("Unexpected error", exc, config.debug, EXIT_UNEXPECTED)

    print_result(result)
    return determine_exit_code(result)


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
