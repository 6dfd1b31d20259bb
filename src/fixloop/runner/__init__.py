"""Subprocess glue: test command, repository serialization and git diff."""

from fixloop.runner.commands import (
    execute_command,
    get_git_diff,
    load_repo_context,
    run_test_command,
    serialize_repository,
)
from fixloop.runner.exceptions import CommandError, RunnerError
from fixloop.runner.test_files import find_test_files

__all__ = [
    "CommandError",
    "RunnerError",
    "execute_command",
    "find_test_files",
    "get_git_diff",
    "load_repo_context",
    "run_test_command",
    "serialize_repository",
]
