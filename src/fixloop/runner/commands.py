"""Async subprocess helpers that gather the context for an analysis."""

from __future__ import annotations

import asyncio
import codecs
import logging
import os
from typing import TYPE_CHECKING, Callable

from fixloop.models import Config, RepoContext
from fixloop.runner.exceptions import CommandError

if TYPE_CHECKING:
    from fixloop.ui.display import DisplaySink

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096
GIT_DIFF_ARGS = ("git", "diff", "--staged")


async def execute_command(
    command: str,
    cwd: str | None = None,
    on_data: Callable[[str], None] | None = None,
) -> str:
    """Run a shell command and return its combined stdout/stderr.

    Output is decoded incrementally and handed to on_data as it arrives.
    FORCE_COLOR is set so test runners keep their colors when piped.

    Raises:
        CommandError: If the command exits with a non-zero code.
    """
    proc = await asyncio.create_subprocess_shell(
        command,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.STDOUT,
        cwd=cwd,
        env={**os.environ, "FORCE_COLOR": "1"},
    )

    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    parts: list[str] = []

    def _handle(text: str) -> None:
        if not text:
            return
        parts.append(text)
        if on_data is not None:
            on_data(text)

    while True:
        data = await proc.stdout.read(READ_CHUNK_SIZE)
        if not data:
            break
        _handle(decoder.decode(data))
    _handle(decoder.decode(b"", final=True))

    exit_code = await proc.wait()
    output = "".join(parts)
    if exit_code != 0:
        raise CommandError(command, exit_code, output)
    return output


async def run_test_command(config: Config, display: DisplaySink) -> str:
    """Run the test command, mirroring its output into the display.

    A failing test run is the normal case here, so a non-zero exit is not
    an error: the failure text becomes the test output.
    """
    logger.debug("Running test command: %s", config.test_command)

    def _on_data(data: str) -> None:
        display.append_output(data)
        logger.debug("Received %d bytes from tests", len(data))

    try:
        return await execute_command(config.test_command, cwd=config.cwd, on_data=_on_data)
    except CommandError as exc:
        return str(exc)


async def serialize_repository(config: Config) -> str:
    """Run the repository serialization command and return its output."""
    result = await execute_command(config.serialize, cwd=config.cwd)
    logger.debug("Serialized repository size: %d", len(result))
    return result


async def get_git_diff(config: Config) -> str:
    """Return the staged git diff, or an empty string if git fails."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *GIT_DIFF_ARGS,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=config.cwd,
        )
        stdout, stderr = await proc.communicate()
    except OSError as exc:
        logger.debug("Git diff error: %s", exc)
        return ""

    if proc.returncode != 0:
        logger.debug("Git diff error: %s", stderr.decode("utf-8", errors="replace").strip())
        return ""

    diff = stdout.decode("utf-8", errors="replace")
    logger.debug("Git diff:\n%s", diff)
    return diff


async def load_repo_context(config: Config, display: DisplaySink) -> RepoContext:
    """Serialize the repo, run the tests and read the git diff concurrently."""
    repo_structure, test_output, git_diff = await asyncio.gather(
        serialize_repository(config),
        run_test_command(config, display),
        get_git_diff(config),
    )
    return RepoContext(
        test_output=test_output,
        repo_structure=repo_structure,
        git_diff=git_diff,
    )
